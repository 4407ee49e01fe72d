"""
Clients for the external campaign store.

Store calls never raise: every outcome comes back as {"data": ..., "error": ...}
with exactly one of the two set.
"""

import os
import uuid
from typing import Any, Optional, Protocol

import httpx
from dotenv import load_dotenv

load_dotenv()

CAMPAIGN_STORE_URL = os.getenv("CAMPAIGN_STORE_URL", "http://localhost:54321/rest/v1")
CAMPAIGN_STORE_API_KEY = os.getenv("CAMPAIGN_STORE_API_KEY")


class CampaignStore(Protocol):
    async def create_campaign(self, record: dict, steps: list) -> dict:
        ...

    async def update_campaign(self, campaign_id: str, record: dict, steps: list) -> dict:
        ...


class HttpCampaignStore:
    """Campaign store reached over a JSON HTTP API"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or CAMPAIGN_STORE_URL).rstrip("/")
        self.api_key = api_key or CAMPAIGN_STORE_API_KEY
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> dict:
        headers = {
            "accept": "application/json",
            "content-type": "application/json",
            "user-agent": "Campaign-Assistant/1.0",
        }
        if self.api_key:
            headers["authorization"] = f"Bearer {self.api_key}"
            headers["apikey"] = self.api_key
        return headers

    async def _send(self, method: str, path: str, payload: dict) -> dict:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.request(method, url, headers=self._headers(), json=payload, timeout=self.timeout)
                response.raise_for_status()
                data = response.json() if response.content else {}
                return {"data": data.get("data", data) if isinstance(data, dict) else data, "error": None}

        except httpx.HTTPStatusError as e:
            return {"data": None, "error": f"HTTP error {e.response.status_code}: {e.response.text}"}
        except httpx.RequestError as e:
            return {"data": None, "error": f"Request error: {e}"}
        except ValueError as e:
            return {"data": None, "error": f"Invalid response: {e}"}

    async def create_campaign(self, record: dict, steps: list) -> dict:
        return await self._send("POST", "/campaigns", {"campaign": record, "steps": steps})

    async def update_campaign(self, campaign_id: str, record: dict, steps: list) -> dict:
        return await self._send("PUT", f"/campaigns/{campaign_id}", {"campaign": record, "steps": steps})


class InMemoryCampaignStore:
    """Process-local store used by the CLI, local servers and tests"""

    def __init__(self):
        self.campaigns: dict[str, dict[str, Any]] = {}

    async def create_campaign(self, record: dict, steps: list) -> dict:
        campaign_id = str(uuid.uuid4())
        self.campaigns[campaign_id] = {"id": campaign_id, **record, "steps": list(steps)}
        return {"data": self.campaigns[campaign_id], "error": None}

    async def update_campaign(self, campaign_id: str, record: dict, steps: list) -> dict:
        if campaign_id not in self.campaigns:
            return {"data": None, "error": f"Campaign {campaign_id} not found"}
        # Status and stats belong to the stored campaign, not to the edit
        stored = self.campaigns[campaign_id]
        stored.update({key: value for key, value in record.items() if key not in ("status", "stats")})
        stored["steps"] = list(steps)
        return {"data": stored, "error": None}
