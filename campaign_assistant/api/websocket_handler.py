"""
WebSocket endpoint handlers for the campaign assistant
"""

import asyncio
import logging
import os

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from ..assistant import CampaignAssistant
from ..constants.conversation import FALLBACK_RESPONSES
from ..editor import save_campaign
from ..exceptions import CampaignAssistantError
from ..generator import CampaignGenerator
from ..models import Candidate, CampaignData, CompanyCollateral, ConversationStep
from ..personalization import PersonalizationService
from ..session import ConversationSession
from ..store import HttpCampaignStore, InMemoryCampaignStore
from ..tokens import TokenContext, substitute
from .connection_manager import ConnectionManager

logger = logging.getLogger(__name__)


class CampaignServices:
    """LLM-backed services and the store, created on first use"""

    def __init__(self):
        self.assistant = None
        self.generator = None
        self.personalizer = None
        self.store = None

    def get_assistant(self) -> CampaignAssistant:
        if self.assistant is None:
            self.assistant = CampaignAssistant.from_env()
        return self.assistant

    def get_generator(self) -> CampaignGenerator:
        if self.generator is None:
            self.generator = CampaignGenerator.from_env()
        return self.generator

    def get_personalizer(self) -> PersonalizationService:
        if self.personalizer is None:
            self.personalizer = PersonalizationService.from_env()
        return self.personalizer

    def get_store(self):
        if self.store is None:
            self.store = HttpCampaignStore() if os.getenv("CAMPAIGN_STORE_URL") else InMemoryCampaignStore()
        return self.store


# Global connection manager
manager = ConnectionManager()

# Global services
services = CampaignServices()


def _timestamp() -> float:
    return asyncio.get_running_loop().time()


def _new_session(client_id: str) -> ConversationSession:
    context = manager.get_context(client_id)
    session = ConversationSession(
        services.get_assistant(),
        company_name=context.get("company_name"),
        recruiter_name=context.get("recruiter_name"),
        recent_searches=context.get("recent_searches", []),
    )
    manager.set_session(client_id, session)
    return session


def _collateral(client_id: str) -> list:
    items = manager.get_context(client_id).get("collateral", [])
    collateral = []
    for item in items:
        try:
            collateral.append(CompanyCollateral.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping invalid collateral for client {client_id}: {e.error_count()} error(s)")
    return collateral


async def websocket_endpoint(websocket: WebSocket, client_id: str):
    """
    Main WebSocket endpoint for client connections

    Args:
        websocket: WebSocket connection
        client_id: Unique client identifier
    """
    await manager.connect(client_id, websocket)

    welcome = FALLBACK_RESPONSES[ConversationStep.GOAL]
    await manager.send_message(client_id, {
        "type": "assistant",
        "message": welcome["message"],
        "suggestions": welcome["suggestions"],
        "next_step": ConversationStep.GOAL.value,
        "timestamp": _timestamp(),
    })

    try:
        while True:
            data = await websocket.receive_json()
            message_type = data.get("type")

            if message_type == "handshake":
                manager.set_context(client_id, {
                    "company_name": data.get("company_name"),
                    "recruiter_name": data.get("recruiter_name"),
                    "recent_searches": data.get("recent_searches", []),
                    "collateral": data.get("collateral", []),
                    "user_id": data.get("user_id"),
                    "project_id": data.get("project_id"),
                })
                manager.sessions.pop(client_id, None)

            elif message_type == "user_message":
                user_message = data.get("message", "")

                await manager.send_message(client_id, {
                    "type": "user",
                    "message": user_message,
                    "timestamp": _timestamp(),
                })

                # The session lock keeps turns in order while the loop keeps receiving
                asyncio.create_task(process_user_message(client_id, user_message))

            elif message_type == "save_campaign":
                await handle_save_campaign(client_id, data)

            elif message_type == "preview_step":
                await handle_preview_step(client_id, data)

            elif message_type == "reset":
                session = manager.get_session(client_id)
                if session is not None:
                    await session.reset()

                await manager.send_message(client_id, {
                    "type": "assistant",
                    "message": "All set! Let's start fresh. What would you like to create?",
                    "suggestions": welcome["suggestions"],
                    "next_step": ConversationStep.GOAL.value,
                    "timestamp": _timestamp(),
                })

    except WebSocketDisconnect:
        manager.disconnect(client_id)
    except Exception as e:
        logger.exception(f"Error with client {client_id}: {e}")
        manager.disconnect(client_id)


async def process_user_message(client_id: str, user_message: str):
    """Run one conversation turn and, once the draft is confirmed, generate the campaign"""
    try:
        session = manager.get_session(client_id) or _new_session(client_id)
        response = await session.submit(user_message)

        await manager.send_message(client_id, {
            "type": "assistant",
            "message": response.message,
            "suggestions": response.suggestions,
            "next_step": response.next_step.value,
            "draft": response.draft.model_dump(mode="json", by_alias=True),
            "timestamp": _timestamp(),
        })

        if not response.is_complete:
            return

        await manager.send_message(client_id, {
            "type": "status",
            "message": "Generating your campaign...",
            "timestamp": _timestamp(),
        })
        campaign = await session.generate(services.get_generator(), _collateral(client_id))

        await manager.send_message(client_id, {
            "type": "campaign",
            "campaign_data": campaign.campaign_data.model_dump(mode="json", by_alias=True),
            "email_steps": [step.model_dump(mode="json", by_alias=True) for step in campaign.email_steps],
            "timestamp": _timestamp(),
        })

    except CampaignAssistantError as e:
        # NoGuidelineError and DraftConsumedError are shown to the user as is
        await manager.send_message(client_id, {
            "type": "error",
            "message": str(e),
            "timestamp": _timestamp(),
        })
    except Exception as e:
        logger.exception(f"Error processing message for client {client_id}: {e}")
        await manager.send_message(client_id, {
            "type": "error",
            "message": "Something went wrong while processing your message. Please try again.",
            "timestamp": _timestamp(),
        })


async def handle_save_campaign(client_id: str, data: dict):
    """Validate and persist the campaign the client has been editing"""
    context = manager.get_context(client_id)

    try:
        campaign_data = CampaignData.model_validate(data.get("campaign_data") or {})
    except ValidationError as e:
        await manager.send_message(client_id, {
            "type": "save_result",
            "success": False,
            "error": f"Invalid campaign data: {e.error_count()} invalid field(s)",
            "validation_errors": [],
            "timestamp": _timestamp(),
        })
        return

    outcome = await save_campaign(
        services.get_store(),
        campaign_data,
        data.get("email_steps") or [],
        data.get("user_id") or context.get("user_id"),
        data.get("project_id") or context.get("project_id"),
        campaign_id=data.get("campaign_id"),
    )

    await manager.send_message(client_id, {
        "type": "save_result",
        "success": outcome.ok,
        "data": outcome.data,
        "error": outcome.error,
        "validation_errors": outcome.validation_errors,
        "timestamp": _timestamp(),
    })


async def handle_preview_step(client_id: str, data: dict):
    """Render one email step for a test candidate, personalizing it when the step has a personalization section"""
    context = manager.get_context(client_id)

    try:
        candidate = Candidate.model_validate(data.get("candidate") or {})
    except ValidationError as e:
        await manager.send_message(client_id, {
            "type": "error",
            "message": f"Invalid preview candidate: {e.error_count()} invalid field(s)",
            "timestamp": _timestamp(),
        })
        return

    tokens = TokenContext(
        candidate=candidate,
        company_name=data.get("company_name") or context.get("company_name"),
        recruiter_name=data.get("recruiter_name") or context.get("recruiter_name"),
    )
    try:
        personalizer = services.get_personalizer()
    except ValueError as e:
        logger.error(f"Personalization unavailable for client {client_id}: {e}")
        await manager.send_message(client_id, {
            "type": "error",
            "message": "Failed to generate personalized preview",
            "timestamp": _timestamp(),
        })
        return

    content = await asyncio.to_thread(personalizer.personalize, data.get("content") or "", candidate, tokens)

    await manager.send_message(client_id, {
        "type": "preview",
        "step_id": data.get("step_id"),
        "subject": substitute(data.get("subject") or "", tokens),
        "content": content,
        "timestamp": _timestamp(),
    })
