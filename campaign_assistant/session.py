"""
A single campaign conversation: one draft, its history and its generation
"""

import asyncio
import logging
from typing import Iterable, Optional

from .exceptions import DraftConsumedError
from .models import AssistantMessage, AssistantResponse, CampaignDraft, CompanyCollateral, GeneratedCampaign

logger = logging.getLogger(__name__)


class ConversationSession:
    """
    Owns one draft for the length of a conversation.

    Turns, generation and reset are serialized with a lock: a second message sent
    while a turn is in flight waits, then runs against the draft the first
    turn produced, so a slower response can never overwrite newer state.
    The draft is consumed by the first successful generation.
    """

    def __init__(
        self,
        assistant,
        company_name: Optional[str] = None,
        recruiter_name: Optional[str] = None,
        recent_searches: Iterable[str] = (),
    ):
        self.assistant = assistant
        self.company_name = company_name
        self.recruiter_name = recruiter_name
        self.recent_searches = list(recent_searches)
        self._lock = asyncio.Lock()
        self._clear()

    def _clear(self) -> None:
        self.draft = CampaignDraft(company_name=self.company_name, recruiter_name=self.recruiter_name)
        self.history: list[AssistantMessage] = []
        self.is_complete = False
        self.consumed = False

    async def reset(self) -> None:
        """Start over with an empty draft once any running turn or generation has finished"""
        async with self._lock:
            self._clear()
            logger.info("[Session] Draft reset")

    async def submit(self, user_input: str) -> AssistantResponse:
        async with self._lock:
            if self.consumed:
                raise DraftConsumedError("This campaign draft has already been generated")

            response = await self.assistant.aprocess_user_input(
                user_input, self.history, self.draft, self.recent_searches
            )
            self.history.append(AssistantMessage(type="user", content=user_input))
            self.history.append(AssistantMessage(type="assistant", content=response.message))
            self.draft = response.draft
            self.is_complete = response.is_complete
            logger.info(f"[Session] Next step: {response.next_step.value}")
            return response

    async def generate(self, generator, collateral: Iterable[CompanyCollateral] = ()) -> GeneratedCampaign:
        """
        Generate the campaign and consume the draft.

        NoGuidelineError leaves the draft untouched so the user can adjust the goal.
        """
        async with self._lock:
            if self.consumed:
                raise DraftConsumedError("This campaign draft has already been generated")
            campaign = await asyncio.to_thread(generator.generate, self.draft, list(collateral))
            self.consumed = True
            logger.info(f"[Session] ✓ Draft consumed into {len(campaign.email_steps)} step(s)")
            return campaign
