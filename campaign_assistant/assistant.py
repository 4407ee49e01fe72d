"""
Conversation assistant that turns free text into a campaign draft
"""

import logging
from typing import Iterable, Optional

from .heuristics import Interpreter, KeywordInterpreter
from .models import AssistantMessage, AssistantResponse, CampaignDraft
from .utils.llm_utils import CLASSIFIER_CONFIG, get_llm
from .workflow import build_turn_workflow

logger = logging.getLogger(__name__)


class CampaignAssistant:
    """
    Runs one conversation turn at a time against a draft.

    The LLM classifies the input and extracts fields; keyword rules fill in
    whatever it missed. A failing or misbehaving LLM never surfaces as an
    error: the turn falls back to canned responses for the current step.
    """

    def __init__(self, llm, interpreter: Optional[Interpreter] = None):
        self.llm = llm
        self.interpreter = interpreter or KeywordInterpreter()
        self.workflow = build_turn_workflow(llm, self.interpreter)

    @classmethod
    def from_env(cls, interpreter: Optional[Interpreter] = None) -> "CampaignAssistant":
        return cls(get_llm(CLASSIFIER_CONFIG), interpreter)

    def _initial_state(self, user_input, history, draft, recent_searches) -> dict:
        return {
            "user_input": user_input,
            "history": list(history or []),
            "draft": draft or CampaignDraft(),
            "recent_searches": list(recent_searches or []),
        }

    def process_user_input(
        self,
        user_input: str,
        history: Iterable[AssistantMessage] = (),
        draft: Optional[CampaignDraft] = None,
        recent_searches: Iterable[str] = (),
    ) -> AssistantResponse:
        """Process one user message and return the response plus the updated draft"""
        logger.debug(f"[Assistant] Input: {user_input!r}")
        final_state = self.workflow.invoke(self._initial_state(user_input, history, draft, recent_searches))
        return final_state["response"]

    async def aprocess_user_input(
        self,
        user_input: str,
        history: Iterable[AssistantMessage] = (),
        draft: Optional[CampaignDraft] = None,
        recent_searches: Iterable[str] = (),
    ) -> AssistantResponse:
        final_state = await self.workflow.ainvoke(self._initial_state(user_input, history, draft, recent_searches))
        return final_state["response"]
