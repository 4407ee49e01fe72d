"""
Deterministic keyword rules that extract draft fields from raw user input.

These run after the LLM on every turn and only fill fields that are still
unset, so they act as a safety net when the LLM is unavailable or misses a
field. Any object with the same two methods as KeywordInterpreter can be
plugged into the assistant instead.
"""

import re
from typing import Protocol

from .constants.conversation import (
    AUDIENCE_KEYWORDS,
    DEFAULT_EMAIL_LENGTH,
    DEFAULT_TONE,
    EMAIL_LENGTH_KEYWORDS,
    EXPERIENCE_KEYWORDS,
    LOCATION_KEYWORDS,
    MIN_FREE_TEXT_LENGTH,
    PERSONALIZATION_KEYWORDS,
    REVIEW_CONFIRM_KEYWORDS,
    REVIEW_REJECT_KEYWORDS,
    TONE_KEYWORDS,
)
from .models import CampaignDraft, ConversationStep


class Interpreter(Protocol):
    def interpret(self, user_input: str, step: ConversationStep, draft: CampaignDraft) -> dict:
        """Return a draft patch (snake_case field names), empty when nothing is recognized"""
        ...

    def is_confirmation(self, user_input: str) -> bool:
        """Whether the input confirms the reviewed campaign"""
        ...


def _word_pattern(words) -> re.Pattern:
    return re.compile(r"\b(" + "|".join(re.escape(word) for word in words) + r")\b")


def _first_listed(lowered: str, keywords: dict):
    """Value of the highest priority keyword present in the text, or None"""
    for keyword, value in keywords.items():
        if re.search(r"\b" + re.escape(keyword), lowered):
            return value
    return None


class KeywordInterpreter:
    """Default interpreter based on keyword lists and input length"""

    def __init__(self):
        self._audience_pattern = _word_pattern(AUDIENCE_KEYWORDS + LOCATION_KEYWORDS + EXPERIENCE_KEYWORDS)
        self._confirm_pattern = _word_pattern(REVIEW_CONFIRM_KEYWORDS)

    def interpret(self, user_input: str, step: ConversationStep, draft: CampaignDraft) -> dict:
        text = user_input.strip()
        lowered = text.lower()

        if step == ConversationStep.GOAL:
            if not draft.goal and len(text) > MIN_FREE_TEXT_LENGTH:
                return {"goal": text}

        elif step == ConversationStep.AUDIENCE:
            if not draft.target_audience and text:
                if len(text) > MIN_FREE_TEXT_LENGTH or self._audience_pattern.search(lowered):
                    return {"target_audience": text}

        elif step == ConversationStep.TONE:
            if draft.tone is None:
                tone = _first_listed(lowered, TONE_KEYWORDS)
                email_length = _first_listed(lowered, EMAIL_LENGTH_KEYWORDS)
                if tone or email_length:
                    return {
                        "tone": tone or DEFAULT_TONE,
                        "email_length": email_length or DEFAULT_EMAIL_LENGTH,
                    }

        elif step == ConversationStep.CONTEXT:
            # Stored exactly as typed, surrounding whitespace included
            if not draft.additional_context and len(text) > MIN_FREE_TEXT_LENGTH:
                return {"additional_context": user_input}

        elif step == ConversationStep.PERSONALIZATION:
            if draft.enable_personalization is None and text:
                return {"enable_personalization": any(keyword in lowered for keyword in PERSONALIZATION_KEYWORDS)}

        return {}

    def is_confirmation(self, user_input: str) -> bool:
        lowered = user_input.strip().lower()
        if any(keyword in lowered for keyword in REVIEW_REJECT_KEYWORDS):
            return False
        return bool(self._confirm_pattern.search(lowered))
