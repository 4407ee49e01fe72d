"""
Per-candidate personalization of email previews
"""

import logging
from typing import Optional

from langchain_core.output_parsers import StrOutputParser

from .exceptions import ParseError
from .models import Candidate
from .prompts import PERSONALIZATION_PROMPT_TEMPLATE, build_personalization_inputs
from .tokens import (
    DEFAULT_COMPANY_NAME,
    TokenContext,
    has_personalization_section,
    replace_personalization_section,
    substitute,
)
from .utils.json_utils import strip_code_fences
from .utils.llm_utils import PERSONALIZATION_CONFIG, get_llm

logger = logging.getLogger(__name__)

PERSONALIZED_PARAGRAPH_STYLE = (
    "color: #555; font-size: 16px; margin: 15px 0; background-color: #f0f7ff; "
    "padding: 15px; border-left: 4px solid #0066cc; border-radius: 4px;"
)


class PersonalizationService:
    """Rewrites the personalization section of an email for one candidate"""

    def __init__(self, llm):
        self.llm = llm

    @classmethod
    def from_env(cls) -> "PersonalizationService":
        return cls(get_llm(PERSONALIZATION_CONFIG))

    def _paragraph(self, content: str, candidate: Candidate, company_name: str) -> str:
        chain = PERSONALIZATION_PROMPT_TEMPLATE | self.llm | StrOutputParser()
        paragraph = strip_code_fences(chain.invoke(build_personalization_inputs(content, candidate, company_name)))
        if not paragraph:
            raise ParseError("Empty personalization response", operation="personalize")
        if "<p" not in paragraph:
            paragraph = f'<p style="{PERSONALIZED_PARAGRAPH_STYLE}">{paragraph}</p>'
        return paragraph

    def personalize(self, content: str, candidate: Candidate, context: Optional[TokenContext] = None) -> str:
        """
        Personalized, token-substituted content for a candidate.

        Without a personalization section, or when the LLM call fails, this is
        plain token substitution of the original content.
        """
        context = (context or TokenContext()).model_copy(update={"candidate": candidate})
        if not has_personalization_section(content):
            logger.info("[Personalization] No personalization section, applying tokens only")
            return substitute(content, context)

        try:
            paragraph = self._paragraph(content, candidate, context.company_name or DEFAULT_COMPANY_NAME)
        except Exception as e:
            logger.warning(f"[Personalization] ✗ Using token substitution only for {candidate.name}: {e}")
            return substitute(content, context)

        logger.info(f"[Personalization] ✓ Personalized content for {candidate.name}")
        return substitute(replace_personalization_section(content, f"\n{paragraph}\n"), context)
