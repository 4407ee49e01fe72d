"""
Campaign generation from a completed draft
"""

import logging
from typing import Iterable, Optional

from langchain_core.output_parsers import JsonOutputParser

from .constants.campaign_examples import find_example_by_goal, find_example_by_id
from .constants.conversation import EMAIL_LENGTH_SPECS, TONE_SIGNATURES
from .exceptions import NoGuidelineError, ParseError
from .models import (
    CampaignData,
    CampaignDraft,
    CampaignExample,
    CompanyCollateral,
    DelayUnit,
    EmailLength,
    EmailStep,
    GeneratedCampaign,
    GenerationOutput,
    StepType,
    Tone,
)
from .prompts import GENERATION_PROMPT_TEMPLATE, build_generation_inputs
from .tokens import (
    PERSONALIZATION_END,
    PERSONALIZATION_START,
    count_readable_words,
    ensure_single_personalization_section,
    remove_personalization_sections,
)
from .utils.llm_utils import GENERATOR_CONFIG, get_llm

logger = logging.getLogger(__name__)

CAMPAIGN_NAME_LIMIT = 50
FALLBACK_COLLATERAL_LIMIT = 150
DEFAULT_STEP_CONTENT = "Email content here..."
DEFAULT_CONTEXT_TEXT = "We have exciting opportunities that align with your background and career goals."

_P = '<p style="color: #555; font-size: 16px; margin: 0 0 15px 0;">'
_P_SPACED = '<p style="color: #555; font-size: 16px; margin: 15px 0;">'
_STRONG = '<strong style="color: #333;">'

DEFAULT_PERSONALIZATION_INNER = (
    _P_SPACED + "Your experience with {{Skill}} at {{Current Company}} would be valuable in our team.</p>"
)

# Personalized paragraph for each position in the fallback sequence; the last entry repeats
FALLBACK_PERSONALIZATION = [
    "Your experience at " + _STRONG + "{{Current Company}}</strong> caught my attention, particularly your background in healthcare.",
    "Your skills in {{Skill}} would be valuable to our team at {{Company Name}}.",
    "Your professional journey at {{Current Company}} shows the kind of expertise we're looking for.",
]

FALLBACK_CALLS_TO_ACTION = [
    "Would you be interested in exploring opportunities with us?",
    "I'd love to discuss how your experience at " + _STRONG + "{{Current Company}}</strong> could be valuable to our team.",
    "Would you be available for a brief conversation this week?",
]

# Content collateral used by the fallback, by step position
FALLBACK_COLLATERAL_POSITIONS = {
    0: "who_we_are",
    1: "mission_statements",
    2: "benefits",
}


def campaign_name_from_goal(goal: Optional[str]) -> str:
    goal = goal or "Untitled campaign"
    if len(goal) > CAMPAIGN_NAME_LIMIT:
        return goal[:CAMPAIGN_NAME_LIMIT] + "..."
    return goal


def build_campaign_data(draft: CampaignDraft, example: CampaignExample, name: Optional[str] = None) -> CampaignData:
    """Campaign record fields; everything except the name comes from the draft and example"""
    return CampaignData(
        name=name or campaign_name_from_goal(draft.goal),
        type=example.campaign_type,
        target_audience=draft.target_audience,
        campaign_goal=draft.goal,
        tone=draft.tone,
        email_length=draft.email_length,
        company_name=draft.company_name,
        recruiter_name=draft.recruiter_name,
        content_sources=list(example.collateral_to_use),
        ai_instructions=draft.additional_context,
        enable_personalization=bool(draft.enable_personalization),
    )


def _delay(value, default: int) -> int:
    try:
        delay = int(value)
    except (TypeError, ValueError):
        return default
    return delay if delay > 0 else default


def normalize_steps(raw_steps: Iterable[dict]) -> list:
    """Turn model output into valid steps: sequential ids, defaults and the send schedule"""
    steps = []
    for index, raw in enumerate(raw_steps):
        raw = raw if isinstance(raw, dict) else {}
        step_type = raw.get("type")
        if step_type not in (StepType.EMAIL.value, StepType.CONNECTION.value):
            step_type = StepType.EMAIL
        if index == 0:
            delay, delay_unit = 0, DelayUnit.IMMEDIATELY
        else:
            delay, delay_unit = _delay(raw.get("delay"), index * 2), DelayUnit.BUSINESS_DAYS

        steps.append(EmailStep(
            id=f"step-{index + 1}",
            type=step_type,
            subject=str(raw.get("subject") or f"Follow-up {index + 1}"),
            content=str(raw.get("content") or DEFAULT_STEP_CONTENT),
            delay=delay,
            delay_unit=delay_unit,
        ))
    return steps


def enforce_personalization(steps: list, enabled: bool) -> list:
    """One marked section per step when enabled, none at all when disabled"""
    result = []
    for step in steps:
        if enabled:
            content = ensure_single_personalization_section(step.content, DEFAULT_PERSONALIZATION_INNER)
        else:
            content = remove_personalization_sections(step.content)
        result.append(step.model_copy(update={"content": content}))
    return result


def check_word_counts(steps: list, email_length: EmailLength) -> list:
    """Log steps whose readable text falls outside the requested band; returns their ids"""
    band = EMAIL_LENGTH_SPECS[email_length]
    outside = []
    for step in steps:
        words = count_readable_words(step.content)
        if words < band["min_words"] or (band["max_words"] is not None and words > band["max_words"]):
            outside.append(step.id)
            logger.warning(f"[Generator] {step.id} has {words} words, expected {band['range']}")
    return outside


def _collateral_by_type(collateral) -> dict:
    found = {}
    for item in collateral:
        found.setdefault(item.type, item)
    return found


def _link(item: Optional[CompanyCollateral]) -> str:
    if item is None:
        return ""
    return item.links[0] if item.links else item.content.strip()


def _fallback_content(index, title, draft, collateral, signature) -> str:
    greeting = signature["greeting"]
    if not greeting.endswith("!"):
        greeting += ","
    sign_off, _, signer = signature["closing"].partition(", ")

    parts = [
        '<table width="100%" cellpadding="0" cellspacing="0" style="max-width: 600px; margin: 0 auto; '
        'font-family: Arial, sans-serif; line-height: 1.6;"><tr><td style="padding: 20px;">',
        f'<h2 style="color: #333; font-size: 20px; margin: 0 0 15px 0;">{greeting}</h2>',
        f"{_P}{title} at {_STRONG}{{{{Company Name}}}}</strong>.</p>",
        f"{_P}{draft.additional_context or DEFAULT_CONTEXT_TEXT}</p>",
    ]

    collateral_type = FALLBACK_COLLATERAL_POSITIONS.get(index)
    item = collateral.get(collateral_type) if collateral_type else None
    if item is not None and item.content:
        snippet = item.content[:FALLBACK_COLLATERAL_LIMIT]
        if collateral_type == "benefits":
            parts.append(
                '<div style="margin: 15px 0;">'
                f'<p style="color: #555; font-size: 16px; margin: 0 0 10px 0;">{_STRONG}Our benefits include:</strong></p>'
                '<ul style="color: #555; font-size: 16px; margin: 0; padding-left: 20px;">'
                f'<li style="margin-bottom: 8px;">{snippet}</li></ul></div>'
            )
        else:
            parts.append(f"{_P}{snippet}</p>")

    if draft.enable_personalization:
        text = FALLBACK_PERSONALIZATION[min(index, len(FALLBACK_PERSONALIZATION) - 1)]
        parts.append(f"{PERSONALIZATION_START}{_P_SPACED}{text}</p>{PERSONALIZATION_END}")

    parts.append(f"{_P_SPACED}{FALLBACK_CALLS_TO_ACTION[min(index, len(FALLBACK_CALLS_TO_ACTION) - 1)]}</p>")

    talent_link = _link(collateral.get("talent_community_link"))
    career_link = _link(collateral.get("career_site_link"))
    if talent_link and index == 2:
        parts.append(
            f'<div style="margin: 20px 0;"><a href="{talent_link}" style="display: inline-block; padding: 10px 20px; '
            'background-color: #0066cc; color: white; text-decoration: none; border-radius: 4px; '
            'font-weight: bold;">Join Our Talent Community</a></div>'
        )
    elif career_link:
        parts.append(
            f"{_P_SPACED}Learn more about opportunities at {{{{Company Name}}}}: "
            f'<a href="{career_link}" style="color: #0066cc; text-decoration: none; font-weight: bold;">View Career Site</a></p>'
        )

    parts.append(
        f'<p style="color: #555; font-size: 16px; margin: 15px 0 0 0;">{sign_off},<br>{_STRONG}{signer}</strong></p>'
        "</td></tr></table>"
    )
    return "".join(parts)


def build_fallback_campaign(
    draft: CampaignDraft,
    example: CampaignExample,
    collateral: Iterable[CompanyCollateral] = (),
) -> GeneratedCampaign:
    """Deterministic campaign built from the example's subject line progression"""
    signature = TONE_SIGNATURES[draft.tone or Tone.PROFESSIONAL]
    by_type = _collateral_by_type(collateral)

    steps = []
    for index, title in enumerate(example.sequence_and_examples.examples):
        steps.append(EmailStep(
            id=f"step-{index + 1}",
            type=StepType.EMAIL,
            subject="{{First Name}}, " + title.lower(),
            content=_fallback_content(index, title, draft, by_type, signature),
            delay=0 if index == 0 else index * 2,
            delay_unit=DelayUnit.IMMEDIATELY if index == 0 else DelayUnit.BUSINESS_DAYS,
        ))

    return GeneratedCampaign(campaign_data=build_campaign_data(draft, example), email_steps=steps)


class CampaignGenerator:
    """Generates campaign data and email steps from a completed draft"""

    def __init__(self, llm):
        self.llm = llm

    @classmethod
    def from_env(cls) -> "CampaignGenerator":
        return cls(get_llm(GENERATOR_CONFIG))

    def resolve_example(self, draft: CampaignDraft) -> CampaignExample:
        """Example by id, then by goal text; raises NoGuidelineError when neither resolves"""
        example = find_example_by_id(draft.matched_example_id)
        if example is None:
            logger.info(f"[Generator] Falling back to goal-based matching for: {draft.goal!r}")
            example = find_example_by_goal(draft.goal)
        if example is None:
            raise NoGuidelineError(goal=draft.goal, matched_example_id=draft.matched_example_id)
        return example

    def _generate_with_llm(self, draft, example, collateral) -> GeneratedCampaign:
        chain = GENERATION_PROMPT_TEMPLATE | self.llm | JsonOutputParser()
        result = chain.invoke(build_generation_inputs(draft, example, collateral))
        if not isinstance(result, dict):
            raise ParseError("Generation response is not a JSON object", operation="generate")
        output = GenerationOutput.model_validate(result)

        name = output.campaign_data.get("name")
        return GeneratedCampaign(
            campaign_data=build_campaign_data(draft, example, name=name if isinstance(name, str) else None),
            email_steps=normalize_steps(output.email_steps),
        )

    def generate(self, draft: CampaignDraft, collateral: Iterable[CompanyCollateral] = ()) -> GeneratedCampaign:
        """
        Generate the campaign for a draft.

        Raises NoGuidelineError when the draft matches no catalog example. Any
        LLM or parsing failure after that produces the deterministic fallback.
        """
        example = self.resolve_example(draft)
        collateral = list(collateral)
        logger.info(f"[Generator] Using example '{example.id}' with {len(collateral)} collateral item(s)")

        try:
            campaign = self._generate_with_llm(draft, example, collateral)
            logger.info(f"[Generator] ✓ Generated {len(campaign.email_steps)} step(s)")
        except Exception as e:
            logger.warning(f"[Generator] ✗ Using fallback campaign: {e}")
            campaign = build_fallback_campaign(draft, example, collateral)

        steps = enforce_personalization(campaign.email_steps, bool(draft.enable_personalization))
        check_word_counts(steps, draft.email_length)
        return campaign.model_copy(update={"email_steps": steps})
