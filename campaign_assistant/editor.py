"""
Step editor: edits to a generated email sequence, validation and save
"""

import logging
import uuid
from typing import Iterable, Optional, Union

from .models import CampaignData, DelayUnit, EmailStep, SaveOutcome, StepType
from .store import CampaignStore
from .tokens import SUPPORTED_TOKENS, TokenContext, has_personalization_section, substitute

logger = logging.getLogger(__name__)

FOLLOW_UP_DELAY = 3
VALID_DELAY_UNITS = [unit.value for unit in DelayUnit]

NEW_STEP_SUBJECT = "Following up on our conversation"
NEW_STEP_CONTENT = (
    '<table width="100%" cellpadding="0" cellspacing="0" style="max-width: 600px; margin: 0 auto; '
    'font-family: Arial, sans-serif; line-height: 1.6;"><tr><td style="padding: 20px;">'
    '<h2 style="color: #333; font-size: 20px; margin: 0 0 15px 0;">Hi {{First Name}},</h2>'
    '<p style="color: #555; font-size: 16px; margin: 0 0 15px 0;">I wanted to follow up on our previous '
    'conversation about opportunities at <strong style="color: #333;">{{Company Name}}</strong>.</p>'
    '<p style="color: #555; font-size: 16px; margin: 0 0 15px 0;">We have some exciting new positions that '
    "might be a perfect fit for your background and career goals:</p>"
    '<ul style="color: #555; font-size: 16px; margin: 15px 0; padding-left: 20px;">'
    '<li style="margin-bottom: 8px;">Competitive compensation packages</li>'
    '<li style="margin-bottom: 8px;">Comprehensive benefits</li>'
    '<li style="margin-bottom: 8px;">Professional development opportunities</li></ul>'
    '<p style="color: #555; font-size: 16px; margin: 15px 0;">Would you be available for a brief call this week? '
    '<a href="#" style="color: #0066cc; text-decoration: none; font-weight: bold;">Schedule a conversation</a></p>'
    '<p style="color: #555; font-size: 16px; margin: 15px 0 0 0;">Best regards,<br>'
    '<strong style="color: #333;">{{Your Name}}</strong></p></td></tr></table>'
)

HTML_BLOCKS = {
    "button": (
        '<div style="margin: 20px 0;"><a href="#" style="display: inline-block; padding: 10px 20px; '
        'background-color: #0066cc; color: white; text-decoration: none; border-radius: 4px; '
        'font-weight: bold;">Click Here</a></div>'
    ),
    "list": (
        '<ul style="color: #555; font-size: 16px; margin: 15px 0; padding-left: 20px;">'
        '<li style="margin-bottom: 8px;">First item</li>'
        '<li style="margin-bottom: 8px;">Second item</li>'
        '<li style="margin-bottom: 8px;">Third item</li></ul>'
    ),
    "section": (
        '<div style="margin: 20px 0; padding: 15px; background-color: #f5f5f5; border-left: 4px solid #0066cc; '
        'border-radius: 4px;"><h3 style="color: #333; font-size: 18px; margin: 0 0 10px 0;">Section Heading</h3>'
        '<p style="color: #555; font-size: 16px; margin: 0;">Important information goes here.</p></div>'
    ),
    "quote": (
        '<blockquote style="margin: 20px 0; padding: 10px 20px; border-left: 4px solid #ccc; font-style: italic; '
        'color: #666;">"This is a testimonial or quote that adds credibility to your message."</blockquote>'
    ),
    "image": (
        '<div style="margin: 20px 0; text-align: center;"><img src="https://example.com/image.jpg" '
        'alt="Description of image" style="max-width: 100%; height: auto; border-radius: 4px;" />'
        '<p style="color: #777; font-size: 14px; margin-top: 5px;">Caption text</p></div>'
    ),
    "personalization": (
        "<!-- PERSONALIZATION_SECTION_START -->"
        '<p style="color: #555; font-size: 16px; margin: 15px 0;">Your experience with {{Skill}} at '
        "{{Current Company}} would be valuable in our team.</p>"
        "<!-- PERSONALIZATION_SECTION_END -->"
    ),
}

StepLike = Union[EmailStep, dict]


def apply_schedule(steps: list) -> list:
    """First step goes out immediately; every later step waits business days"""
    scheduled = []
    for index, step in enumerate(steps):
        if index == 0:
            update = {"delay": 0, "delay_unit": DelayUnit.IMMEDIATELY}
        elif step.delay_unit == DelayUnit.IMMEDIATELY:
            update = {"delay": step.delay or FOLLOW_UP_DELAY, "delay_unit": DelayUnit.BUSINESS_DAYS}
        else:
            update = {}
        scheduled.append(step.model_copy(update=update) if update else step)
    return scheduled


def _field(step: StepLike, name: str, alias: str):
    if isinstance(step, EmailStep):
        value = getattr(step, name)
        return value.value if isinstance(value, DelayUnit) else value
    return step.get(alias, step.get(name))


def validate_campaign(
    campaign_data: CampaignData,
    steps: Iterable[StepLike],
    user_id: Optional[str],
    project_id: Optional[str],
) -> list:
    """Every failed save rule, in a fixed order; empty when the campaign can be saved"""
    steps = list(steps or [])
    errors = []

    if not (campaign_data.name or "").strip():
        errors.append("Campaign name is required")
    if not campaign_data.type:
        errors.append("Campaign type is required")
    if not (campaign_data.target_audience or "").strip():
        errors.append("Target audience is required")
    if not (campaign_data.campaign_goal or "").strip():
        errors.append("Campaign goal is required")
    if not steps:
        errors.append("At least one email step is required")
    if not user_id:
        errors.append("User authentication required")
    if not project_id:
        errors.append("Project selection required")

    for index, step in enumerate(steps, start=1):
        if not str(_field(step, "subject", "subject") or "").strip():
            errors.append(f"Email step {index}: Subject is required")
        if not str(_field(step, "content", "content") or "").strip():
            errors.append(f"Email step {index}: Content is required")
        if _field(step, "delay_unit", "delayUnit") not in VALID_DELAY_UNITS:
            errors.append(f"Email step {index}: Invalid delay unit (must be 'immediately' or 'business days')")

    return errors


def build_campaign_record(campaign_data: CampaignData, user_id: str, project_id: str) -> dict:
    """Campaign record in the store's format"""
    return {
        "user_id": user_id,
        "project_id": project_id,
        "name": campaign_data.name.strip(),
        "type": campaign_data.type.value,
        "status": "draft",
        "target_audience": campaign_data.target_audience.strip(),
        "campaign_goal": campaign_data.campaign_goal.strip(),
        "content_sources": list(campaign_data.content_sources or []),
        "ai_instructions": (campaign_data.ai_instructions or "").strip() or None,
        "tone": campaign_data.tone.value if campaign_data.tone else None,
        "company_name": (campaign_data.company_name or "").strip(),
        "recruiter_name": (campaign_data.recruiter_name or "").strip(),
        "settings": {"enablePersonalization": bool(campaign_data.enable_personalization)},
        "stats": {"sent": 0, "opened": 0, "replied": 0},
    }


def serialize_steps(steps: Iterable[StepLike]) -> list:
    """Steps in the store's format, with a 1-based step_order"""
    serialized = []
    for index, step in enumerate(steps):
        delay_unit = _field(step, "delay_unit", "delayUnit")
        if delay_unit not in VALID_DELAY_UNITS:
            delay_unit = DelayUnit.IMMEDIATELY.value if index == 0 else DelayUnit.BUSINESS_DAYS.value
        try:
            delay = max(0, int(_field(step, "delay", "delay") or 0))
        except (TypeError, ValueError):
            delay = 0
        step_type = _field(step, "type", "type") or StepType.EMAIL.value
        serialized.append({
            "step_order": index + 1,
            "type": step_type.value if isinstance(step_type, StepType) else step_type,
            "subject": str(_field(step, "subject", "subject")).strip(),
            "content": str(_field(step, "content", "content")).strip(),
            "delay": delay,
            "delay_unit": delay_unit,
        })
    return serialized


async def save_campaign(
    store: CampaignStore,
    campaign_data: CampaignData,
    steps: Iterable[StepLike],
    user_id: Optional[str],
    project_id: Optional[str],
    campaign_id: Optional[str] = None,
) -> SaveOutcome:
    """
    Validate and persist a campaign.

    The store is not called at all when validation fails. Store failures come
    back as SaveOutcome.error rather than exceptions.
    """
    steps = list(steps or [])
    errors = validate_campaign(campaign_data, steps, user_id, project_id)
    if errors:
        logger.warning(f"[Editor] ✗ Validation failed: {errors}")
        return SaveOutcome(
            error=f"Please fix the following issues: {', '.join(errors)}",
            validation_errors=errors,
        )

    record = build_campaign_record(campaign_data, user_id, project_id)
    serialized = serialize_steps(steps)

    if campaign_id:
        logger.info(f"[Editor] Updating campaign {campaign_id} with {len(serialized)} step(s)")
        result = await store.update_campaign(campaign_id, record, serialized)
    else:
        logger.info(f"[Editor] Creating campaign with {len(serialized)} step(s)")
        result = await store.create_campaign(record, serialized)

    if result.get("error"):
        logger.error(f"[Editor] ✗ Store error: {result['error']}")
        return SaveOutcome(error=f"Failed to save campaign: {result['error']}")

    logger.info("[Editor] ✓ Campaign saved")
    return SaveOutcome(data=result.get("data"))


class StepEditor:
    """Ordered list of email steps being edited, plus the campaign fields they belong to"""

    def __init__(self, campaign_data: CampaignData, steps: Iterable[EmailStep] = ()):
        self.campaign_data = campaign_data
        self.steps = apply_schedule(list(steps))
        self.active_step_id = self.steps[0].id if self.steps else None

    def _index(self, step_id: str) -> int:
        for index, step in enumerate(self.steps):
            if step.id == step_id:
                return index
        raise KeyError(f"Unknown step: {step_id}")

    def _new_id(self) -> str:
        existing = {step.id for step in self.steps}
        candidate = f"step-{len(self.steps) + 1}"
        while candidate in existing:
            candidate = f"step-{uuid.uuid4().hex[:8]}"
        return candidate

    def get_step(self, step_id: str) -> EmailStep:
        return self.steps[self._index(step_id)]

    def add_step(self) -> EmailStep:
        first = not self.steps
        step = EmailStep(
            id=self._new_id(),
            type=StepType.EMAIL,
            subject=NEW_STEP_SUBJECT,
            content=NEW_STEP_CONTENT,
            delay=0 if first else FOLLOW_UP_DELAY,
            delay_unit=DelayUnit.IMMEDIATELY if first else DelayUnit.BUSINESS_DAYS,
        )
        self.steps.append(step)
        self.active_step_id = step.id
        return step

    def remove_step(self, step_id: str) -> None:
        index = self._index(step_id)
        del self.steps[index]
        self.steps = apply_schedule(self.steps)
        if self.steps:
            self.active_step_id = self.steps[max(0, index - 1)].id
        else:
            self.active_step_id = None

    def duplicate_step(self, step_id: str) -> EmailStep:
        """Copy a step and insert it right after the original"""
        index = self._index(step_id)
        source = self.steps[index]
        copy = source.model_copy(update={
            "id": f"step-{uuid.uuid4().hex[:8]}",
            "subject": f"{source.subject} (Copy)",
            "delay": FOLLOW_UP_DELAY,
            "delay_unit": DelayUnit.BUSINESS_DAYS,
        })
        self.steps.insert(index + 1, copy)
        self.steps = apply_schedule(self.steps)
        self.active_step_id = copy.id
        return copy

    def update_step(self, step_id: str, **fields) -> EmailStep:
        """Change fields of a step; raises pydantic's ValidationError for invalid values"""
        if "id" in fields:
            raise ValueError("Step ids cannot be changed")
        index = self._index(step_id)
        updated = EmailStep.model_validate({**self.steps[index].model_dump(), **fields})
        self.steps[index] = updated
        self.steps = apply_schedule(self.steps)
        return self.steps[index]

    def move_step(self, step_id: str, new_index: int) -> None:
        index = self._index(step_id)
        step = self.steps.pop(index)
        new_index = max(0, min(new_index, len(self.steps)))
        self.steps.insert(new_index, step)
        self.steps = apply_schedule(self.steps)

    def insert_token(self, step_id: str, token: str) -> EmailStep:
        if token not in SUPPORTED_TOKENS:
            raise ValueError(f"Unknown token: {token}")
        step = self.get_step(step_id)
        return self.update_step(step_id, content=step.content + "{{" + token + "}}")

    def insert_block(self, step_id: str, kind: str) -> EmailStep:
        """Append one of the HTML_BLOCKS to a step's content"""
        if kind not in HTML_BLOCKS:
            raise ValueError(f"Unknown block type: {kind}")
        step = self.get_step(step_id)
        if kind == "personalization" and has_personalization_section(step.content):
            raise ValueError(f"Step {step_id} already has a personalization section")
        return self.update_step(step_id, content=step.content + HTML_BLOCKS[kind])

    def preview(self, step_id: str, candidate=None) -> tuple:
        """Subject and content with tokens filled in for a candidate"""
        step = self.get_step(step_id)
        context = TokenContext(
            candidate=candidate,
            company_name=self.campaign_data.company_name,
            recruiter_name=self.campaign_data.recruiter_name,
        )
        return substitute(step.subject, context), substitute(step.content, context)

    def validate(self, user_id: Optional[str], project_id: Optional[str]) -> list:
        return validate_campaign(self.campaign_data, self.steps, user_id, project_id)

    async def save(
        self,
        store: CampaignStore,
        user_id: Optional[str],
        project_id: Optional[str],
        campaign_id: Optional[str] = None,
    ) -> SaveOutcome:
        return await save_campaign(store, self.campaign_data, self.steps, user_id, project_id, campaign_id)
