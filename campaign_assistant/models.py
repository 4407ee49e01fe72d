"""
Data models and state definitions for the campaign assistant
"""

from enum import Enum
from typing import Any, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CampaignType(str, Enum):
    NURTURE = "nurture"
    ENRICHMENT = "enrichment"
    KEEP_WARM = "keep-warm"
    REENGAGE = "reengage"


class Tone(str, Enum):
    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"
    CASUAL = "casual"
    FORMAL = "formal"


class EmailLength(str, Enum):
    SHORT = "short"
    CONCISE = "concise"
    MEDIUM = "medium"
    LONG = "long"


class ConversationStep(str, Enum):
    """Conversation states, in the order their fields are collected"""
    GOAL = "goal"
    AUDIENCE = "audience"
    TONE = "tone"
    CONTEXT = "context"
    PERSONALIZATION = "personalization"
    REVIEW = "review"
    GENERATE = "generate"


class StepType(str, Enum):
    EMAIL = "email"
    CONNECTION = "connection"


class DelayUnit(str, Enum):
    IMMEDIATELY = "immediately"
    BUSINESS_DAYS = "business days"


# Spoken variants that map onto a supported value
TONE_ALIASES = {"warm": "friendly"}
EMAIL_LENGTH_ALIASES = {"brief": "short", "detailed": "long"}


def _normalize_choice(value, aliases: dict):
    if isinstance(value, str):
        value = value.strip().lower()
        return aliases.get(value, value) or None
    return value


class CamelModel(BaseModel):
    """Base model accepting both snake_case names and the camelCase keys used by the LLM and frontend"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CampaignDraft(CamelModel):
    """Campaign settings accumulated turn by turn during the conversation"""
    goal: Optional[str] = Field(default=None, description="Free text campaign goal")
    matched_example_id: Optional[str] = Field(default=None, description="Id of the catalog example matched to the goal")
    type: Optional[CampaignType] = Field(default=None, description="Campaign type copied from the matched example")
    target_audience: Optional[str] = Field(default=None, description="Who should receive the campaign")
    tone: Optional[Tone] = None
    email_length: EmailLength = EmailLength.CONCISE
    additional_context: Optional[str] = Field(default=None, description="Verbatim user supplied context")
    enable_personalization: Optional[bool] = Field(
        default=None,
        description="Per-candidate personalization; None means the user has not been asked yet",
    )
    company_name: Optional[str] = None
    recruiter_name: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value):
        return _normalize_choice(value, {"keep warm": "keep-warm", "re-engage": "reengage"})

    @field_validator("tone", mode="before")
    @classmethod
    def _normalize_tone(cls, value):
        return _normalize_choice(value, TONE_ALIASES)

    @field_validator("email_length", mode="before")
    @classmethod
    def _normalize_email_length(cls, value):
        value = _normalize_choice(value, EMAIL_LENGTH_ALIASES)
        return EmailLength.CONCISE if value is None else value


class SequenceAndExamples(CamelModel):
    steps: int = Field(description="Number of emails in the sequence")
    duration: int = Field(description="Length of the sequence in days")
    examples: list[str] = Field(description="Subject line hints, in send order")


class CampaignExample(CamelModel):
    """Static catalog entry used as the structural guideline for generation"""
    model_config = ConfigDict(frozen=True)

    id: str
    campaign_type: CampaignType
    goal: str
    sequence_and_examples: SequenceAndExamples
    collateral_to_use: list[str] = Field(default_factory=list)


class EmailStep(CamelModel):
    """One scheduled message of a campaign sequence"""
    id: str
    type: StepType = StepType.EMAIL
    subject: str = ""
    content: str = ""
    delay: int = Field(default=0, ge=0)
    delay_unit: DelayUnit = DelayUnit.BUSINESS_DAYS


class Candidate(CamelModel):
    """Preview-only candidate context for token substitution"""
    name: str
    company: str = ""
    skills: list[str] = Field(default_factory=list)
    job_title: Optional[str] = None
    experience: Optional[int] = None


class CompanyCollateral(CamelModel):
    type: str = Field(description="Collateral tag, e.g. who_we_are, benefits, career_site_link")
    content: str = ""
    links: list[str] = Field(default_factory=list)


class AssistantMessage(CamelModel):
    type: str = Field(description="'user' or 'assistant'")
    content: str


class AssistantResponse(CamelModel):
    """Result of one conversation turn"""
    message: str
    suggestions: list[str] = Field(default_factory=list)
    draft_patch: dict[str, Any] = Field(default_factory=dict)
    next_step: ConversationStep
    is_complete: bool = False
    draft: CampaignDraft


class ClassifierOutput(CamelModel):
    """Structured output expected from the classification prompt"""
    message: str = ""
    suggestions: list[str] = Field(default_factory=list)
    campaign_draft: dict[str, Any] = Field(default_factory=dict)
    next_step: Optional[str] = None
    is_complete: bool = False

    @field_validator("campaign_draft", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return {} if value is None else value

    @field_validator("suggestions", mode="before")
    @classmethod
    def _suggestions_as_text(cls, value):
        if value is None:
            return []
        return [str(item) for item in value]


class GenerationOutput(CamelModel):
    """Structured output expected from the generation prompt"""
    campaign_data: dict[str, Any] = Field(default_factory=dict)
    email_steps: list[dict[str, Any]] = Field(min_length=1)


class CampaignData(CamelModel):
    name: Optional[str] = None
    type: Optional[CampaignType] = None
    target_audience: Optional[str] = None
    campaign_goal: Optional[str] = None
    tone: Optional[Tone] = None
    email_length: EmailLength = EmailLength.CONCISE
    company_name: Optional[str] = None
    recruiter_name: Optional[str] = None
    content_sources: list[str] = Field(default_factory=list)
    ai_instructions: Optional[str] = None
    enable_personalization: bool = False


class GeneratedCampaign(CamelModel):
    campaign_data: CampaignData
    email_steps: list[EmailStep]


class SaveOutcome(CamelModel):
    """Result of a save attempt; validation errors block the store call"""
    data: Optional[Any] = None
    error: Optional[str] = None
    validation_errors: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.error and not self.validation_errors


class TurnState(TypedDict, total=False):
    """State for the conversation turn workflow"""
    user_input: str
    history: list[AssistantMessage]
    recent_searches: list[str]
    draft: CampaignDraft  # Draft before this turn
    step: ConversationStep  # Step the turn is answering
    working_draft: CampaignDraft  # Draft as modified by this turn
    llm_output: Optional[ClassifierOutput]
    llm_failed: bool
    heuristic_fired: bool
    complete: bool
    response: AssistantResponse
