"""
Recruiting Campaign Assistant Package
"""

from .assistant import CampaignAssistant
from .editor import StepEditor
from .generator import CampaignGenerator
from .models import AssistantResponse, CampaignDraft, EmailStep, GeneratedCampaign
from .personalization import PersonalizationService
from .session import ConversationSession

__all__ = [
    "CampaignAssistant",
    "StepEditor",
    "CampaignGenerator",
    "AssistantResponse",
    "CampaignDraft",
    "EmailStep",
    "GeneratedCampaign",
    "PersonalizationService",
    "ConversationSession",
]
