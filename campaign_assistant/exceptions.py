"""Exceptions raised by the campaign assistant."""


class CampaignAssistantError(Exception):
    """Base exception for campaign assistant errors."""


class ExternalCallError(CampaignAssistantError):
    """Raised when a call to the LLM or the campaign store fails."""

    def __init__(self, message, operation=None):
        super().__init__(message)
        self.operation = operation


class ParseError(ExternalCallError):
    """Raised when the LLM returns output that cannot be parsed into the expected structure."""


class NoGuidelineError(CampaignAssistantError):
    """Raised when a draft does not resolve to any campaign example."""

    def __init__(self, goal=None, matched_example_id=None):
        message = "No matching campaign example found. Cannot proceed without a guideline."
        super().__init__(message)
        self.goal = goal
        self.matched_example_id = matched_example_id


class DraftConsumedError(CampaignAssistantError):
    """Raised when a draft that was already turned into a campaign is used again."""
