"""
Conversation state machine: which step a draft is in and which fields a turn may write
"""

from .models import CampaignDraft, ConversationStep

STEP_ORDER = [
    ConversationStep.GOAL,
    ConversationStep.AUDIENCE,
    ConversationStep.TONE,
    ConversationStep.CONTEXT,
    ConversationStep.PERSONALIZATION,
    ConversationStep.REVIEW,
    ConversationStep.GENERATE,
]

# Draft fields a turn answering each step is allowed to write
OWNED_FIELDS = {
    ConversationStep.GOAL: ("goal", "matched_example_id", "type"),
    ConversationStep.AUDIENCE: ("target_audience",),
    ConversationStep.TONE: ("tone", "email_length"),
    ConversationStep.CONTEXT: ("additional_context",),
    ConversationStep.PERSONALIZATION: ("enable_personalization",),
    ConversationStep.REVIEW: (),
    ConversationStep.GENERATE: (),
}


def next_step(draft: CampaignDraft) -> ConversationStep:
    """Step the conversation is in for the given draft"""
    if not draft.goal:
        return ConversationStep.GOAL
    if not draft.target_audience:
        return ConversationStep.AUDIENCE
    if draft.tone is None:
        return ConversationStep.TONE
    if not draft.additional_context:
        return ConversationStep.CONTEXT
    # None means "not asked yet", which is different from an explicit False
    if draft.enable_personalization is None:
        return ConversationStep.PERSONALIZATION
    return ConversationStep.REVIEW


def step_index(step: ConversationStep) -> int:
    return STEP_ORDER.index(step)


def advance(started_in: ConversationStep, draft_after: CampaignDraft, complete: bool = False) -> ConversationStep:
    """
    Step to move to after a turn.

    Turns only write the fields owned by the step they started in, so the
    result never comes before started_in. Completion only counts when it was
    confirmed from the review step.
    """
    step = next_step(draft_after)
    if complete and started_in == ConversationStep.REVIEW and step == ConversationStep.REVIEW:
        return ConversationStep.GENERATE
    return step
