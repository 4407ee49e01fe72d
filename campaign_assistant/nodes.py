"""
Workflow nodes for one conversation turn
"""

import logging

from langchain_core.output_parsers import JsonOutputParser
from pydantic import ValidationError

from .constants.campaign_examples import find_example_by_id, match_example
from .constants.conversation import (
    ACKNOWLEDGEMENTS,
    FALLBACK_RESPONSES,
    MAX_SEARCH_SUGGESTIONS,
    RECENT_SEARCH_AUDIENCE_MESSAGE,
    RECENT_SEARCH_SUGGESTION,
    REVIEW_SUGGESTIONS,
)
from .exceptions import ParseError
from .models import AssistantResponse, CampaignDraft, ClassifierOutput, ConversationStep, TurnState
from .prompts import CLASSIFIER_PROMPT_TEMPLATE, build_classifier_inputs
from .state_machine import OWNED_FIELDS, advance, next_step

logger = logging.getLogger(__name__)

DEFAULT_ASSISTANT_MESSAGE = "I'm here to help you create your campaign."

# Accept both field names and camelCase aliases in draft patches
_DRAFT_FIELDS = {}
for _name, _field in CampaignDraft.model_fields.items():
    _DRAFT_FIELDS[_name] = _name
    if _field.alias:
        _DRAFT_FIELDS[_field.alias] = _name


def with_guideline(draft: CampaignDraft) -> CampaignDraft:
    """Attach the catalog example for the draft's goal, or clear it when there is no goal"""
    if not draft.goal:
        if draft.matched_example_id is None and draft.type is None:
            return draft
        return draft.model_copy(update={"matched_example_id": None, "type": None})

    example = find_example_by_id(draft.matched_example_id) or match_example(draft.goal)
    if draft.matched_example_id == example.id and draft.type == example.campaign_type:
        return draft
    return draft.model_copy(update={"matched_example_id": example.id, "type": example.campaign_type})


def owned_patch(patch: dict, step: ConversationStep) -> dict:
    """Keep only the entries of a draft patch that the given step may write"""
    owned = OWNED_FIELDS[step]
    result = {}
    for key, value in (patch or {}).items():
        name = _DRAFT_FIELDS.get(key)
        if name in owned:
            result[name] = value
    return result


def merge_patch(draft: CampaignDraft, patch: dict) -> CampaignDraft:
    """Apply a snake_case patch to a draft, validating the result"""
    return CampaignDraft.model_validate({**draft.model_dump(), **patch})


def prepare_turn(state: TurnState) -> dict:
    """Work out which step the turn answers and make sure a goal carries its example"""
    draft = state["draft"]
    step = next_step(draft)
    logger.info(f"[Turn] Step: {step.value}")
    return {
        "step": step,
        "working_draft": with_guideline(draft),
        "llm_output": None,
        "llm_failed": False,
        "heuristic_fired": False,
        "complete": False,
    }


def classify_input(state: TurnState, llm) -> dict:
    """Ask the LLM to classify the input and extract draft fields"""
    logger.info("[Classifier] Sending turn to LLM...")

    parser = JsonOutputParser()
    chain = CLASSIFIER_PROMPT_TEMPLATE | llm | parser

    try:
        result = chain.invoke(build_classifier_inputs(
            state["user_input"],
            state.get("history", []),
            state["working_draft"],
            state.get("recent_searches", []),
        ))
        if not isinstance(result, dict):
            raise ParseError("Classifier response is not a JSON object", operation="classify")
        output = ClassifierOutput.model_validate(result)
        logger.info(f"[Classifier] ✓ Response parsed, LLM next step: {output.next_step}")
        return {"llm_output": output}
    except Exception as e:
        logger.warning(f"[Classifier] ✗ Falling back to keyword rules: {e}")
        return {"llm_output": None, "llm_failed": True}


def route_after_classification(state: TurnState) -> str:
    if state.get("llm_failed"):
        return "apply_heuristics"
    return "accept_llm_output"


def accept_llm_output(state: TurnState) -> dict:
    """Merge the fields the LLM extracted for the current step into the draft"""
    step = state["step"]
    output = state["llm_output"]
    patch = owned_patch(output.campaign_draft, step)

    # Context is always the raw input, whatever the model made of it
    if step == ConversationStep.CONTEXT and "additional_context" in patch:
        patch["additional_context"] = state["user_input"]

    try:
        draft = with_guideline(merge_patch(state["working_draft"], patch))
    except ValidationError as e:
        logger.warning(f"[Classifier] ✗ Draft patch rejected: {e.error_count()} invalid field(s)")
        return {"llm_output": None, "llm_failed": True}

    if patch:
        logger.info(f"[Classifier] Accepted fields: {', '.join(sorted(patch))}")

    complete = step == ConversationStep.REVIEW and output.is_complete
    return {"working_draft": draft, "complete": complete}


def apply_heuristics(state: TurnState, interpreter) -> dict:
    """Fill the current step's field from keyword rules when it is still unset"""
    step = state["step"]
    draft = state["working_draft"]
    user_input = state["user_input"]

    patch = owned_patch(interpreter.interpret(user_input, step, draft), step)
    fired = False
    if patch:
        draft = with_guideline(merge_patch(draft, patch))
        fired = True
        logger.info(f"[Heuristics] Captured: {', '.join(sorted(patch))}")

    complete = state.get("complete", False)
    if step == ConversationStep.REVIEW and not complete and interpreter.is_confirmation(user_input):
        complete = True
        fired = True
        logger.info("[Heuristics] Review confirmed")

    return {"working_draft": draft, "complete": complete, "heuristic_fired": fired}


def _acknowledgement(step: ConversationStep, draft: CampaignDraft) -> str:
    if step == ConversationStep.PERSONALIZATION:
        key = "personalization_enabled" if draft.enable_personalization else "personalization_disabled"
        return ACKNOWLEDGEMENTS[key]
    return ACKNOWLEDGEMENTS[step].format(
        target_audience=draft.target_audience,
        tone=draft.tone.value if draft.tone else "",
        email_length=draft.email_length.value,
    )


def _search_suggestions(recent_searches) -> list:
    return [RECENT_SEARCH_SUGGESTION.format(search=search) for search in list(recent_searches)[:MAX_SEARCH_SUGGESTIONS]]


def _llm_step(output: ClassifierOutput):
    try:
        return ConversationStep(output.next_step)
    except ValueError:
        return None


def finalize_turn(state: TurnState) -> dict:
    """Decide the next step and build the response shown to the user"""
    step = state["step"]
    before = state["draft"]
    draft = state["working_draft"]
    output = state.get("llm_output")
    recent_searches = state.get("recent_searches", [])

    following = advance(step, draft, state.get("complete", False))

    if state.get("heuristic_fired"):
        message = _acknowledgement(step, draft)
        suggestions = list(FALLBACK_RESPONSES[following]["suggestions"])
        if following == ConversationStep.REVIEW:
            suggestions = list(REVIEW_SUGGESTIONS)
        if following == ConversationStep.AUDIENCE and recent_searches:
            suggestions = _search_suggestions(recent_searches)
    elif output is None or _llm_step(output) != following:
        if output is not None:
            logger.info(f"[Turn] LLM suggested '{output.next_step}', using '{following.value}'")
        message = FALLBACK_RESPONSES[following]["message"]
        suggestions = list(FALLBACK_RESPONSES[following]["suggestions"])
        if following == ConversationStep.AUDIENCE and recent_searches:
            suggestions = _search_suggestions(recent_searches)
    else:
        message = output.message or DEFAULT_ASSISTANT_MESSAGE
        suggestions = list(output.suggestions)
        if following == ConversationStep.AUDIENCE and recent_searches and not suggestions:
            suggestions = _search_suggestions(recent_searches)
            message = RECENT_SEARCH_AUDIENCE_MESSAGE

    previous = before.model_dump(mode="json")
    draft_patch = {
        key: value
        for key, value in draft.model_dump(mode="json").items()
        if previous.get(key) != value
    }

    logger.info(f"[Turn] ✓ {step.value} -> {following.value}")
    response = AssistantResponse(
        message=message,
        suggestions=suggestions,
        draft_patch=draft_patch,
        next_step=following,
        is_complete=following == ConversationStep.GENERATE,
        draft=draft,
    )
    return {"response": response}
