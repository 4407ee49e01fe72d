"""
LangGraph workflow builder for a conversation turn
"""

from langgraph.graph import END, StateGraph

from .models import TurnState
from .nodes import (
    accept_llm_output,
    apply_heuristics,
    classify_input,
    finalize_turn,
    prepare_turn,
    route_after_classification,
)


def build_turn_workflow(llm, interpreter):
    """
    Build and compile the workflow that processes one user message

    Args:
        llm: Language model (or any runnable) used for classification
        interpreter: Keyword rules applied after the LLM

    Returns:
        Compiled workflow graph
    """
    workflow = StateGraph(TurnState)

    workflow.add_node("prepare_turn", prepare_turn)
    workflow.add_node("classify_input", lambda state: classify_input(state, llm))
    workflow.add_node("accept_llm_output", accept_llm_output)
    workflow.add_node("apply_heuristics", lambda state: apply_heuristics(state, interpreter))
    workflow.add_node("finalize_turn", finalize_turn)

    workflow.set_entry_point("prepare_turn")
    workflow.add_edge("prepare_turn", "classify_input")

    # Unusable LLM output goes straight to the keyword rules
    workflow.add_conditional_edges(
        "classify_input",
        route_after_classification,
        {
            "accept_llm_output": "accept_llm_output",
            "apply_heuristics": "apply_heuristics",
        }
    )

    # Rejected patches also fall through to the keyword rules
    workflow.add_edge("accept_llm_output", "apply_heuristics")
    workflow.add_edge("apply_heuristics", "finalize_turn")
    workflow.add_edge("finalize_turn", END)

    return workflow.compile()
