"""
Constants module for the campaign assistant
"""

from .campaign_examples import (
    CAMPAIGN_EXAMPLES,
    MIN_RELEVANCE_SCORE,
    find_example_by_goal,
    find_example_by_id,
    match_example,
    score_example,
)
from .conversation import EMAIL_LENGTH_SPECS, FALLBACK_RESPONSES

__all__ = [
    "CAMPAIGN_EXAMPLES",
    "MIN_RELEVANCE_SCORE",
    "find_example_by_goal",
    "find_example_by_id",
    "match_example",
    "score_example",
    "EMAIL_LENGTH_SPECS",
    "FALLBACK_RESPONSES",
]
