"""
Static catalog of campaign examples used as structural guidelines for generation
"""

import re
from typing import Optional

from ..models import CampaignExample, CampaignType, SequenceAndExamples


def _example(example_id, campaign_type, goal, steps, duration, examples, collateral):
    return CampaignExample(
        id=example_id,
        campaign_type=campaign_type,
        goal=goal,
        sequence_and_examples=SequenceAndExamples(steps=steps, duration=duration, examples=examples),
        collateral_to_use=collateral,
    )


CAMPAIGN_EXAMPLES = (
    _example(
        "talent-community-building",
        CampaignType.NURTURE,
        "Build a talent community of healthcare professionals who want to hear about future opportunities",
        4,
        14,
        [
            "Welcome to our talent community",
            "Meet the team behind our care",
            "Career paths that grow with you",
            "Stay connected for upcoming openings",
        ],
        ["who_we_are", "mission_statements", "benefits", "talent_community_link"],
    ),
    _example(
        "passive-candidate-nurture",
        CampaignType.NURTURE,
        "Nurture passive candidates with industry insights and employer brand stories until they are ready to move",
        5,
        21,
        [
            "Industry trends worth knowing",
            "A day in the life on our units",
            "How we support professional growth",
            "Benefits our clinicians value most",
            "Let's talk when the timing is right",
        ],
        ["who_we_are", "newsletters", "benefits", "career_site_link"],
    ),
    _example(
        "new-graduate-nurture",
        CampaignType.NURTURE,
        "Nurture new graduates and early career nurses with residency programs and onboarding support",
        4,
        14,
        [
            "Congratulations on your graduation",
            "Inside our nurse residency program",
            "How we support your first year",
            "Start your career with us",
        ],
        ["who_we_are", "mission_statements", "benefits", "career_site_link"],
    ),
    _example(
        "skills-education-enrichment",
        CampaignType.ENRICHMENT,
        "Share educational content that helps candidates build clinical skills and earn certifications",
        4,
        14,
        [
            "Free continuing education resources",
            "Certification paths in high demand specialties",
            "Clinical skills spotlight",
            "Keep learning with us",
        ],
        ["newsletters", "mission_statements", "benefits", "career_site_link"],
    ),
    _example(
        "career-growth-enrichment",
        CampaignType.ENRICHMENT,
        "Enrich candidate profiles by sharing career development guides and collecting updated job preferences",
        3,
        10,
        [
            "Your next career move starts here",
            "Tell us what matters to you",
            "Opportunities matched to your goals",
        ],
        ["who_we_are", "mission_statements", "career_site_link"],
    ),
    _example(
        "keep-warm-silver-medalists",
        CampaignType.KEEP_WARM,
        "Keep warm silver medalist and previously interviewed candidates engaged between openings",
        3,
        30,
        [
            "Thank you for staying in touch",
            "What's new at our hospitals",
            "New roles that fit your background",
        ],
        ["who_we_are", "newsletters", "dei_statements", "talent_community_link"],
    ),
    _example(
        "keep-warm-pipeline-check-in",
        CampaignType.KEEP_WARM,
        "Stay in touch with pipeline candidates through periodic check-ins and company updates",
        3,
        21,
        [
            "Checking in from our team",
            "Recent news from our organization",
            "Still interested in hearing from us?",
        ],
        ["who_we_are", "newsletters", "benefits", "career_site_link"],
    ),
    _example(
        "reengage-inactive-candidates",
        CampaignType.REENGAGE,
        "Reengage inactive candidates who have not responded in months with new opportunities",
        3,
        10,
        [
            "It's been a while",
            "New opportunities since we last spoke",
            "Is now a better time?",
        ],
        ["who_we_are", "mission_statements", "benefits", "career_site_link"],
    ),
)

# A goal must share at least this much with an example to count as a match
MIN_RELEVANCE_SCORE = 1

# Bonus awarded when the goal names the example's campaign type
TYPE_KEYWORD_BONUS = 2

TYPE_KEYWORDS = {
    CampaignType.NURTURE: ["nurtur"],
    CampaignType.ENRICHMENT: ["enrich", "educat", "skill", "learn", "certif"],
    CampaignType.KEEP_WARM: ["keep warm", "keep-warm", "warm", "in touch", "silver", "check in", "check-in"],
    CampaignType.REENGAGE: ["reengag", "re-engag", "inactive", "reconnect", "dormant", "lapsed", "win back"],
}

STOPWORDS = {
    "a", "an", "the", "and", "or", "to", "of", "for", "with", "in", "on", "at", "by", "from",
    "our", "we", "who", "that", "this", "i", "my", "me", "want", "need", "is", "are", "be",
    "it", "into", "through", "until", "they", "them", "their", "have", "has", "not",
    "campaign", "email", "candidate",
}

_WORD_PATTERN = re.compile(r"[a-z0-9']+")


def _stem(word: str) -> str:
    if word.endswith("ies") and len(word) > 4:
        return word[:-3] + "y"
    if word.endswith("ing") and len(word) > 5:
        return word[:-3]
    if word.endswith("s") and not word.endswith("ss") and len(word) > 3:
        return word[:-1]
    return word


def _keywords(text: str) -> set:
    words = _WORD_PATTERN.findall(text.lower().replace("-", " "))
    stems = {_stem(word) for word in words}
    return {stem for stem in stems if stem and stem not in STOPWORDS}


def find_example_by_id(example_id: Optional[str]) -> Optional[CampaignExample]:
    """Return the catalog example with the given id, or None"""
    if not example_id:
        return None
    for example in CAMPAIGN_EXAMPLES:
        if example.id == example_id:
            return example
    return None


def score_example(goal: str, example: CampaignExample) -> int:
    """
    Score how well a goal fits a catalog example.

    One point per distinct goal keyword found in the example's id, goal or
    type, plus TYPE_KEYWORD_BONUS when the goal names the example's type.
    """
    if not goal:
        return 0
    vocabulary = _keywords(" ".join([example.id, example.goal, example.campaign_type.value]))
    score = len(_keywords(goal) & vocabulary)

    lowered = goal.lower()
    if any(keyword in lowered for keyword in TYPE_KEYWORDS[example.campaign_type]):
        score += TYPE_KEYWORD_BONUS
    return score


def _rank(goal: str):
    best, best_score = None, -1
    for example in CAMPAIGN_EXAMPLES:
        score = score_example(goal, example)
        # Strictly greater so the earlier catalog entry wins ties
        if score > best_score:
            best, best_score = example, score
    return best, best_score


def find_example_by_goal(goal: Optional[str]) -> Optional[CampaignExample]:
    """Best scoring example for the goal, or None when nothing is relevant enough"""
    if not goal or not goal.strip():
        return None
    best, best_score = _rank(goal)
    if best_score < MIN_RELEVANCE_SCORE:
        return None
    return best


def match_example(goal: Optional[str]) -> CampaignExample:
    """
    Best scoring example for the goal, falling back to the closest available one.

    Used when a goal is first captured: a draft never carries a goal without a
    guideline example attached.
    """
    best, _ = _rank(goal or "")
    return best
