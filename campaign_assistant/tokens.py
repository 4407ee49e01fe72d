"""
Token substitution and personalization marker helpers for email content
"""

import html
import re
from typing import Optional

from pydantic import BaseModel

from .models import Candidate

PERSONALIZATION_START = "<!-- PERSONALIZATION_SECTION_START -->"
PERSONALIZATION_END = "<!-- PERSONALIZATION_SECTION_END -->"

DEFAULT_COMPANY_NAME = "Our Company"
DEFAULT_RECRUITER_NAME = "Your Recruiter"
DEFAULT_SKILL = "healthcare"

SUPPORTED_TOKENS = [
    "First Name",
    "Current Company",
    "Company Name",
    "Your Name",
    "Recruiter Name",
    "Skill",
]

_TOKEN_PATTERN = re.compile(r"\{\{(" + "|".join(re.escape(token) for token in SUPPORTED_TOKENS) + r")\}\}")
_SECTION_PATTERN = re.compile(
    re.escape(PERSONALIZATION_START) + r".*?" + re.escape(PERSONALIZATION_END),
    re.DOTALL,
)
_COMMENT_PATTERN = re.compile(r"<!--.*?-->", re.DOTALL)
_TAG_PATTERN = re.compile(r"<[^>]*>")


class TokenContext(BaseModel):
    """Values available when rendering tokens for a preview"""
    candidate: Optional[Candidate] = None
    company_name: Optional[str] = None
    recruiter_name: Optional[str] = None


def _token_values(context: TokenContext) -> dict:
    candidate = context.candidate
    recruiter = context.recruiter_name or DEFAULT_RECRUITER_NAME
    values = {
        "Company Name": context.company_name or DEFAULT_COMPANY_NAME,
        "Your Name": recruiter,
        "Recruiter Name": recruiter,
        "Skill": DEFAULT_SKILL,
    }
    if candidate is not None:
        name_parts = candidate.name.split()
        if name_parts:
            values["First Name"] = name_parts[0]
        if candidate.company:
            values["Current Company"] = candidate.company
        if candidate.skills:
            values["Skill"] = candidate.skills[0]
    return values


def substitute(content: str, context: Optional[TokenContext] = None) -> str:
    """
    Replace every recognized {{Token}} in content.

    Replacement is a single pass over the original text, so values that
    themselves look like tokens are never expanded again. Tokens without a
    value (e.g. {{First Name}} with no candidate) are left as they are.
    """
    if not content:
        return content
    values = _token_values(context or TokenContext())

    def _replace(match):
        return values.get(match.group(1), match.group(0))

    return _TOKEN_PATTERN.sub(_replace, content)


def has_personalization_section(content: Optional[str]) -> bool:
    """True when both marker literals are present"""
    if not content:
        return False
    return PERSONALIZATION_START in content and PERSONALIZATION_END in content


def count_personalization_sections(content: str) -> int:
    return len(_SECTION_PATTERN.findall(content or ""))


def replace_personalization_section(content: str, inner: str) -> str:
    """Replace the inner content of the first marked section, keeping the markers"""
    replacement = f"{PERSONALIZATION_START}{inner}{PERSONALIZATION_END}"
    return _SECTION_PATTERN.sub(lambda _: replacement, content, count=1)


def remove_personalization_sections(content: str) -> str:
    """Drop every marked section along with any stray marker"""
    content = _SECTION_PATTERN.sub("", content)
    return content.replace(PERSONALIZATION_START, "").replace(PERSONALIZATION_END, "")


def ensure_single_personalization_section(content: str, default_inner: str) -> str:
    """
    Make content carry exactly one well-formed marker pair.

    Content that already has exactly one pair and no stray markers is returned
    unchanged. Otherwise the first section's inner text is kept (or
    default_inner when there is none) and re-inserted once, before the
    closing cell of the email table when there is one.
    """
    sections = _SECTION_PATTERN.findall(content)
    if (
        len(sections) == 1
        and content.count(PERSONALIZATION_START) == 1
        and content.count(PERSONALIZATION_END) == 1
    ):
        return content

    inner = default_inner
    if sections:
        inner = sections[0][len(PERSONALIZATION_START):-len(PERSONALIZATION_END)]
    section = f"{PERSONALIZATION_START}{inner}{PERSONALIZATION_END}"

    cleaned = remove_personalization_sections(content)
    anchor = cleaned.rfind("</td>")
    if anchor == -1:
        return cleaned + section
    return cleaned[:anchor] + section + cleaned[anchor:]


def count_readable_words(content: str) -> int:
    """Count words of rendered text, ignoring tags, comments and entities"""
    if not content:
        return 0
    text = _COMMENT_PATTERN.sub(" ", content)
    text = _TAG_PATTERN.sub(" ", text)
    return len(html.unescape(text).split())
