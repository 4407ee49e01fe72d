"""
Helpers for cleaning raw LLM text responses
"""

import re

_LEADING_FENCE = re.compile(r"^```[a-zA-Z]*\s*")
_TRAILING_FENCE = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence (```html, ```json or bare ```)"""
    text = text.strip()
    text = _LEADING_FENCE.sub("", text)
    text = _TRAILING_FENCE.sub("", text)
    return text.strip()
