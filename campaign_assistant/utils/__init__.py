"""
Utility modules for the campaign assistant
"""

from .json_utils import strip_code_fences
from .llm_utils import (
    CLASSIFIER_CONFIG,
    GENERATOR_CONFIG,
    PERSONALIZATION_CONFIG,
    LLMConfig,
    get_llm,
)
from .logging_setup import setup_logging

__all__ = [
    "strip_code_fences",
    "CLASSIFIER_CONFIG",
    "GENERATOR_CONFIG",
    "PERSONALIZATION_CONFIG",
    "LLMConfig",
    "get_llm",
    "setup_logging",
]
