"""
Utility functions for LLM initialization
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# Seconds before an LLM request is abandoned and the caller falls back
DEFAULT_REQUEST_TIMEOUT = 60.0


@dataclass(frozen=True)
class LLMConfig:
    """Generation settings for one LLM call site"""
    temperature: float = 0.7
    max_tokens: Optional[int] = None
    model: Optional[str] = None  # Overrides OPEN_AI_MODEL / GROQ_MODEL when set
    timeout: Optional[float] = None  # Defaults to LLM_REQUEST_TIMEOUT


CLASSIFIER_CONFIG = LLMConfig(temperature=0.7, max_tokens=1000)
GENERATOR_CONFIG = LLMConfig(temperature=0.7, max_tokens=10000)
PERSONALIZATION_CONFIG = LLMConfig(temperature=0.7, max_tokens=200)


def _request_timeout(config: LLMConfig) -> float:
    if config.timeout is not None:
        return config.timeout
    return float(os.getenv("LLM_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT))


def get_llm(config: Optional[LLMConfig] = None):
    """
    Initialize and return the appropriate LLM based on environment configuration.

    Requests are never retried by the client: a failed or timed out call goes
    straight to the caller's deterministic fallback.

    Args:
        config: Generation settings for the call site (default: LLMConfig())

    Returns:
        LLM instance (either ChatOpenAI or ChatGroq)

    Environment Variables:
        USE_OPEN_AI_MODEL: "true" to use OpenAI, "false" to use Groq
        OPEN_AI_KEY: OpenAI API key (required if USE_OPEN_AI_MODEL=true)
        OPEN_AI_MODEL: OpenAI model name (e.g., "gpt-4o-mini")
        GROQ_API_KEY: Groq API key (required if USE_OPEN_AI_MODEL=false)
        GROQ_MODEL: Groq model name (e.g., "openai/gpt-oss-120b")
        LLM_REQUEST_TIMEOUT: Request timeout in seconds (default: 60)
    """
    config = config or LLMConfig()
    use_openai = os.getenv("USE_OPEN_AI_MODEL", "false").lower() == "true"
    timeout = _request_timeout(config)

    if use_openai:
        from langchain_openai import ChatOpenAI

        api_key = os.getenv("OPEN_AI_KEY")
        model_name = config.model or os.getenv("OPEN_AI_MODEL", "gpt-4o-mini")

        if not api_key:
            raise ValueError("OPEN_AI_KEY environment variable is required when USE_OPEN_AI_MODEL=true")

        return ChatOpenAI(
            temperature=config.temperature,
            model_name=model_name,
            openai_api_key=api_key,
            max_tokens=config.max_tokens,
            timeout=timeout,
            max_retries=0,
        )
    else:
        from langchain_groq import ChatGroq

        api_key = os.getenv("GROQ_API_KEY")
        model_name = config.model or os.getenv("GROQ_MODEL", "openai/gpt-oss-120b")

        if not api_key:
            raise ValueError("GROQ_API_KEY environment variable is required when USE_OPEN_AI_MODEL=false")

        return ChatGroq(
            temperature=config.temperature,
            model_name=model_name,
            groq_api_key=api_key,
            max_tokens=config.max_tokens,
            timeout=timeout,
            max_retries=0,
        )
