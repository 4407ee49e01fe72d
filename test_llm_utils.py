import logging

import pytest

from campaign_assistant.utils import setup_logging, strip_code_fences
from campaign_assistant.utils.llm_utils import CLASSIFIER_CONFIG, LLMConfig, get_llm


def test_missing_groq_key(monkeypatch):
    monkeypatch.setenv("USE_OPEN_AI_MODEL", "false")
    monkeypatch.delenv("GROQ_API_KEY", raising=False)

    with pytest.raises(ValueError, match="GROQ_API_KEY"):
        get_llm(CLASSIFIER_CONFIG)


def test_missing_openai_key(monkeypatch):
    monkeypatch.setenv("USE_OPEN_AI_MODEL", "true")
    monkeypatch.delenv("OPEN_AI_KEY", raising=False)

    with pytest.raises(ValueError, match="OPEN_AI_KEY"):
        get_llm()


def test_groq_client_does_not_retry(monkeypatch):
    monkeypatch.setenv("USE_OPEN_AI_MODEL", "false")
    monkeypatch.setenv("GROQ_API_KEY", "test-key")
    monkeypatch.setenv("LLM_REQUEST_TIMEOUT", "12")

    llm = get_llm(LLMConfig(temperature=0.2, max_tokens=300, model="test-model"))

    assert llm.model_name == "test-model"
    assert llm.max_tokens == 300
    assert llm.max_retries == 0
    assert llm.request_timeout == 12.0


def test_strip_code_fences():
    assert strip_code_fences("```json\n{\"a\": 1}\n```") == '{"a": 1}'
    assert strip_code_fences("  <p>plain</p> ") == "<p>plain</p>"


def test_setup_logging_quiets_http_clients(monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", list(root.handlers))
    monkeypatch.setattr(root, "level", root.level)
    monkeypatch.setenv("LOG_LEVEL", "debug")

    setup_logging()

    assert root.level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
