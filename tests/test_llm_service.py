from __future__ import annotations

import asyncio

import httpx
import openai
import pytest

from src.config.llm_config import LlmConfig
from src.models.chat_message import ConversationMessage
from src.models.enums import MessageRole
from src.services.llm_service import LLMService, build_chat_model, is_auth_failure
from src.utils.error_handler import ProviderAuthError, ProviderError

from conftest import RaisingChatModel

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
_CONVERSATION = [ConversationMessage.from_text(MessageRole.USER, "Show revenue")]


def _status_error(cls: type[openai.APIStatusError], status_code: int) -> openai.APIStatusError:
    return cls("provider said no", response=httpx.Response(status_code, request=_REQUEST), body=None)


def test_generate_returns_model_text(recording_model) -> None:
    recording_model.reply = '{"txtResponse": "hello"}'
    service = LLMService(llm=recording_model)

    assert asyncio.run(service.generate(_CONVERSATION)) == '{"txtResponse": "hello"}'
    assert len(recording_model.calls) == 1


def test_generate_respects_disabled_json_mode(recording_model) -> None:
    config = LlmConfig(LLM_API_KEY="sk-test", LLM_JSON_MODE=False)
    service = LLMService(llm_config=config, llm=recording_model)

    asyncio.run(service.generate(_CONVERSATION))

    assert "response_format" not in recording_model.calls[0]["kwargs"]


@pytest.mark.parametrize(
    "error",
    [
        _status_error(openai.AuthenticationError, 401),
        _status_error(openai.PermissionDeniedError, 403),
        RuntimeError("[403] PERMISSION_DENIED: API key not valid"),
    ],
)
def test_authentication_failures_map_to_provider_auth_error(error: Exception) -> None:
    service = LLMService(llm=RaisingChatModel(error=error))

    with pytest.raises(ProviderAuthError) as excinfo:
        asyncio.run(service.generate(_CONVERSATION))

    assert excinfo.value.status_code == 401
    assert excinfo.value.to_body() == {
        "error": "Authentication Error",
        "details": "Invalid API key or authentication failed",
    }
    assert excinfo.value.__cause__ is error


def test_other_provider_failures_map_to_provider_error() -> None:
    error = _status_error(openai.RateLimitError, 429)
    service = LLMService(llm=RaisingChatModel(error=error))

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(service.generate(_CONVERSATION))

    assert excinfo.value.status_code == 500
    assert excinfo.value.details == "API Error"
    assert "provider said no" in excinfo.value.message


def test_is_auth_failure_ignores_unrelated_errors() -> None:
    assert is_auth_failure(ValueError("boom")) is False


def test_build_chat_model_forwards_configuration() -> None:
    config = LlmConfig(
        LLM_API_KEY="sk-test",
        LLM_MODEL="gpt-4o",
        LLM_TEMPERATURE=0.2,
        LLM_MAX_TOKENS=1024,
        LLM_BASE_URL="https://llm.internal/v1",
    )

    model = build_chat_model(config)

    assert model.model_name == "gpt-4o"
    assert model.temperature == 0.2
    assert model.max_tokens == 1024
    assert model.openai_api_base == "https://llm.internal/v1"
    assert model.max_retries == 0
