from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatResult

from src.services.finance_service import FinanceChatService
from src.services.llm_service import LLMService


class RecordingChatModel(BaseChatModel):
    """Chat model returning a fixed reply and remembering each call."""

    reply: str = ""
    calls: list[dict[str, Any]] = []

    @property
    def _llm_type(self) -> str:
        return "recording-fake"

    def _generate(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        run_manager: Any = None,
        **kwargs: Any,
    ) -> ChatResult:
        self.calls.append({"messages": messages, "kwargs": kwargs})
        return ChatResult(generations=[ChatGeneration(message=AIMessage(content=self.reply))])


class RaisingChatModel(BaseChatModel):
    """Chat model whose every call fails with ``error``."""

    error: Exception

    @property
    def _llm_type(self) -> str:
        return "raising-fake"

    def _generate(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        run_manager: Any = None,
        **kwargs: Any,
    ) -> ChatResult:
        raise self.error


def make_service(llm: BaseChatModel) -> FinanceChatService:
    return FinanceChatService(llm_service=LLMService(llm=llm))


@pytest.fixture
def recording_model() -> RecordingChatModel:
    return RecordingChatModel(reply="", calls=[])
