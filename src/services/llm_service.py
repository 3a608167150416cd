"""Service encapsulating interactions with the language model.

Uses LangChain's ChatOpenAI integration by default.  Any LangChain chat
model can be injected instead, which is how the tests substitute a fake
model.  Provider failures are translated into the service's own error
types; nothing is retried.
"""

from __future__ import annotations

from typing import Sequence

import openai
from loguru import logger
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from ..chains import ChartChainManager
from ..config.llm_config import LlmConfig, get_llm_config
from ..models.chat_message import ConversationMessage
from ..utils.error_handler import ProviderAuthError, ProviderError

AUTH_ERROR_TYPES = (openai.AuthenticationError, openai.PermissionDeniedError)


def build_chat_model(llm_config: LlmConfig) -> ChatOpenAI:
    """Create the ChatOpenAI client described by ``llm_config``."""
    llm_kwargs: dict[str, object] = {
        "api_key": llm_config.api_key,
        "model": llm_config.model,
        "temperature": llm_config.temperature,
        # A provider error ends the request, no silent retries
        "max_retries": 0,
    }
    if llm_config.base_url:
        llm_kwargs["base_url"] = llm_config.base_url
    if llm_config.max_tokens:
        llm_kwargs["max_tokens"] = llm_config.max_tokens
    if llm_config.timeout:
        llm_kwargs["timeout"] = llm_config.timeout
    return ChatOpenAI(**llm_kwargs)


def is_auth_failure(exc: BaseException) -> bool:
    """Return True when ``exc`` reports rejected credentials."""
    if isinstance(exc, AUTH_ERROR_TYPES):
        return True
    return "PERMISSION_DENIED" in str(exc)


class LLMService:
    """Service for generating chart descriptions from the language model."""

    def __init__(
        self,
        llm_config: LlmConfig | None = None,
        llm: BaseChatModel | None = None,
        chain_manager: ChartChainManager | None = None,
    ) -> None:
        """Initialise the service.

        Parameters
        ----------
        llm_config: LlmConfig, optional
            Model settings.  Loaded from the environment when omitted and
            no ``llm`` is supplied.
        llm: BaseChatModel, optional
            A ready chat model.  When omitted a ChatOpenAI client is built
            from ``llm_config``.
        chain_manager: ChartChainManager, optional
            Prompt assembly; the default uses the finance system prompt.
        """
        if llm is None:
            llm_config = llm_config or get_llm_config()
            llm = build_chat_model(llm_config)
        self.llm_config = llm_config
        self.llm = llm
        self.chain_manager = chain_manager or ChartChainManager()

    @property
    def json_mode(self) -> bool:
        return self.llm_config.json_mode if self.llm_config is not None else True

    async def generate(self, conversation: Sequence[ConversationMessage]) -> str:
        """Send ``conversation`` to the model and return its text reply.

        Raises
        ------
        ProviderAuthError
            If the provider rejects the credentials.
        ProviderError
            For every other failure raised while calling the model.
        """
        logger.debug("Invoking model with {} messages (json_mode={})", len(conversation), self.json_mode)
        try:
            return await self.chain_manager.ainvoke(self.llm, conversation, json_mode=self.json_mode)
        except Exception as exc:
            if is_auth_failure(exc):
                raise ProviderAuthError(
                    "Authentication Error",
                    details="Invalid API key or authentication failed",
                ) from exc
            raise ProviderError(str(exc) or type(exc).__name__, details="API Error") from exc
