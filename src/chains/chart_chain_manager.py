"""LangChain plumbing for the chart-generation call."""

from __future__ import annotations

from typing import Any, Sequence

from loguru import logger
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from ..models.chat_message import ConversationMessage, InlineDataPart, TextPart
from ..models.enums import MessageRole
from ..prompts import FINANCE_SYSTEM_PROMPT

JSON_OBJECT_FORMAT = {"type": "json_object"}


class ChartChainManager:
    """Assembles the prompt and runs it against a chat model.

    The manager owns the system instruction and the translation from
    the provider-neutral :class:`ConversationMessage` list into
    LangChain message objects.
    """

    def __init__(self, system_prompt: str | None = None) -> None:
        self._system_prompt = system_prompt or FINANCE_SYSTEM_PROMPT

    @property
    def system_prompt(self) -> str:
        """Return the system instruction prepended to every conversation."""
        return self._system_prompt

    def assemble_conversation(
        self, conversation: Sequence[ConversationMessage]
    ) -> list[ConversationMessage]:
        """Prepend the system instruction to ``conversation``."""
        system = ConversationMessage.from_text(MessageRole.SYSTEM, self._system_prompt)
        return [system, *conversation]

    @staticmethod
    def to_langchain_messages(conversation: Sequence[ConversationMessage]) -> list[BaseMessage]:
        """Translate canonical messages into LangChain chat messages."""
        converted: list[BaseMessage] = []
        for message in conversation:
            content = _render_content(message)
            if message.role == MessageRole.SYSTEM:
                converted.append(SystemMessage(content=content))
            elif message.role == MessageRole.ASSISTANT:
                converted.append(AIMessage(content=content))
            else:
                converted.append(HumanMessage(content=content))
        return converted

    async def ainvoke(
        self,
        llm: BaseChatModel,
        conversation: Sequence[ConversationMessage],
        json_mode: bool = True,
    ) -> str:
        """Run the assembled conversation and return the reply text."""
        messages = self.to_langchain_messages(self.assemble_conversation(conversation))
        runnable = llm.bind(response_format=JSON_OBJECT_FORMAT) if json_mode else llm
        result = await runnable.ainvoke(messages)
        content = getattr(result, "content", str(result))
        if isinstance(content, list):
            content = "".join(
                block.get("text", "") if isinstance(block, dict) else str(block) for block in content
            )
        logger.debug("Model produced {} characters", len(content))
        return content.strip()


def _render_content(message: ConversationMessage) -> str | list[dict[str, Any]]:
    """Return plain text for text-only messages, content blocks otherwise."""
    if all(isinstance(part, TextPart) for part in message.parts):
        return message.text

    blocks: list[dict[str, Any]] = []
    for part in message.parts:
        if isinstance(part, InlineDataPart):
            blocks.append(
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:{part.mime_type};base64,{part.data}"},
                }
            )
        else:
            blocks.append({"type": "text", "text": part.text})
    return blocks
