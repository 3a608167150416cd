"""Models representing chat messages and the internal conversation shape."""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import MessageRole


class ChatMessage(BaseModel):
    """A single message as supplied by the client.

    Only ``user`` and ``assistant`` roles are accepted; the system
    instruction is owned by the service.  Messages are frozen so that
    normalisation always produces new objects instead of editing the
    caller's history in place.
    """

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str

    @field_validator("role")
    @classmethod
    def validate_role(cls, value: MessageRole) -> MessageRole:
        if value == MessageRole.SYSTEM:
            raise ValueError("role must be 'user' or 'assistant'")
        return value


class TextPart(BaseModel):
    """Plain text fragment of a conversation message."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class InlineDataPart(BaseModel):
    """Binary attachment forwarded to the model as base64 data."""

    model_config = ConfigDict(frozen=True)

    type: Literal["inline_data"] = "inline_data"
    data: str = Field(..., description="Raw base64 payload.")
    mime_type: str = Field(..., description="Media type of the payload, e.g. image/png.")


MessagePart = Union[TextPart, InlineDataPart]


class ConversationMessage(BaseModel):
    """Provider-neutral message made of one or more parts.

    This is the canonical conversation shape handed to the model
    invoker.  Provider adapters translate it into their own message
    classes.
    """

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    parts: list[MessagePart] = Field(default_factory=list)

    @classmethod
    def from_text(cls, role: MessageRole, text: str) -> "ConversationMessage":
        return cls(role=role, parts=[TextPart(text=text)])

    @property
    def text(self) -> str:
        """Concatenated text of all text parts."""
        return "\n".join(part.text for part in self.parts if isinstance(part, TextPart))
