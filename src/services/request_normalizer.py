"""Turn an incoming request body into a provider-neutral conversation.

Validation happens here rather than in the FastAPI schema so that the
client receives the same ``{"error": ...}`` body for every rejected
request.  The optional file attachment is decoded and spliced into the
last message; the caller's messages are never modified.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any

from loguru import logger
from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from ..models.chat_message import ChatMessage, ConversationMessage, InlineDataPart, TextPart
from ..models.chat_request import FileAttachment, FinanceChatRequest
from ..models.enums import MessageRole
from ..utils.error_handler import FileProcessingError, ValidationError

_MESSAGE_LIST = TypeAdapter(list[ChatMessage])
DEFAULT_FILE_NAME = "attachment"


def parse_messages(raw_messages: Any) -> list[ChatMessage]:
    """Validate the raw ``messages`` value and return typed messages."""
    if raw_messages is None or not isinstance(raw_messages, list):
        raise ValidationError("Messages array is required")
    if not raw_messages:
        raise ValidationError("Messages array must not be empty")
    try:
        return _MESSAGE_LIST.validate_python(raw_messages)
    except SchemaError as exc:
        raise ValidationError("Invalid message format", details=_summarise(exc)) from exc


def _summarise(exc: SchemaError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def compact_base64(payload: str) -> str:
    """Drop line breaks and other whitespace, as MIME-wrapped base64 carries them."""
    return "".join(payload.split())


def decode_text_attachment(payload: str) -> str:
    """Decode a base64 payload into UTF-8 text."""
    try:
        return base64.b64decode(compact_base64(payload), validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as exc:
        # UnicodeDecodeError is a ValueError subclass
        raise FileProcessingError("Failed to process file content", details=str(exc)) from exc


def validate_binary_attachment(payload: str) -> str:
    """Check that ``payload`` is well-formed base64 and return it without whitespace."""
    payload = compact_base64(payload)
    try:
        base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise FileProcessingError("Failed to process file content", details=str(exc)) from exc
    return payload


def _to_conversation(message: ChatMessage) -> ConversationMessage:
    return ConversationMessage.from_text(message.role, message.content)


def _attach_file(last: ChatMessage, attachment: FileAttachment) -> ConversationMessage | None:
    """Build the replacement for the last message, or ``None`` to keep it."""
    if not compact_base64(attachment.base64 or ""):
        logger.error("No base64 data received with file attachment")
        raise ValidationError("No file data")

    if attachment.is_text:
        text = decode_text_attachment(attachment.base64)
        return ConversationMessage.from_text(
            MessageRole.USER,
            f"File contents of {attachment.file_name or DEFAULT_FILE_NAME}:\n\n{text}\n\n{last.content}",
        )

    media_type = attachment.media_type or ""
    if media_type.startswith("image/"):
        data = validate_binary_attachment(attachment.base64)
        return ConversationMessage(
            role=MessageRole.USER,
            parts=[
                InlineDataPart(data=data, mime_type=media_type),
                TextPart(text=last.content),
            ],
        )

    logger.warning("Ignoring attachment {!r} with unsupported media type {!r}", attachment.file_name, media_type)
    return None


def normalize_request(request: FinanceChatRequest) -> list[ConversationMessage]:
    """Validate the request and return the conversation to send to the model.

    Raises
    ------
    ValidationError
        If ``messages`` is missing, not an array, empty or malformed, or
        if a file attachment carries no data.
    FileProcessingError
        If the attachment payload cannot be decoded.
    """
    messages = parse_messages(request.messages)
    conversation = [_to_conversation(message) for message in messages]

    if request.file_data is not None:
        replacement = _attach_file(messages[-1], request.file_data)
        if replacement is not None:
            conversation[-1] = replacement

    return conversation
