"""Request models for the finance chat API."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class FileAttachment(BaseModel):
    """Optional file sent alongside the conversation.

    Every field is optional at the schema level so that a missing
    ``base64`` payload surfaces as the service's own "No file data"
    error rather than a generic schema violation.
    """

    model_config = ConfigDict(populate_by_name=True)

    base64: str | None = None
    media_type: str | None = Field(default=None, alias="mediaType")
    is_text: bool = Field(default=False, alias="isText")
    file_name: str | None = Field(default=None, alias="fileName")


class FinanceChatRequest(BaseModel):
    """Represents the request payload of the finance endpoint.

    ``messages`` is deliberately typed loosely: it is validated by the
    request normaliser, which turns a missing or non-array value into a
    400 "Messages array is required" response instead of FastAPI's 422.
    The model hint is accepted under ``model`` or the older ``model2``
    name and is only used for diagnostics.
    """

    model_config = ConfigDict(populate_by_name=True)

    messages: Any = None
    file_data: FileAttachment | None = Field(default=None, alias="fileData")
    model: str | None = Field(
        default=None,
        validation_alias=AliasChoices("model", "model2"),
        description="Model selection hint; logged but not used for routing.",
    )
