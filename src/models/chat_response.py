"""Response models for the finance chat API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FinanceChatResponse(BaseModel):
    """Successful reply returned to the front-end.

    ``tool_use`` carries the chart description exactly as the model
    produced it, while ``chart_data`` holds the normalised copy the
    renderer consumes.  Both are ``None`` when the model answered
    without a chart or its output could not be parsed.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: str
    has_tool_use: bool = False
    tool_use: dict[str, Any] | None = None
    chart_data: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Body returned for every failed request."""

    error: str
    details: str | None = Field(default=None)
