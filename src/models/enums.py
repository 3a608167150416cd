"""Enumerations used across models."""

from enum import Enum


class MessageRole(str, Enum):
    """Enum for message roles in a conversation.

    ``USER`` denotes a human message and ``ASSISTANT`` a previous reply
    from the model.  ``SYSTEM`` is never accepted from clients; it is
    reserved for the instruction the service prepends itself.
    """

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChartType(str, Enum):
    """Chart types the front-end renderer knows how to draw."""

    BAR = "bar"
    MULTI_BAR = "multiBar"
    LINE = "line"
    PIE = "pie"
    AREA = "area"
    STACKED_AREA = "stackedArea"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
