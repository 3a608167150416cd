"""Expose commonly used model classes at the package level.

Importing these classes here allows consumers to write concise imports like::

    from src.models import FinanceChatRequest, FinanceChatResponse

These names refer to the underlying Pydantic models defined in their
respective modules.
"""

from .chart import ChartDescription  # noqa: F401
from .chat_message import ChatMessage, ConversationMessage, InlineDataPart, TextPart  # noqa: F401
from .chat_request import FileAttachment, FinanceChatRequest  # noqa: F401
from .chat_response import ErrorResponse, FinanceChatResponse  # noqa: F401
from .enums import ChartType, MessageRole  # noqa: F401
