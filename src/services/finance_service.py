"""Orchestration service for the finance chart endpoint.

The service validates the request, asks the model for a chart
description and normalises the reply.  Every collaborator is passed in
so that a request touches no module-level state.
"""

from __future__ import annotations

from functools import lru_cache

from loguru import logger

from ..models.chat_request import FinanceChatRequest
from ..models.chat_response import FinanceChatResponse
from ..utils.structured_output import normalize_chart_response
from .llm_service import LLMService
from .request_normalizer import normalize_request


class FinanceChatService:
    """Coordinates request normalisation, generation and chart shaping."""

    def __init__(self, llm_service: LLMService | None = None) -> None:
        self.llm_service = llm_service or LLMService()

    async def chat(self, request: FinanceChatRequest) -> FinanceChatResponse:
        """Answer a finance chat request.

        Raises
        ------
        ValidationError, FileProcessingError
            If the request is rejected before the model is called.
        ProviderAuthError, ProviderError
            If the model call fails.
        InvalidChartStructureError
            If the model returned chart JSON missing required fields.
        """
        attachment = request.file_data
        logger.info(
            "Finance request: messages={} file={} media_type={} model_hint={}",
            len(request.messages) if isinstance(request.messages, list) else None,
            attachment is not None,
            attachment.media_type if attachment else None,
            request.model,
        )

        conversation = normalize_request(request)
        raw = await self.llm_service.generate(conversation)
        result = normalize_chart_response(raw)

        return FinanceChatResponse(
            content=result.narrative,
            has_tool_use=result.has_tool_use,
            tool_use=result.tool_use,
            chart_data=result.chart_data,
        )


@lru_cache()
def get_llm_service() -> LLMService:
    """Return the process-wide LLM service built from configuration."""
    return LLMService()


def get_finance_service() -> FinanceChatService:
    """Dependency injector for FinanceChatService instances."""
    return FinanceChatService(llm_service=get_llm_service())
