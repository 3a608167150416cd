"""API controller for the finance chart endpoint."""

from fastapi import APIRouter, Depends, Response
from loguru import logger

from ..models.chat_request import FinanceChatRequest
from ..models.chat_response import ErrorResponse, FinanceChatResponse
from ..services.finance_service import FinanceChatService, get_finance_service
from ..utils.error_handler import FinanceChatError, UnexpectedError

router = APIRouter(prefix="/api", tags=["Finance"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid messages or attachment"},
    401: {"model": ErrorResponse, "description": "Model provider rejected the credentials"},
    500: {"model": ErrorResponse, "description": "Model provider or chart processing failure"},
}


@router.post(
    "/finance",
    response_model=FinanceChatResponse,
    response_model_by_alias=True,
    responses=_ERROR_RESPONSES,
)
async def finance_endpoint(
    request: FinanceChatRequest,
    response: Response,
    service: FinanceChatService = Depends(get_finance_service),
) -> FinanceChatResponse:
    """Answer a chat conversation with narrative text and chart data.

    Failures are raised as :class:`FinanceChatError` subclasses and
    rendered by the handler registered in ``create_app``.
    """
    try:
        result = await service.chat(request)
    except FinanceChatError:
        raise
    except Exception as exc:
        logger.exception("Unhandled exception during finance chat processing")
        raise UnexpectedError("An unknown error occurred") from exc

    response.headers["Cache-Control"] = "no-cache"
    logger.info("Finance answer generated (chart={})", result.chart_data is not None)
    return result
