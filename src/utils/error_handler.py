"""Error handling utilities and custom exceptions."""

from __future__ import annotations

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger


class FinanceChatError(Exception):
    """Base class for failures surfaced to the API caller.

    Each subclass fixes the HTTP status code.  ``message`` is the
    sanitised text placed in the ``error`` field of the response body and
    ``details`` an optional hint placed next to it.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict[str, str]:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(FinanceChatError):
    """Raised when the request body is missing required data."""

    status_code = status.HTTP_400_BAD_REQUEST


class FileProcessingError(FinanceChatError):
    """Raised when an attached file cannot be decoded."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidChartStructureError(FinanceChatError):
    """Raised when the model returned JSON that is not a usable chart."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ProviderAuthError(FinanceChatError):
    """Raised when the model provider rejects our credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ProviderError(FinanceChatError):
    """Raised for any other failure reported by the model provider."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class UnexpectedError(FinanceChatError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ChartParseFailure(Exception):
    """The model's output was not a JSON object.

    Never reaches the caller: the normaliser records it and the
    response is returned without chart data.
    """


def _log_failure(request: Request, exc: BaseException) -> None:
    cause = exc.__cause__ or exc
    logger.opt(exception=cause).error(
        "{} {} failed: {}: {}",
        request.method,
        request.url.path,
        type(cause).__name__,
        cause,
    )


async def finance_error_handler(request: Request, exc: FinanceChatError) -> JSONResponse:
    """Convert a FinanceChatError into its JSON error response."""
    _log_failure(request, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for failures outside the controller, e.g. in dependencies."""
    _log_failure(request, exc)
    error = UnexpectedError("An unknown error occurred")
    return JSONResponse(status_code=error.status_code, content=error.to_body())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report undecodable request bodies as 400 instead of FastAPI's 422."""
    logger.warning("Rejected malformed request body: {}", exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request body", "details": str(exc.errors())},
    )
