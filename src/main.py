"""FastAPI application entry point.

This module initialises the FastAPI app, configures logging and
registers API routes.  The ``uvicorn`` ASGI server can point to
``src.main:app`` to serve the application, or the module can be run
directly with ``python -m src.main``.
"""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .config.app_config import AppConfig, get_app_config
from .controllers.finance_controller import router as finance_router
from .utils.error_handler import (
    FinanceChatError,
    finance_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from .utils.logger import setup_logging


def create_app(app_config: AppConfig | None = None) -> FastAPI:
    """Create and configure a FastAPI application."""
    app_config = app_config or get_app_config()
    setup_logging(app_config)

    app = FastAPI(title="Finance Chart Chat API", version="0.1.0", debug=app_config.app_debug)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(FinanceChatError, finance_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(finance_router)

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        logger.debug("Health check invoked")
        return {"status": "ok"}

    return app


# Create an application instance for ASGI servers
app = create_app()


if __name__ == "__main__":
    import uvicorn

    config = get_app_config()
    uvicorn.run("src.main:app", host=config.app_host, port=config.app_port, reload=config.app_debug)
