"""Logging utilities for the service.

Loguru is the single logging backend.  ``setup_logging`` installs a
console sink, an optional rotating file sink and routes records emitted
through the standard ``logging`` module (uvicorn, httpx, openai) into
Loguru so that every line shares one format.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from loguru import logger

from ..config.app_config import AppConfig, get_app_config

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Handler to forward standard logging records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except (KeyError, ValueError):
            level = record.levelno

        # Find the caller from where the logging call was made
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(app_config: AppConfig | None = None) -> "loguru.Logger":
    """Configure Loguru logging for the application.

    Parameters
    ----------
    app_config: AppConfig, optional
        Settings providing the level, the optional log file and the debug
        flag.  Loaded from the environment when omitted.

    Returns
    -------
    loguru.Logger
        The configured Loguru logger instance.
    """
    app_config = app_config or get_app_config()

    # Remove default handler to prevent duplicate logs
    logger.remove()

    logger.add(
        sys.stdout,
        level=app_config.log_level,
        format=LOG_FORMAT,
        colorize=True,
        backtrace=True,
        diagnose=app_config.app_debug,
    )

    if app_config.log_file:
        Path(app_config.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            app_config.log_file,
            level=app_config.log_level,
            format=LOG_FORMAT,
            rotation="10 MB",
            retention="30 days",
            compression="zip",
            backtrace=True,
            diagnose=app_config.app_debug,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=logging.WARNING, force=True)

    logger.info("Logging configured successfully")
    logger.debug("App environment: {}", app_config.app_env)
    logger.debug("Log level: {}", app_config.log_level)

    return logger
