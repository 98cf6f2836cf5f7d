"""
thebrain-mcp Logging Configuration
==================================
Centralized logging configuration using loguru.

stdout carries JSON-RPC responses, so every sink added here writes to
stderr or a file, never stdout.

Usage:
    from thebrain_mcp.core.logging_config import configure_logging

    configure_logging(level="DEBUG")
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from loguru import logger

_CONFIGURED = False

_TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def configure_logging(
    level: Optional[str] = "INFO",
    json_format: Optional[bool] = None,
    *,
    sink: Optional[str] = None,
) -> None:
    """
    Configure loguru logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). If None,
            LOG_LEVEL from the environment is used.
        json_format: If True, use JSON format. If None, check LOG_FORMAT env var.
        sink: Optional file path for log output. If None, logs to stderr.
    """
    global _CONFIGURED

    if json_format is None:
        json_format = os.environ.get("LOG_FORMAT", "").lower() == "json"

    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO")

    logger.remove()

    logger.add(
        sink if sink else sys.stderr,
        level=level.upper(),
        format=_TEXT_FORMAT,
        serialize=json_format,
        colorize=not json_format and sink is None,
        backtrace=True,
        diagnose=False,
    )

    _intercept_standard_logging(level)

    _CONFIGURED = True
    logger.debug(f"Logging configured: level={level}, json_format={json_format}")


class InterceptHandler(logging.Handler):
    """Redirect stdlib logging records (requests, urllib3) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            log_level = logger.level(record.levelname).name
        except ValueError:
            log_level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            log_level, record.getMessage()
        )


def _intercept_standard_logging(level: str) -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # urllib3 logs every retry at WARNING; keep it but no chattier than ours
    for logger_name in ["urllib3", "urllib3.connectionpool", "requests"]:
        logging.getLogger(logger_name).setLevel(level.upper())


def is_configured() -> bool:
    return _CONFIGURED


__all__ = ["configure_logging", "is_configured", "InterceptHandler", "logger"]
