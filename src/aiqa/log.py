"""Structured logging for aiqa.

Diagnostics go to stderr through structlog so that command results on
stdout stay machine-readable.  Loggers are obtained lazily: the first
:func:`get_logger` call configures structlog with defaults when nothing
else has, and the CLI reconfigures once ``--log-level`` is parsed.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from aiqa.exceptions import ConfigError

DEFAULT_LOG_LEVEL = "WARNING"


def _level_number(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ConfigError(f"Unknown log level: {log_level!r}")
    return level


def configure_logging(log_level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure structlog to filter at *log_level* and write to stderr.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_number(log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Structured logger
    """
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)
