"""
Standardized Logging Configuration

This module provides the structured logging setup for the adapter.
Supports JSON logging for production and human-readable output for development.
The library itself only emits through structlog; applications opt in to
rendering by calling configure_logging().
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

import structlog


# =============================================================================
# Configuration
# =============================================================================


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    PRETTY = "pretty"


SERVICE_NAME = "actions-bridge"


def _renderer(fmt: LogFormat) -> Any:
    if fmt == LogFormat.JSON:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    level: Union[LogLevel, str] = LogLevel.INFO,
    fmt: Union[LogFormat, str] = LogFormat.PRETTY,
    stream: Optional[Any] = None,
) -> None:
    """
    Configure structlog and the stdlib root handler.

    Args:
        level: Minimum level to emit
        fmt: JSON for production, pretty for development
        stream: Output stream (defaults to stderr)
    """
    level = LogLevel(str(getattr(level, "value", level)).upper())
    fmt = LogFormat(str(getattr(fmt, "value", fmt)).lower())

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=getattr(logging, level.value),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _renderer(fmt),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.get_logger(__name__).debug(
        "logging_configured",
        service=SERVICE_NAME,
        level=level.value,
        format=fmt.value,
    )


def get_logger(name: Optional[str] = None, **context: Any) -> Any:
    """
    Get a structured logger, optionally bound to request context.

    Args:
        name: Logger name (usually __name__)
        **context: Values bound to every event (e.g. request_id)
    """
    logger = structlog.get_logger(name or SERVICE_NAME)
    if context:
        logger = logger.bind(**context)
    return logger
