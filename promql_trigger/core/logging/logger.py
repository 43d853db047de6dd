"""
Structured Logging Module using structlog

This module provides structured logging with:
- Reader path correlation, so every line emitted during a tick carries the
  webhook path of the query being polled
- JSON formatting for log aggregation
- Redaction of platform API credentials
- Context processors for automatic field injection

Author: System Architect
Date: 2026-03-02
"""

import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone

import structlog
from structlog.types import EventDict, WrappedLogger

# Context variable for the webhook path of the reader currently ticking
reader_path_ctx: ContextVar[str | None] = ContextVar("reader_path", default=None)

_BEARER_RE = re.compile(r"\b(bearer)\s+[A-Za-z0-9._~+/=-]+", re.IGNORECASE)


def add_reader_path(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add the reader path to the log event from the context variable.

    An explicit ``path`` keyword on the log call wins over the context.
    """
    reader_path = reader_path_ctx.get()
    if reader_path and "path" not in event_dict:
        event_dict["path"] = reader_path
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return event_dict


def redact_credentials(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Redact bearer tokens from log messages and string fields.

    Platform API errors can echo the Authorization header back in
    response bodies, which end up in ``body`` or ``error`` fields.
    """
    for key, value in event_dict.items():
        if isinstance(value, str) and "earer" in value:
            event_dict[key] = _BEARER_RE.sub(r"\1 [REDACTED]", value)
    return event_dict


def add_log_level_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Uppercase the log level name."""
    if "level" in event_dict:
        event_dict["level"] = event_dict["level"].upper()
    return event_dict


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """
    Setup structured logging with structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'console')
    """
    logging.basicConfig(
        format="%(message)s", stream=sys.stdout, level=getattr(logging, log_level.upper())
    )

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,  # Merge context variables
            add_reader_path,  # Add reader path from context
            add_timestamp,  # Add ISO timestamp
            structlog.stdlib.add_log_level,  # Add log level
            add_log_level_name,  # Convert log level to uppercase
            structlog.stdlib.PositionalArgumentsFormatter(),  # Format positional args
            structlog.processors.StackInfoRenderer(),  # Render stack info
            structlog.processors.format_exc_info,  # Format exception info
            redact_credentials,  # Redact bearer tokens
            renderer,  # JSON or console renderer
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        BoundLogger: Structured logger instance

    Usage:
        logger = get_logger(__name__)
        logger.info("successfully made POST", status_code=200)
    """
    return structlog.get_logger(name)


def set_reader_path(path: str) -> None:
    """
    Set the reader path in context for the current tick.

    Args:
        path: Webhook path of the reader
    """
    reader_path_ctx.set(path)


def get_reader_path() -> str | None:
    """Get the current reader path from context."""
    return reader_path_ctx.get()


def clear_reader_path() -> None:
    """Clear the reader path from context at the end of a tick."""
    reader_path_ctx.set(None)
