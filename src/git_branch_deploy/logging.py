"""Structured logging configuration for deployment runs."""

import logging
import re
import sys
from typing import Any, Optional

import structlog

# https://x-access-token:<token>@github.com/... and plain user:password@host forms
_CREDENTIAL_RE = re.compile(r"(?P<scheme>[a-zA-Z][a-zA-Z0-9+.-]*://)(?P<user>[^:/@\s]+):[^@\s]+@")


def redact_credentials(text: str) -> str:
    """Mask the password part of any URL embedded in ``text``."""
    if not text:
        return text
    return _CREDENTIAL_RE.sub(r"\g<scheme>\g<user>:***@", text)


def _redact_event(_logger: Any, _method: str, event_dict: dict) -> dict:
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = redact_credentials(value)
    return event_dict


def configure_logging(
    level: str = "INFO",
    service_name: Optional[str] = None,
    structured: bool = True,
) -> None:
    """Configure logging for a deployment run.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        service_name: Name bound to every event, if given
        structured: Whether to render JSON lines instead of console output
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        _redact_event,
    ]
    if service_name:
        structlog.contextvars.bind_contextvars(service=service_name)
        processors.insert(0, structlog.contextvars.merge_contextvars)
    if structured:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    # Configure stdlib logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
        force=True,
    )
    # GitPython logs every command at DEBUG, including authenticated URLs
    logging.getLogger("git").setLevel(max(log_level, logging.INFO))


def get_logger(name: str, **context: Any) -> structlog.stdlib.BoundLogger:
    """Get a logger instance with optional context.

    Args:
        name: Logger name
        **context: Additional context to bind to the logger

    Returns:
        Configured logger instance
    """
    logger = structlog.get_logger(name)
    if context:
        logger = logger.bind(**context)
    return logger
