"""Structured logging using structlog.

Provides centralized logging configuration with:
- ISO-8601 timestamps
- Console or JSON rendering (PIPELOAD_LOG_FORMAT)
- Automatic redaction of sensitive fields (passwords, connection strings)

Usage:
    >>> from pipeload.utils.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("pipe.created", path="/tmp/attempt/export.fifo")
"""

from __future__ import annotations

import logging
import re
from typing import Any, MutableMapping

import structlog
from structlog.types import EventDict, Processor

from pipeload.core.config import config

SENSITIVE_PATTERNS = [
    re.compile(r".*password.*", re.IGNORECASE),
    re.compile(r".*secret.*", re.IGNORECASE),
    re.compile(r"^connection_string$", re.IGNORECASE),
]

REDACTED_VALUE = "[REDACTED]"

_configured = False


def sanitize_for_logging(data: dict[str, Any]) -> dict[str, Any]:
    """Redact sensitive values from a dictionary before logging.

    Args:
        data: Dictionary that may contain sensitive data

    Returns:
        New dictionary with sensitive values replaced by [REDACTED]

    Example:
        >>> sanitize_for_logging({"password": "secret123", "user": "admin"})
        {'password': '[REDACTED]', 'user': 'admin'}
    """
    sanitized: dict[str, Any] = {}
    for key, value in data.items():
        if any(pattern.match(key) for pattern in SENSITIVE_PATTERNS):
            sanitized[key] = REDACTED_VALUE
        elif isinstance(value, dict):
            sanitized[key] = sanitize_for_logging(value)
        else:
            sanitized[key] = value
    return sanitized


def sanitization_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> MutableMapping[str, Any]:
    """Structlog processor that redacts sensitive fields in event_dict."""
    return sanitize_for_logging(dict(event_dict))


def configure_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure stdlib logging and structlog.

    Args:
        level: Log level name; defaults to PIPELOAD_LOG_LEVEL
        log_format: "text" or "json"; defaults to PIPELOAD_LOG_FORMAT
    """
    global _configured

    level_name = (level or config.log_level).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)
    renderer: Processor
    if (log_format or config.log_format) == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    logging.basicConfig(format="%(message)s", level=numeric_level, force=True)

    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        sanitization_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]

    # Loggers are not cached so structlog.testing.capture_logs() sees every event
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str) -> Any:
    """Get a structlog logger, configuring logging on first use.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        A structlog BoundLogger
    """
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)
