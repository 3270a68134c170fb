"""
Structured logging for the Horizons site.

Provides:
- get_logger(): Get a configured logger instance
- setup_logging(): One-time structlog + stdlib configuration, driven by
  LoggingSettings (JSON in production, pretty console in development)

Sensitive keys (captcha tokens, secrets, keys) are redacted before rendering,
so a stray ``token=...`` kwarg never reaches the log sink.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, Processor

from config import LoggingSettings

# Sensitive fields to redact from logs
REDACTED_FIELDS = {
    "token",
    "sitekey",
    "secret",
    "key",
    "password",
    "authorization",
    "cookie",
}

_PRESERVED_FIELDS = {"level", "event", "timestamp", "logger"}


def get_logger(name: str) -> BoundLogger:
    """
    Get a configured logger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("registration_saved", email_domain="stanford.edu")
    """
    return structlog.get_logger(name)


def email_domain(email: str) -> str:
    """Return the domain part of *email* for logging, never the full address."""
    return email.rsplit("@", 1)[1] if "@" in email else "unknown"


def add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add ISO format timestamp to event dict."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact sensitive fields from logs."""
    for key in list(event_dict.keys()):
        if key in _PRESERVED_FIELDS:
            continue
        lowered = key.lower()
        if lowered in REDACTED_FIELDS or any(
            sensitive in lowered for sensitive in ("token", "key", "secret")
        ):
            event_dict[key] = "***REDACTED***"
    return event_dict


def configure_structlog(log_format: str) -> None:
    """
    Configure structlog with appropriate processors for the environment.

    Production: JSON formatting for easy parsing
    Development: Pretty console formatting with colors
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_fields,
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            pad_event=15,
            sort_keys=False,
        )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_stdlib_logging(log_level: str) -> None:
    """Route stdlib logging to stdout at *log_level* and quiet noisy libraries."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def setup_logging(settings: LoggingSettings, env: str = "development") -> None:
    """
    Initialize logging system for the application.

    Called once from create_app(), before anything logs.
    """
    configure_stdlib_logging(settings.log_level)
    configure_structlog(settings.log_format)

    log = get_logger(__name__)
    log.info(
        "logging_initialized",
        env=env,
        log_level=settings.log_level,
        log_format=settings.log_format,
    )


__all__ = [
    "get_logger",
    "email_domain",
    "configure_structlog",
    "setup_logging",
]
