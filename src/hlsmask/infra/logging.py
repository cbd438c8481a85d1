"""
Logging configuration for hlsmask.

This module configures structlog for JSON logging across the application.
Locators handed to the rewriter are usually presigned object-storage URLs, so
the redaction processor masks signature and credential query parameters
before anything is rendered.
"""

import logging
import re
import sys
from typing import Any

import structlog

from .settings import settings

# Keys whose values are never logged
SECRET_KEYS = [
    "token",
    "password",
    "secret",
    "api_key",
    "access_key",
    "credential",
]

# Patterns to redact in string values
SECRET_PATTERNS = [
    re.compile(r"(://[^:/@\s]+:)[^@\s]+(@)"),  # URLs with credentials
    re.compile(r"((?:X-Amz-Signature|X-Amz-Credential|X-Amz-Security-Token)=)[^&\s]+", re.I),
    re.compile(r"((?:Signature|token|password|sig)=)[^&\s]+", re.I),
]


def redact_value(value: Any) -> Any:
    """Mask secrets inside strings, recursing into dicts and lists."""
    if isinstance(value, str):
        for pattern in SECRET_PATTERNS:
            value = pattern.sub(lambda m: m.group(1) + "***" + (m.group(2) if m.lastindex == 2 else ""), value)
        return value
    elif isinstance(value, dict):
        return {k: redact_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [redact_value(item) for item in value]
    return value


def redact_secrets(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Redact sensitive information from log events."""
    for key in list(event_dict.keys()):
        if any(secret in key.lower() for secret in SECRET_KEYS):
            event_dict[key] = "***REDACTED***"
        else:
            event_dict[key] = redact_value(event_dict[key])

    return event_dict


def configure_logging(level: str | None = None, json: bool | None = None) -> None:
    """Configure stdlib logging and structlog (JSON output by default)."""
    level_name = (level or settings.log_level).upper()
    use_json = settings.log_json if json is None else json

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level_name, logging.INFO),
        force=True,
    )

    renderer: Any = (
        structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer()
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
            redact_secrets,  # Redact secrets before rendering
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a logger with service context.

    The logger stays lazy until its first call, so module-level loggers pick up
    whatever configure_logging installed by then.
    """
    return structlog.get_logger(name, service="hlsmask", env=settings.env)
