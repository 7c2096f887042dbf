"""Structured logging for the bot process.

Events are rendered as JSON lines through stdlib logging. The bot token is
part of every Bot API URL, so it is scrubbed from rendered events and the
per-request INFO lines of httpx are silenced.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import structlog

REDACTED = "***"

_NOISY_LOGGERS = ("httpx", "httpcore")


def redact_secrets(secrets: Iterable[str]) -> structlog.types.Processor:
    """Return a processor replacing every occurrence of ``secrets`` in string values."""
    needles = tuple(secret for secret in secrets if secret)

    def _redact(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        if not needles:
            return event_dict
        for key, value in event_dict.items():
            if isinstance(value, str):
                for needle in needles:
                    value = value.replace(needle, REDACTED)
                event_dict[key] = value
        return event_dict

    return _redact


def configure_logging(level: str | int = logging.INFO, *, secrets: Iterable[str] = ()) -> None:
    logging.basicConfig(level=level, format="%(message)s")
    logging.getLogger().setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            redact_secrets(secrets),
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


__all__ = ["REDACTED", "configure_logging", "redact_secrets"]
