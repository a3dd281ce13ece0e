"""Structured logging for the Smart Wardrobe service.

Every log line is a JSON object carrying the service name, the event name and
the correlation id of the HTTP request (or operation) that produced it. Fields
passed to :func:`log_event` are scrubbed before they reach a handler: API keys
and raw image bytes never hit the log, and URLs lose their query strings.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
import re
import uuid
from typing import Any, Dict, Iterator
from urllib.parse import urlsplit, urlunsplit

SERVICE_NAME = "smart-wardrobe"
CORRELATION_HEADER = "X-Correlation-ID"
CORRELATION_ID: contextvars.ContextVar[str | None] = contextvars.ContextVar("correlation_id", default=None)

# Attributes every LogRecord already has; extra fields must not shadow them.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "taskName",
}
_SECRET_KEYS = {
    "supabase_key",
    "api_key",
    "apikey",
    "authorization",
    "password",
    "data",
    "data_base64",
}
_EMAIL_PATTERN = re.compile(r"[\w.\-]+@[\w.\-]+\.\w+")
_TEXT_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Render a record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        message = record.getMessage()
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "event": getattr(record, "event", message),
            "message": message,
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
        }
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key in payload:
                continue
            payload[key] = redact_for_log(value)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class _CorrelationFilter(logging.Filter):
    """Make ``%(correlation_id)s`` available to the plain-text format."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = CORRELATION_ID.get() or "-"
        return True


def configure_logging(level: int | str | None = None, fmt: str | None = None) -> None:
    """Install a single root handler.

    ``LOG_LEVEL`` sets the level and ``LOG_FORMAT=text`` switches from JSON to
    a human-readable line for local runs.
    """

    desired_level = level or os.getenv("LOG_LEVEL", "INFO")
    desired_format = (fmt or os.getenv("LOG_FORMAT", "json")).lower()

    handler = logging.StreamHandler()
    if desired_format == "text":
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
        handler.addFilter(_CorrelationFilter())
    else:
        handler.setFormatter(JsonFormatter())

    logging.root.handlers.clear()
    logging.basicConfig(level=desired_level, handlers=[handler])
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _scrub_url(value: str) -> str:
    parts = urlsplit(value)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def _redact_string(value: str) -> str:
    if value.lower().startswith(("http://", "https://")):
        return _scrub_url(value)
    return _EMAIL_PATTERN.sub("[redacted-email]", value)


def redact_for_log(payload: Any) -> Any:
    """Recursively scrub secrets, binary payloads, emails and URL query strings."""

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        return _redact_string(payload)
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return f"[{len(payload)} bytes]"
    if isinstance(payload, dict):
        return {
            key: "[redacted]" if str(key).lower() in _SECRET_KEYS else redact_for_log(value)
            for key, value in payload.items()
        }
    if isinstance(payload, (set, frozenset)):
        return sorted(redact_for_log(item) for item in payload)
    if isinstance(payload, (list, tuple)):
        return [redact_for_log(item) for item in payload]
    return str(payload)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring the root handler on first use."""

    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Return the active correlation id, assigning one when none is set."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    current = CORRELATION_ID.get()
    if current:
        return current
    new_id = uuid.uuid4().hex
    CORRELATION_ID.set(new_id)
    return new_id


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    """Scope a correlation id to one request; a blank id gets a fresh one."""

    token = CORRELATION_ID.set((correlation_id or "").strip() or uuid.uuid4().hex)
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Log ``event`` with scrubbed structured fields.

    Field names that clash with LogRecord attributes (``name``, ``module`` and
    so on) are stored with a ``field_`` prefix instead of raising.
    """

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    extra = {
        (f"field_{key}" if key in _RECORD_ATTRS else key): value
        for key, value in redact_for_log(fields).items()
    }
    logger.log(
        level,
        event,
        exc_info=exc_info,
        extra={**extra, "event": event, "correlation_id": correlation_id},
    )


__all__ = [
    "CORRELATION_HEADER",
    "JsonFormatter",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "redact_for_log",
]
