"""JSON logging, PII scrubbing and correlation ids for the matcher.

Every processing run gets a correlation id (see :func:`operation_context`) which
is attached to each structured event emitted through :func:`log_event`, including
events logged from worker threads that run with a copied context.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
import re
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import IO, Any, Dict, Iterator

CORRELATION_ID: contextvars.ContextVar[str | None] = contextvars.ContextVar("correlation_id", default=None)

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}

# Reporter identity and free text typed by students never reaches the logs.
REDACTED_FIELDS = frozenset(
    {
        "email",
        "created_by",
        "user_id",
        "image_ref",
        "description",
        "title",
        "explanation",
        "text",
    }
)
_EMAIL = re.compile(r"[\w.\-+]+@[\w\-]+(\.[\w\-]+)+")
_URL = re.compile(r"\b(?:https?|gs)://\S+", re.IGNORECASE)


class JsonFormatter(logging.Formatter):
    """One JSON object per line: fixed envelope plus the event's own fields."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "event": getattr(record, "event", message),
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in entry:
                entry[key] = redact_for_log(value)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(level: int | str | None = None, stream: IO[str] | None = None) -> None:
    """Route root logging through a single JSON handler (level from ``LOG_LEVEL``)."""

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level or os.getenv("LOG_LEVEL", "INFO").upper())


def _scrub_text(value: str) -> str:
    value = _EMAIL.sub("[redacted-email]", value)
    return _URL.sub("[redacted-url]", value)


def redact_for_log(payload: Any) -> Any:
    """Return a log-safe copy of ``payload``.

    Mapping keys listed in :data:`REDACTED_FIELDS` are blanked, emails and
    image URLs inside strings are masked, containers are walked recursively and
    unknown objects are logged by their string form.
    """

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        return _scrub_text(payload)
    if isinstance(payload, dict):
        return {
            key: "[redacted]" if key in REDACTED_FIELDS else redact_for_log(value)
            for key, value in payload.items()
        }
    if isinstance(payload, (list, tuple, set, frozenset)):
        return [redact_for_log(value) for value in payload]
    return _scrub_text(str(payload))


def get_logger(name: str) -> logging.Logger:
    """Module logger; installs the JSON handler on first use if nothing else has."""

    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Adopt ``correlation_id``, else keep the current one, else start a new one."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    current = CORRELATION_ID.get()
    if current:
        return current
    fresh = uuid.uuid4().hex
    CORRELATION_ID.set(fresh)
    return fresh


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    """Set a correlation id for the duration of the block, then restore the previous one."""

    token = CORRELATION_ID.set(correlation_id or uuid.uuid4().hex)
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Log ``event`` with scrubbed ``fields`` and the active correlation id."""

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    extra = {"event": event, "correlation_id": correlation_id}
    extra.update(redact_for_log(fields))
    logger.log(level, event, exc_info=exc_info, extra=extra)


@contextlib.contextmanager
def operation_context(name: str, **attributes: Any) -> Iterator[str]:
    """Scope a fresh correlation id (or ``attributes['correlation_id']``) to one operation."""

    logger = logging.getLogger(__name__)
    started = time.perf_counter()
    with correlation_context(attributes.get("correlation_id")) as correlation_id:
        logger.debug("operation started", extra={"event": "operation_started", "operation": name})
        try:
            yield correlation_id
        finally:
            logger.debug(
                "operation finished",
                extra={
                    "event": "operation_finished",
                    "operation": name,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )


__all__ = [
    "CORRELATION_ID",
    "REDACTED_FIELDS",
    "JsonFormatter",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "operation_context",
    "redact_for_log",
]
