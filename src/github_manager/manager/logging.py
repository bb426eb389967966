"""Structured logging configuration.

Records are rendered as one JSON object per line. Besides per-call ``extra={...}``
fields, code can bind workflow context (repository, issue key, caller) with
:func:`log_context`; every record emitted inside the block carries it, including
records from the GitHub client.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

_bound_context: ContextVar[dict[str, Any]] = ContextVar("github_manager_log_context", default={})

# Attributes every LogRecord carries; anything else was passed via `extra`.
_STANDARD_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}

_QUIET_LOGGERS = ("github", "urllib3")


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Attach ``fields`` to every record logged in this block.

    Blocks nest; inner values win. ``None`` values are skipped.
    """

    merged = {**_bound_context.get(), **{k: v for k, v in fields.items() if v is not None}}
    token = _bound_context.set(merged)
    try:
        yield
    finally:
        _bound_context.reset(token)


def current_log_context() -> dict[str, Any]:
    return dict(_bound_context.get())


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON line.

    Keys: ``timestamp``, ``level``, ``logger``, ``message`` and, when present,
    ``context`` (bound via :func:`log_context`), ``extra`` and ``exception``.
    """

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = current_log_context()
        if context:
            payload["context"] = context

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str) -> None:
    """Send JSON logs to stdout at ``level``; safe to call repeatedly."""

    root = logging.getLogger()
    root.handlers.clear()

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(level.upper())

    floor = max(root.level, logging.INFO)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(floor)
