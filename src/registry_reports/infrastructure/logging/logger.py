# src/registry_reports/infrastructure/logging/logger.py
# Copyright (c) Registry Reports.
# SPDX-License-Identifier: MIT
"""Structured JSON logging utilities.

This module exposes an idempotent root configurator and a per-module logger
factory producing one JSON object per line.

Features:
    * Stable keys: ``ts`` (UTC, millisecond precision), ``level``, ``logger``,
      ``message`` and, once configured, ``service``.
    * Request correlation: ``request_id`` and ``trace_id`` taken from the
      record, then from contextvars set by the request-id middleware.
    * Structured fields: a dict passed as ``extra={"extra": {...}}`` is
      merged into the payload.

Typical usage:
    configure_root_logging()
    log = get_json_logger(__name__)
    log.info("registry_report_built", extra={"extra": {"periods": 12}})
"""

from __future__ import annotations

import json
import logging
import os
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

__all__ = [
    "configure_root_logging",
    "get_json_logger",
    "set_request_context",
    "get_request_id",
    "get_trace_id",
]

# Per-request correlation context (task-local via contextvars).
_REQUEST_ID_CTX: ContextVar[str | None] = ContextVar("registry_request_id", default=None)
_TRACE_ID_CTX: ContextVar[str | None] = ContextVar("registry_trace_id", default=None)


def set_request_context(*, request_id: str | None = None, trace_id: str | None = None) -> None:
    """Set per-request correlation identifiers on the current context.

    Passing only one argument updates that value and leaves the other as is.
    """
    if request_id is not None:
        _REQUEST_ID_CTX.set(request_id)
    if trace_id is not None:
        _TRACE_ID_CTX.set(trace_id)


def get_request_id() -> str | None:
    """Return the current request id from contextvars, if any."""
    return _REQUEST_ID_CTX.get(None)


def get_trace_id() -> str | None:
    """Return the current trace id from contextvars, if any."""
    return _TRACE_ID_CTX.get(None)


def _correlation(record: logging.LogRecord) -> dict[str, str]:
    """Correlation ids for a record; record attributes win over the context."""
    ids: dict[str, str] = {}
    for key, ctx in (("request_id", _REQUEST_ID_CTX), ("trace_id", _TRACE_ID_CTX)):
        value = getattr(record, key, None) or ctx.get(None)
        if value:
            ids[key] = value
    return ids


class _JsonFormatter(logging.Formatter):
    """JSON log formatter emitting stable keys and optional extras."""

    def __init__(self, service: str | None = None) -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON object.

        Args:
            record: Logging record.

        Returns:
            JSON-encoded log line.
        """
        payload: dict[str, Any] = {
            "ts": datetime.now(tz=UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.service:
            payload["service"] = self.service
        payload.update(_correlation(record))

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            if exc_type is not None:
                payload["exc_type"] = exc_type.__name__
            if exc_value is not None:
                payload["exc_message"] = str(exc_value)

        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def configure_root_logging(
    level: str | int | None = None, *, service: str | None = None
) -> None:
    """Initialize the root logger with a JSON stream handler (idempotent).

    Args:
        level: Logging level or level name. If ``None``, use env ``LOG_LEVEL`` or ``INFO``.
        service: Service name stamped on every record. A later call may set it
            on an already installed JSON handler.
    """
    root = logging.getLogger()

    env_level = os.getenv("LOG_LEVEL")
    resolved: int | str = (
        level if level is not None else (env_level.upper() if env_level else "INFO")
    )
    root.setLevel(resolved)

    if root.handlers:
        # Already configured; avoid duplicate handlers on reload.
        if service is not None:
            for existing in root.handlers:
                if isinstance(existing.formatter, _JsonFormatter):
                    existing.formatter.service = service
        return

    handler = logging.StreamHandler()
    handler.setFormatter(_JsonFormatter(service))
    root.addHandler(handler)


def get_json_logger(name: str) -> logging.Logger:
    """Return a module logger that propagates to the JSON root handler.

    This does not configure the root logger. Call
    :func:`configure_root_logging` once at startup.
    """
    logger = logging.getLogger(name)
    logger.propagate = True
    return logger
