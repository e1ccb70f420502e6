# tests/unit/infrastructure/test_json_logger.py
from __future__ import annotations

import contextvars
import json
import logging
import sys

import pytest

from registry_reports.infrastructure.logging.logger import (
    _JsonFormatter,  # internal but importable
    configure_root_logging,
    get_json_logger,
    get_request_id,
    set_request_context,
)


def _capture_log(record_msg: str, level: int = logging.INFO, **extra) -> dict:
    """Emit a log record and return the parsed JSON payload."""
    logger = logging.getLogger("test.registry.logger")
    fmt = _JsonFormatter()
    record = logger.makeRecord(
        name=logger.name,
        level=level,
        fn="test_json_logger",
        lno=42,
        msg=record_msg,
        args=(),
        exc_info=None,
    )
    for k, v in extra.items():
        setattr(record, k, v)
    return json.loads(fmt.format(record))


def test_configure_root_logging_installs_json_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    """Root logger should get a JSON formatter and respect LOG_LEVEL."""
    monkeypatch.setenv("LOG_LEVEL", "debug")
    root = logging.getLogger()
    saved = list(root.handlers)
    root.handlers.clear()
    try:
        configure_root_logging()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, _JsonFormatter)

        # Second call only adjusts the level.
        configure_root_logging("WARNING")
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
    finally:
        root.handlers[:] = saved
        root.setLevel(logging.INFO)


def test_json_formatter_basic_fields() -> None:
    """Formatter should emit ts, level, logger and message."""
    payload = _capture_log("hello-world")
    assert payload["message"] == "hello-world"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.registry.logger"
    assert "ts" in payload
    assert "request_id" not in payload


def test_json_formatter_merges_structured_extra() -> None:
    payload = _capture_log("registry_report_built", extra={"periods": 12, "granularity": "monthly"})
    assert payload["periods"] == 12
    assert payload["granularity"] == "monthly"


def test_json_formatter_request_id_from_record_then_context() -> None:
    """Record attributes win; otherwise the contextvar set by the middleware is used."""

    def _run() -> None:
        set_request_context(request_id="ctx-id", trace_id="ctx-trace")
        assert get_request_id() == "ctx-id"

        payload = _capture_log("with-record-id", request_id="abc-123")
        assert payload["request_id"] == "abc-123"
        assert payload["trace_id"] == "ctx-trace"

        payload = _capture_log("with-context-id")
        assert payload["request_id"] == "ctx-id"

    # Run in a copied context so the ids do not leak into other tests.
    contextvars.copy_context().run(_run)


def test_json_formatter_includes_exception_info() -> None:
    """Formatter should add exc_type and exc_message for errors with exc_info."""
    logger = logging.getLogger("test.registry.logger.exc")
    try:
        raise ValueError("boom")
    except ValueError:
        record = logger.makeRecord(
            name=logger.name,
            level=logging.ERROR,
            fn="test_json_logger",
            lno=1,
            msg="failure",
            args=(),
            exc_info=sys.exc_info(),
        )

    payload = json.loads(_JsonFormatter().format(record))
    assert payload["level"] == "ERROR"
    assert payload["exc_type"] == "ValueError"
    assert "boom" in payload["exc_message"]


def test_get_json_logger_propagates() -> None:
    log = get_json_logger("registry_reports.some.module")
    assert log.propagate is True
    assert log.name == "registry_reports.some.module"


def test_json_formatter_stamps_service_name() -> None:
    logger = logging.getLogger("test.registry.logger.service")
    record = logger.makeRecord(logger.name, logging.INFO, "f", 1, "svc", (), None)
    payload = json.loads(_JsonFormatter(service="registry-reports").format(record))
    assert payload["service"] == "registry-reports"
    assert payload["ts"].endswith("+00:00")


def test_configure_root_logging_sets_service_on_existing_handler() -> None:
    root = logging.getLogger()
    saved = list(root.handlers)
    root.handlers.clear()
    try:
        configure_root_logging("INFO")
        configure_root_logging("INFO", service="registry-reports")
        formatter = root.handlers[0].formatter
        assert isinstance(formatter, _JsonFormatter)
        assert formatter.service == "registry-reports"
    finally:
        root.handlers[:] = saved
        root.setLevel(logging.INFO)
