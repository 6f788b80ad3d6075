from __future__ import annotations

import io
import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from http_server_demo.observability import logging as logging_module


@pytest.fixture
def log_stream(monkeypatch: pytest.MonkeyPatch) -> Iterator[io.StringIO]:
    names = ["", "uvicorn", "uvicorn.error", "uvicorn.access"]
    saved = {
        name: (logging.getLogger(name).handlers[:], logging.getLogger(name).level, logging.getLogger(name).propagate)
        for name in names
    }
    monkeypatch.setattr(logging_module, "_CONFIGURED", False)

    stream = io.StringIO()
    logging_module.configure_logging(stream=stream)
    yield stream

    for name, (handlers, level, propagate) in saved.items():
        logger = logging.getLogger(name)
        logger.handlers = handlers
        logger.setLevel(level)
        logger.propagate = propagate
    structlog.reset_defaults()


def _lines(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


def test_structlog_events_render_as_json_with_message_and_timestamp(log_stream) -> None:
    structlog.get_logger("test").info("key_added", key="demo")

    (record,) = _lines(log_stream)
    assert record["message"] == "key_added"
    assert record["key"] == "demo"
    assert record["level"] == "info"
    assert "timestamp" in record
    assert "event" not in record


def test_stdlib_records_share_the_json_handler(log_stream) -> None:
    logging.getLogger("uvicorn.error").info("Started server process")

    (record,) = _lines(log_stream)
    assert record["message"] == "Started server process"


def test_uvicorn_access_log_is_suppressed_at_info(log_stream) -> None:
    logging.getLogger("uvicorn.access").info("GET /hello 200")
    assert _lines(log_stream) == []


def test_set_log_level_applies_to_root(log_stream) -> None:
    logging_module.set_log_level(logging.WARNING)
    structlog.get_logger("test").info("dropped")
    structlog.get_logger("test").warning("kept")

    assert [r["message"] for r in _lines(log_stream)] == ["kept"]
