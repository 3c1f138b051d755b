"""Tests for the crudkit logging setup."""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from crudkit.logging import (
    JSONLFormatter,
    get_log_file,
    get_logger,
    get_session_logger,
    log_with_context,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_crudkit_logger() -> Iterator[None]:
    yield
    root = logging.getLogger("crudkit")
    for handler in list(root.handlers):
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


def make_record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="crudkit.session",
        level=logging.WARNING,
        pathname="machine.py",
        lineno=42,
        msg="Status refresh failed",
        args=(),
        exc_info=None,
        func="refresh",
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONLFormatter:
    def test_basic_fields(self) -> None:
        entry = json.loads(JSONLFormatter().format(make_record(component="SESSION")))
        assert entry["level"] == "WARNING"
        assert entry["component"] == "SESSION"
        assert entry["message"] == "Status refresh failed"
        assert entry["source"] == {"file": "machine.py", "line": 42, "function": "refresh"}

    def test_context_included(self) -> None:
        entry = json.loads(JSONLFormatter().format(make_record(context={"status": 503})))
        assert entry["context"] == {"status": 503}
        assert entry["component"] == "CRUDKIT"


class TestSetupLogging:
    def test_console_only(self) -> None:
        stream = io.StringIO()
        assert setup_logging(log_dir=None, level=logging.INFO, stream=stream) is None
        get_session_logger().info("Logged in as %s", "ada")
        assert "[SESSION]" in stream.getvalue()
        assert "Logged in as ada" in stream.getvalue()
        assert get_log_file() is None

    def test_file_output_is_jsonl(self, tmp_path: Path) -> None:
        stream = io.StringIO()
        log_dir = setup_logging(log_dir=tmp_path / "logs", level=logging.DEBUG, stream=stream)
        assert log_dir == tmp_path / "logs"

        logger = get_logger("GATEWAY")
        log_with_context(logger, logging.WARNING, "Request failed", status=502)
        for handler in logging.getLogger("crudkit").handlers:
            handler.flush()

        log_file = get_log_file()
        assert log_file is not None
        lines = [json.loads(line) for line in log_file.read_text().splitlines()]
        entry = lines[-1]
        assert entry["component"] == "GATEWAY"
        assert entry["context"] == {"status": 502}

    def test_level_filters_console(self) -> None:
        stream = io.StringIO()
        setup_logging(log_dir=None, level=logging.WARNING, stream=stream)
        get_session_logger().info("quiet")
        assert stream.getvalue() == ""


class TestGetLogger:
    def test_cached_per_component(self) -> None:
        assert get_logger("SETTINGS") is get_logger("SETTINGS")

    def test_logger_name(self) -> None:
        assert get_logger("SCHEMA").name == "crudkit.schema"
