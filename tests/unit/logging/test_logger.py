# tests/unit/logging/test_logger.py — v1
"""Tests for logging/logger.py — logger factory and formatters."""

from __future__ import annotations

import json
import logging

from salesintel.logging.context import (
    clear_context,
    set_request_context,
    set_source_context,
    set_stage_context,
)
from salesintel.logging.logger import JsonFormatter, TextFormatter, get_logger, setup_logging


def _record(msg: str = "Hello", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="test", level=level, pathname="", lineno=0,
        msg=msg, args=(), exc_info=None,
    )


class TestJsonFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Hello"
        assert "timestamp" in parsed
        assert "context" not in parsed

    def test_format_with_context(self):
        set_request_context("req-42", "acme.com", "alice")
        set_stage_context("collect")
        parsed = json.loads(JsonFormatter().format(_record("test msg")))
        assert parsed["context"]["request_id"] == "req-42"
        assert parsed["context"]["stage"] == "collect"

    def test_format_with_extra_data(self):
        record = _record()
        record.data = {"sources": 3}
        parsed = json.loads(JsonFormatter().format(record))
        assert parsed["data"] == {"sources": 3}


class TestTextFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        output = TextFormatter().format(_record("Hello text"))
        assert "Hello text" in output
        assert "INFO" in output

    def test_format_with_stage_and_source(self):
        set_stage_context("collect")
        set_source_context("youtube")
        output = TextFormatter().format(_record())
        assert "[collect]" in output
        assert "(youtube)" in output


class TestGetLogger:
    def test_returns_logger(self):
        logger = get_logger("test_module")
        assert logger.name == "salesintel.test_module"


class TestSetupLogging:
    def test_setup_json(self):
        setup_logging(level="DEBUG", log_format="json")
        root = logging.getLogger("salesintel")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_setup_text(self):
        setup_logging(level="INFO", log_format="text")
        root = logging.getLogger("salesintel")
        assert root.level == logging.INFO
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_reinit_does_not_duplicate(self):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger("salesintel").handlers) == 1

    def test_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "salesintel.log"
        setup_logging(log_format="json", log_file=str(log_file))
        root = logging.getLogger("salesintel")
        assert len(root.handlers) == 2
        get_logger("t").info("written")
        for handler in root.handlers:
            handler.flush()
        assert "written" in log_file.read_text(encoding="utf-8")
        setup_logging()
