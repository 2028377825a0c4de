# tests/unit/logging/test_unit_logger.py - v2
"""Tests for logging/logger.py - formatters, setup and file rotation."""

from __future__ import annotations

import io
import json
import logging
from logging.handlers import RotatingFileHandler

import pytest

from smartsaver.config.settings import Settings
from smartsaver.logging.context import (
    clear_context,
    set_provider_context,
    set_request_context,
)
from smartsaver.logging.logger import (
    JsonFormatter,
    TextFormatter,
    parse_size,
    setup_logging,
    setup_logging_from_settings,
)


def _record(msg: str = "Hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test", level=logging.INFO, pathname="", lineno=0,
        msg=msg, args=(), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def _isolate_logging():
    root = logging.getLogger("smartsaver")
    handlers, level = list(root.handlers), root.level
    clear_context()
    yield
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    clear_context()


class TestJsonFormatter:
    def test_format_basic(self):
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Hello"
        assert "timestamp" in parsed
        assert "context" not in parsed

    def test_format_with_context(self):
        set_request_context("req1", "abc123")
        set_provider_context("groq")
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["context"] == {
            "request_id": "req1", "fingerprint": "abc123", "provider": "groq",
        }

    def test_extra_data(self):
        parsed = json.loads(JsonFormatter().format(_record(data={"hits": 3})))
        assert parsed["data"] == {"hits": 3}

    def test_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            import sys
            record = _record()
            record.exc_info = sys.exc_info()
        parsed = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: boom" in parsed["exception"]


class TestTextFormatter:
    def test_format_basic(self):
        output = TextFormatter().format(_record("Hello text"))
        assert "Hello text" in output
        assert "INFO" in output

    def test_shows_request_and_provider(self):
        set_request_context("req42")
        set_provider_context("gemini")
        output = TextFormatter().format(_record())
        assert "[req42]" in output
        assert "(gemini)" in output


class TestSetupLogging:
    def test_setup_json(self):
        stream = io.StringIO()
        setup_logging(level="DEBUG", log_format="json", stream=stream)
        root = logging.getLogger("smartsaver")
        assert root.level == logging.DEBUG
        logging.getLogger("smartsaver.test").debug("written")
        assert json.loads(stream.getvalue())["message"] == "written"

    def test_reinit_does_not_duplicate(self):
        setup_logging(log_format="text")
        setup_logging(log_format="text")
        assert len(logging.getLogger("smartsaver").handlers) == 1

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "smartsaver.log"
        setup_logging(log_file=str(log_file), rotation="1MB", retention=3)
        [file_handler] = [
            h for h in logging.getLogger("smartsaver").handlers
            if isinstance(h, RotatingFileHandler)
        ]
        assert file_handler.maxBytes == 1024 * 1024
        assert file_handler.backupCount == 3
        assert log_file.parent.exists()

    def test_from_settings_verbose(self):
        s = Settings(_env_file=None, log_level="WARNING", log_format="json")
        setup_logging_from_settings(s, verbose=True, stream=io.StringIO())
        root = logging.getLogger("smartsaver")
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_from_settings(self):
        s = Settings(_env_file=None, log_level="WARNING", log_format="json")
        setup_logging_from_settings(s, stream=io.StringIO())
        root = logging.getLogger("smartsaver")
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JsonFormatter)


class TestParseSize:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("10MB", 10 * 1024 * 1024),
            ("512KB", 512 * 1024),
            ("1GB", 1024 * 1024 * 1024),
            ("10mb", 10 * 1024 * 1024),
            ("2 MB", 2 * 1024 * 1024),
            ("4096", 4096),
            ("100B", 100),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_size(text) == expected

    @pytest.mark.parametrize("text", ["10bytes", "", "MB", "0MB", "-1MB"])
    def test_invalid(self, text):
        with pytest.raises(ValueError, match="Invalid size"):
            parse_size(text)
