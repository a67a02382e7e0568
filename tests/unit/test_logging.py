"""Tests for openapi-tooldefs logging module."""

from __future__ import annotations

import io
import json
import logging
import sys

import pytest

from openapi_tooldefs.logging import (
    ROOT_LOGGER_NAME,
    HumanFormatter,
    JSONFormatter,
    StructuredLogger,
    configure_logging,
    get_logger,
)


def _record(level: int = logging.INFO, msg: str = "Test message", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


# =============================================================================
# JSONFormatter Tests
# =============================================================================


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_format_basic_message(self) -> None:
        """Test formatting a basic log message."""
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "test.logger"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert "location" not in data

    def test_format_with_extra(self) -> None:
        """Test formatting includes extra fields."""
        data = json.loads(JSONFormatter().format(_record(path="/users", tool_count=3)))

        assert data["path"] == "/users"
        assert data["tool_count"] == 3

    def test_format_error_includes_location(self) -> None:
        """Test error logs include location info."""
        data = json.loads(JSONFormatter().format(_record(level=logging.ERROR)))

        assert data["location"]["file"] == "test.py"
        assert data["location"]["line"] == 10

    def test_format_with_exception(self) -> None:
        """Test formatting includes exception info."""
        try:
            raise ValueError("Test error")
        except ValueError:
            record = _record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: Test error" in data["exception"]

    def test_non_serializable_extra(self) -> None:
        data = json.loads(JSONFormatter().format(_record(obj=object())))
        assert data["obj"].startswith("<object object")


# =============================================================================
# HumanFormatter Tests
# =============================================================================


class TestHumanFormatter:
    """Tests for HumanFormatter."""

    def test_format_info_message(self) -> None:
        output = HumanFormatter().format(_record())
        assert output == "INFO     test.logger: Test message"

    def test_format_with_fields(self) -> None:
        output = HumanFormatter().format(_record(extracted=4, skipped_ops=1))
        assert output.endswith("Test message extracted=4 skipped_ops=1")


# =============================================================================
# configure_logging / get_logger Tests
# =============================================================================


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_configure_debug_level(self) -> None:
        root = configure_logging(level="DEBUG")
        assert root.name == ROOT_LOGGER_NAME
        assert root.level == logging.DEBUG

    def test_configure_with_json_format(self) -> None:
        stream = io.StringIO()
        configure_logging(level="INFO", format="json", stream=stream)

        get_logger("test").info("hello", tool="listUsers")

        data = json.loads(stream.getvalue().strip())
        assert data["message"] == "hello"
        assert data["tool"] == "listUsers"

    def test_configure_with_human_format(self) -> None:
        stream = io.StringIO()
        configure_logging(level="WARNING", stream=stream)

        log = get_logger("test")
        log.info("hidden")
        log.warning("shown", path="/x")

        output = stream.getvalue()
        assert "hidden" not in output
        assert "WARNING  openapi_tooldefs.test: shown path=/x" in output

    def test_reconfigure_replaces_handler(self) -> None:
        configure_logging()
        root = configure_logging()
        own = [h for h in root.handlers if getattr(h, "_openapi_tooldefs", False)]
        assert len(own) == 1

    def test_unknown_level_falls_back_to_info(self) -> None:
        assert configure_logging(level="LOUD").level == logging.INFO


class TestGetLogger:
    """Tests for get_logger."""

    def test_get_logger_prefixes_namespace(self) -> None:
        assert get_logger("extractor").name == "openapi_tooldefs.extractor"

    def test_get_logger_keeps_full_name(self) -> None:
        assert get_logger("openapi_tooldefs.extractor").name == "openapi_tooldefs.extractor"
        assert get_logger(ROOT_LOGGER_NAME).name == ROOT_LOGGER_NAME

    def test_get_logger_returns_structured_logger(self) -> None:
        log = get_logger("x")
        assert isinstance(log, StructuredLogger)
        assert isinstance(log.logger, logging.Logger)


# =============================================================================
# StructuredLogger Tests
# =============================================================================


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    def test_info_method(self, caplog: pytest.LogCaptureFixture) -> None:
        log = StructuredLogger("test.structured")
        with caplog.at_level(logging.INFO, logger="test.structured"):
            log.info("Processed", count=3)

        assert "Processed" in caplog.text
        assert caplog.records[0].count == 3

    def test_warning_method(self, caplog: pytest.LogCaptureFixture) -> None:
        log = StructuredLogger("test.structured")
        with caplog.at_level(logging.WARNING, logger="test.structured"):
            log.warning("Careful")

        assert caplog.records[0].levelno == logging.WARNING

    def test_error_records_caller_location(self, caplog: pytest.LogCaptureFixture) -> None:
        log = StructuredLogger("test.structured")
        with caplog.at_level(logging.ERROR, logger="test.structured"):
            log.error("Failed")

        assert caplog.records[0].filename == "test_logging.py"

    def test_exception_method(self, caplog: pytest.LogCaptureFixture) -> None:
        log = StructuredLogger("test.structured")
        with caplog.at_level(logging.ERROR, logger="test.structured"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                log.exception("Crashed")

        assert caplog.records[0].exc_info is not None

    def test_disabled_level_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        log = StructuredLogger("test.structured")
        with caplog.at_level(logging.WARNING, logger="test.structured"):
            log.debug("quiet")

        assert caplog.records == []
