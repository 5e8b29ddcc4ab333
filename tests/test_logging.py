"""Tests for structured logging configuration."""

import json
import logging
import sys

from campus_api.logging_config import (
    JsonFormatter,
    TextFormatter,
    correlation_id_ctx,
    get_logger,
    setup_logging,
)


def _record(msg: str = "Test", level: int = logging.INFO, **kwargs) -> logging.LogRecord:
    return logging.LogRecord(
        name=kwargs.pop("name", "campus_api.test"),
        level=level,
        pathname=kwargs.pop("pathname", ""),
        lineno=kwargs.pop("lineno", 0),
        msg=msg,
        args=(),
        exc_info=kwargs.pop("exc_info", None),
    )


class TestJsonFormatter:
    """Tests for JSON log formatting."""

    def test_basic_fields(self):
        formatter = JsonFormatter(service_name="test-service")

        parsed = json.loads(formatter.format(_record("Account registered")))

        assert parsed["level"] == "INFO"
        assert parsed["service"] == "test-service"
        assert parsed["message"] == "Account registered"
        assert parsed["logger"] == "campus_api.test"
        assert "timestamp" in parsed

    def test_includes_correlation_id_when_set(self):
        formatter = JsonFormatter()

        token = correlation_id_ctx.set("req-123")
        try:
            parsed = json.loads(formatter.format(_record()))
        finally:
            correlation_id_ctx.reset(token)

        assert parsed["correlation_id"] == "req-123"

    def test_omits_correlation_id_outside_requests(self):
        parsed = json.loads(JsonFormatter().format(_record()))
        assert "correlation_id" not in parsed

    def test_merges_structured_fields(self):
        record = _record("Error cleaning up table", level=logging.ERROR)
        record.extra_fields = {"table": "notifications.user_id", "user_id": "user-1"}

        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["table"] == "notifications.user_id"
        assert parsed["user_id"] == "user-1"

    def test_error_includes_location(self):
        record = _record("Error", level=logging.ERROR, pathname="/app/x.py", lineno=42)
        record.funcName = "delete_account"

        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["location"] == {
            "file": "/app/x.py",
            "line": 42,
            "function": "delete_account",
        }

    def test_includes_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            exc_info = sys.exc_info()

        parsed = json.loads(
            JsonFormatter().format(_record("Error", level=logging.ERROR, exc_info=exc_info))
        )

        assert "ValueError" in parsed["exception"]


class TestTextFormatter:
    """Tests for text log formatting."""

    def test_basic_line(self):
        output = TextFormatter(service_name="test-service").format(_record("Test message"))

        assert "test-service" in output
        assert "INFO" in output
        assert "[-]" in output
        assert output.endswith("Test message")

    def test_correlation_id_and_fields(self):
        record = _record("SMS top-up settled")
        record.extra_fields = {"reference": "ref-001", "units": 500}

        token = correlation_id_ctx.set("abc-123")
        try:
            output = TextFormatter().format(record)
        finally:
            correlation_id_ctx.reset(token)

        assert "[abc-123]" in output
        assert output.endswith("SMS top-up settled reference=ref-001 units=500")


class TestStructuredLogger:
    """Tests for StructuredLogger wrapper."""

    def test_info(self, caplog):
        with caplog.at_level(logging.INFO):
            get_logger("campus_api.test").info("Payment initialized")

        assert "Payment initialized" in caplog.text

    def test_fields_attached_to_record(self, caplog):
        with caplog.at_level(logging.WARNING):
            get_logger("campus_api.test").warning("Cascade incomplete", failed=2)

        assert caplog.records[-1].extra_fields == {"failed": 2}

    def test_exception_keeps_traceback(self, caplog):
        logger = get_logger("campus_api.test")

        with caplog.at_level(logging.ERROR):
            try:
                raise RuntimeError("connection reset")
            except RuntimeError:
                logger.exception("delete-user failed", user_id="user-1")

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.exc_info is not None
        assert record.extra_fields == {"user_id": "user-1"}


class TestSetupLogging:
    """Tests for logging setup function."""

    def test_json(self):
        setup_logging(log_format="json", log_level="DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_text(self):
        setup_logging(log_format="text", log_level="INFO")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_custom_service_name(self):
        setup_logging(log_format="json", service_name="custom-service")

        formatter = logging.getLogger().handlers[0].formatter
        assert formatter.service_name == "custom-service"

    def test_quiets_http_client(self):
        setup_logging(log_format="json", log_level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
