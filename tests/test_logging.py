"""Tests for structured logging."""

import json
import logging

from invoice_desk.shared.infrastructure.logging import (
    REDACTED,
    CustomJsonFormatter,
    EnvironmentFilter,
    correlation_id_var,
    get_context_logger,
    log_latency,
)


def format_record(**extra) -> dict:
    formatter = CustomJsonFormatter("%(name)s %(levelname)s %(message)s")
    record = logging.LogRecord("invoice_desk.test", logging.INFO, __file__, 1, "API request", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return json.loads(formatter.format(record))


class TestCustomJsonFormatter:
    """Test CustomJsonFormatter."""

    def test_standard_fields(self):
        data = format_record()

        assert data["message"] == "API request"
        assert data["levelname"] == "INFO"
        assert data["timestamp"]
        assert data["environment"] == "unknown"

    def test_credentials_are_redacted(self):
        data = format_record(token="secret-token", authorization="Bearer abc", invoice_id="1")

        assert data["token"] == REDACTED
        assert data["authorization"] == REDACTED
        assert data["invoice_id"] == "1"

    def test_correlation_id_from_context(self):
        reset_token = correlation_id_var.set("corr-9")
        try:
            data = format_record()
        finally:
            correlation_id_var.reset(reset_token)

        assert data["correlation_id"] == "corr-9"

    def test_explicit_correlation_id_wins(self):
        reset_token = correlation_id_var.set("from-context")
        try:
            data = format_record(correlation_id="explicit")
        finally:
            correlation_id_var.reset(reset_token)

        assert data["correlation_id"] == "explicit"

    def test_environment_filter(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

        assert EnvironmentFilter("test").filter(record)
        assert record.environment == "test"


class TestLoggerHelpers:
    """Test get_context_logger and log_latency."""

    def test_context_logger_merges_extra(self, caplog):
        logger = get_context_logger("invoice_desk.test", "corr-1")

        with caplog.at_level(logging.INFO, logger="invoice_desk.test"):
            logger.info("Request rejected", extra={"status_code": 422})

        record = caplog.records[-1]
        assert record.correlation_id == "corr-1"
        assert record.status_code == 422

    def test_context_logger_without_id(self):
        assert isinstance(get_context_logger("invoice_desk.test"), logging.Logger)

    def test_log_latency(self, caplog):
        logger = logging.getLogger("invoice_desk.test")

        with caplog.at_level(logging.INFO, logger="invoice_desk.test"):
            with log_latency(logger, "workflow_page_load", invoice_id="1"):
                pass

        record = caplog.records[-1]
        assert record.getMessage() == "workflow_page_load completed"
        assert record.invoice_id == "1"
        assert record.latency_ms >= 0
