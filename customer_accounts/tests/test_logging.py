"""Tests for structured logging."""

import json
import logging
import sys

import pytest

from customer_accounts.core import logging as core_logging
from customer_accounts.core.config import settings
from customer_accounts.core.logging import ConsoleFormatter, JSONFormatter, bind, get_logger


def _record(msg="Customer created", level=logging.INFO, exc_info=None, **context):
    record = logging.LogRecord(
        name="customer_accounts.services",
        level=level,
        pathname="/app/customer_service.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in context.items():
        setattr(record, key, value)
    return record


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def captured():
    """Records emitted under ``customer_accounts`` while the test runs."""
    handler = ListHandler()
    target = logging.getLogger("customer_accounts")
    previous_level = target.level
    target.addHandler(handler)
    target.setLevel(logging.DEBUG)
    try:
        yield handler.records
    finally:
        target.removeHandler(handler)
        target.setLevel(previous_level)


class TestJSONFormatter:
    def test_basic_log_format(self):
        parsed = json.loads(JSONFormatter().format(_record()))

        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "customer_accounts.services"
        assert parsed["message"] == "Customer created"
        assert "timestamp" in parsed
        assert "exception" not in parsed

    def test_context_fields_at_top_level(self):
        record = _record(
            account_id="7c9e6679-7425-40de-944b-e07fc1f90ae7",
            method="POST",
            path="/api/customers",
            status_code=None,
        )

        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["account_id"] == "7c9e6679-7425-40de-944b-e07fc1f90ae7"
        assert parsed["method"] == "POST"
        assert parsed["path"] == "/api/customers"
        assert "status_code" not in parsed

    def test_unknown_attributes_not_rendered(self):
        parsed = json.loads(JSONFormatter().format(_record(password="hunter2")))
        assert "password" not in parsed

    def test_exception(self):
        try:
            raise ValueError("Email must be a valid email address")
        except ValueError:
            record = _record(msg="Validation failed", level=logging.ERROR, exc_info=sys.exc_info())

        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["exception"]["type"] == "ValueError"
        assert parsed["exception"]["message"] == "Email must be a valid email address"
        assert any("ValueError" in line for line in parsed["exception"]["traceback"])


class TestConsoleFormatter:
    def test_level_message_and_context(self):
        record = _record(level=logging.WARNING, msg="Request failed", method="GET", error_code="NOT_FOUND")
        output = ConsoleFormatter().format(record)

        assert ConsoleFormatter.COLORS["WARNING"] in output
        assert "customer_accounts.services: Request failed" in output
        assert output.endswith("[method=GET error_code=NOT_FOUND]")

    def test_no_context_suffix(self):
        assert not ConsoleFormatter().format(_record()).endswith("]")


class TestSetupLogging:
    def test_format_override(self, monkeypatch):
        monkeypatch.setattr(settings, "log_format", "json")
        assert isinstance(core_logging.build_formatter(), JSONFormatter)
        monkeypatch.setattr(settings, "log_format", "console")
        assert isinstance(core_logging.build_formatter(), ConsoleFormatter)

    def test_auto_detects_production(self, monkeypatch):
        monkeypatch.setattr(settings, "log_format", None)
        monkeypatch.setattr(settings, "environment", "production")
        assert isinstance(core_logging.build_formatter(), JSONFormatter)
        monkeypatch.setattr(settings, "environment", "development")
        assert isinstance(core_logging.build_formatter(), ConsoleFormatter)

    def test_setup_installs_single_handler(self, monkeypatch):
        monkeypatch.setattr(settings, "log_format", "json")
        root = logging.getLogger()
        saved = root.handlers[:]
        try:
            core_logging.setup_logging()
            core_logging.setup_logging()
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, JSONFormatter)
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            root.handlers[:] = saved


class TestBind:
    def test_bound_context_on_records(self, captured):
        log = bind(get_logger("customer_accounts.tests"), {"method": "GET", "path": "/api/customers"})
        log.info("Listing customers")

        assert captured[-1].method == "GET"
        assert captured[-1].path == "/api/customers"

    def test_call_extra_wins_and_is_not_mutated(self, captured):
        log = bind(get_logger("customer_accounts.tests"), {"method": "GET", "status_code": 200})
        extra = {"status_code": 404}
        log.warning("Request failed", extra=extra)

        assert captured[-1].status_code == 404
        assert captured[-1].method == "GET"
        assert extra == {"status_code": 404}
        assert log.extra == {"method": "GET", "status_code": 200}


class TestRequestLogging:
    def test_request_line_carries_request_context(self, client, captured):
        client.get("/api/customers", headers={"User-Agent": "pytest-agent"})

        request_records = [r for r in captured if r.name == "customer_accounts.main" and r.levelno == logging.INFO]
        record = request_records[-1]
        assert record.getMessage() == "GET /api/customers"
        assert record.method == "GET"
        assert record.path == "/api/customers"
        assert record.user_agent == "pytest-agent"

    def test_error_log_carries_status_and_code(self, client, captured):
        client.get("/api/customers/not-a-uuid")

        record = [r for r in captured if r.name == "customer_accounts.api.errors"][-1]
        assert record.levelno == logging.WARNING
        assert record.status_code == 404
        assert record.error_code == "NOT_FOUND"
        assert record.path == "/api/customers/not-a-uuid"
