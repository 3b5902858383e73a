"""
Tests for logging configuration and formatters
"""

import json
import logging

import pytest

from teamdash.core.logging_config import (
    ContextFormatter,
    JSONFormatter,
    current_request_id,
    get_logger,
    log_with_context,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(message="hello", **extra):
    logger = logging.getLogger("teamdash.test")
    record = logger.makeRecord("teamdash.test", logging.INFO, __file__, 10, message, None, None, extra=extra)
    return record


class TestJSONFormatter:
    """Test structured JSON output"""

    def test_formats_core_fields(self):
        data = json.loads(JSONFormatter().format(_record("Sprints fetched")))

        assert data["message"] == "Sprints fetched"
        assert data["level"] == "INFO"
        assert data["logger"] == "teamdash.test"
        assert data["timestamp"].endswith("Z")

    def test_includes_extra_fields(self):
        data = json.loads(JSONFormatter().format(_record(board_id="42", sprint_count=7)))

        assert data["board_id"] == "42"
        assert data["sprint_count"] == 7

    def test_flattens_log_with_context_fields(self):
        data = json.loads(JSONFormatter().format(_record(extra_fields={"filter": "mobile"})))

        assert data["filter"] == "mobile"
        assert "extra_fields" not in data


class TestSetupLogging:
    """Test root logger configuration"""

    def test_sets_level_and_single_console_handler(self, restore_root_logger):
        setup_logging(level="DEBUG", json_output=False)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

    def test_json_output_uses_json_formatter(self, restore_root_logger):
        setup_logging(level="INFO", json_output=True)

        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_quietens_http_client_loggers(self, restore_root_logger):
        setup_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING

    def test_log_file_gets_json_handler(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "dashboard.log"
        setup_logging(level="INFO", log_file=log_file)

        get_logger("teamdash.test").info("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert log_file.exists()
        assert "written to file" in log_file.read_text(encoding="utf-8")


class TestLogWithContext:
    def test_passes_context_as_extra_fields(self, caplog):
        logger = get_logger("teamdash.test")

        with caplog.at_level("INFO", logger="teamdash.test"):
            log_with_context(logger, "info", "Overview served", filter="web", errors=0)

        record = caplog.records[-1]
        assert record.getMessage() == "Overview served"
        assert record.extra_fields == {"filter": "web", "errors": 0}


class TestRequestId:
    """Records logged while serving a request carry its id"""

    def test_json_output_includes_current_request_id(self):
        token = current_request_id.set("req-0042")
        try:
            data = json.loads(JSONFormatter().format(_record("inside request")))
        finally:
            current_request_id.reset(token)

        assert data["request_id"] == "req-0042"

    def test_json_output_omits_request_id_outside_requests(self):
        data = json.loads(JSONFormatter().format(_record("startup")))

        assert "request_id" not in data

    def test_console_output_appends_short_request_id(self):
        formatter = ContextFormatter(fmt="%(message)s", use_color=False)
        token = current_request_id.set("0123456789abcdef")
        try:
            line = formatter.format(_record("Overview served"))
        finally:
            current_request_id.reset(token)

        assert line == "Overview served (request 01234567)"
