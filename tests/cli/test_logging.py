"""
Tests for structured logging.
"""

import json
import logging
import sys
from io import StringIO

import pytest

from adotasks.cli.logging import (
    JSONFormatter,
    RedactingFilter,
    TextFormatter,
    setup_logging,
)


def make_record(msg="Test message", args=(), level=logging.INFO, exc_info=None):
    return logging.LogRecord(
        name="AzureDevOpsApiClient",
        level=level,
        pathname="client.py",
        lineno=42,
        msg=msg,
        args=args,
        exc_info=exc_info,
    )


@pytest.fixture
def reset_root_logger():
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()


# =============================================================================
# JSONFormatter Tests
# =============================================================================


class TestJSONFormatter:
    """Tests for the JSON log formatter."""

    def test_basic_format(self):
        parsed = json.loads(JSONFormatter().format(make_record()))

        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "AzureDevOpsApiClient"
        assert parsed["message"] == "Test message"
        assert "timestamp" in parsed

    def test_message_args(self):
        parsed = json.loads(JSONFormatter().format(make_record("Fetched %s items", (5,))))

        assert parsed["message"] == "Fetched 5 items"

    def test_exception_block(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            record = make_record("failed", level=logging.ERROR, exc_info=sys.exc_info())

        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["exception"]["type"] == "ValueError"
        assert parsed["exception"]["message"] == "Test error"
        assert "Traceback" in parsed["exception"]["traceback"]

    def test_extra_fields_in_context(self):
        record = make_record()
        record.work_item_id = "42"

        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["context"] == {"work_item_id": "42"}

    def test_static_fields(self):
        formatter = JSONFormatter(static_fields={"service": "adotasks"})

        assert json.loads(formatter.format(make_record()))["service"] == "adotasks"

    def test_location(self):
        parsed = json.loads(JSONFormatter(include_location=True).format(make_record()))

        assert parsed["location"]["line"] == 42

    def test_optional_fields_excluded(self):
        formatter = JSONFormatter(include_timestamp=False, include_level=False, include_logger=False)

        parsed = json.loads(formatter.format(make_record()))

        assert set(parsed) == {"message"}

    def test_timestamp_is_utc_iso8601(self):
        timestamp = json.loads(JSONFormatter().format(make_record()))["timestamp"]

        assert timestamp.endswith("Z")
        assert "T" in timestamp
        assert len(timestamp) == 24


# =============================================================================
# TextFormatter Tests
# =============================================================================


class TestTextFormatter:
    def test_basic_format(self):
        output = TextFormatter(use_colors=False).format(make_record())

        assert "AzureDevOpsApiClient" in output
        assert "INFO" in output
        assert "Test message" in output
        assert "\033[" not in output

    def test_colors(self):
        output = TextFormatter(use_colors=True).format(make_record(level=logging.WARNING))

        assert output.startswith("\033[33m")

    def test_context(self):
        record = make_record()
        record.work_item_id = "42"

        output = TextFormatter(use_colors=False, include_context=True).format(record)

        assert "work_item_id='42'" in output


# =============================================================================
# setup_logging Tests
# =============================================================================


@pytest.mark.usefixtures("reset_root_logger")
class TestSetupLogging:
    """Tests for setup_logging."""

    def test_text_logging(self):
        setup_logging(level=logging.INFO, log_format="text")

        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_json_logging(self):
        setup_logging(level=logging.DEBUG, log_format="json", static_fields={"service": "test"})

        formatter = logging.getLogger().handlers[0].formatter
        assert isinstance(formatter, JSONFormatter)
        assert formatter.static_fields == {"service": "test"}

    def test_replaces_handlers(self):
        root = logging.getLogger()
        root.addHandler(logging.StreamHandler(StringIO()))
        root.addHandler(logging.StreamHandler(StringIO()))

        setup_logging()

        assert len(root.handlers) == 1

    def test_quiets_urllib3(self):
        setup_logging()

        assert logging.getLogger("urllib3").level == logging.WARNING

    def test_handlers_redact(self):
        filter_ = setup_logging()

        for handler in logging.getLogger().handlers:
            assert filter_ in handler.filters
        assert isinstance(filter_, RedactingFilter)

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "adotasks.log"

        setup_logging(level=logging.INFO, log_format="json", log_file=str(log_file))
        logging.getLogger("FileTest").warning("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        parsed = json.loads(log_file.read_text().strip())
        assert parsed["message"] == "written to file"
        assert parsed["logger"] == "FileTest"

    def test_log_file_without_colors(self, tmp_path):
        log_file = tmp_path / "adotasks.log"

        setup_logging(log_format="text", log_file=str(log_file))
        logging.getLogger("FileTest").warning("plain")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "\033[" not in log_file.read_text()

    def test_token_never_reaches_file(self, tmp_path, client):
        log_file = tmp_path / "adotasks.log"

        setup_logging(level=logging.DEBUG, log_file=str(log_file))
        logging.getLogger("Leak").info(f"headers={client.headers}")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text()
        assert "secret-pat-123" not in content
        assert client.headers["Authorization"] not in content

    def test_text_context_in_file(self, tmp_path):
        log_file = tmp_path / "adotasks.log"

        setup_logging(level=logging.DEBUG, log_file=str(log_file), include_context=True)
        logging.getLogger("AzureDevOpsRepository").debug("Opening", extra={"team": "org", "project": "proj"})
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "[team='org' project='proj']" in log_file.read_text()

    def test_text_context_off_by_default(self):
        setup_logging(log_format="text")

        assert logging.getLogger().handlers[0].formatter.include_context is False

    def test_unwritable_log_file(self, tmp_path):
        with pytest.raises(OSError):
            setup_logging(log_file=str(tmp_path / "missing-dir" / "adotasks.log"))
