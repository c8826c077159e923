"""
Tests for RedactingFilter.
"""

import logging

import pytest

from adotasks.cli.logging import RedactingFilter
from adotasks.core.security import SecretRedactor


def make_record(msg, args=()):
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=msg,
        args=args,
        exc_info=None,
    )


class TestRedactingFilter:
    """Tests for RedactingFilter class."""

    def test_default_uses_global_redactor(self) -> None:
        assert RedactingFilter().redactor is not None

    def test_explicit_redactor(self) -> None:
        redactor = SecretRedactor()

        assert RedactingFilter(redactor).redactor is redactor


class TestFilterLogRecords:
    """Tests for filtering log records."""

    @pytest.fixture
    def filter_with_secret(self) -> RedactingFilter:
        redactor = SecretRedactor()
        redactor.register_secret("secret-value-123")
        return RedactingFilter(redactor)

    def test_redacts_message(self, filter_with_secret: RedactingFilter) -> None:
        record = make_record("Using secret-value-123 for auth")

        assert filter_with_secret.filter(record) is True
        assert "secret-value-123" not in record.msg
        assert "[REDACTED]" in record.msg

    def test_redacts_string_args(self, filter_with_secret: RedactingFilter) -> None:
        record = make_record("Token: %s", ("secret-value-123",))

        filter_with_secret.filter(record)

        assert "secret-value-123" not in record.getMessage()

    def test_redacts_mapping_args(self, filter_with_secret: RedactingFilter) -> None:
        # a single mapping argument becomes record.args itself
        record = make_record("Config: %(access_token)s", ({"access_token": "anything"},))

        filter_with_secret.filter(record)

        assert record.getMessage() == "Config: [REDACTED]"

    def test_safe_message_untouched(self) -> None:
        record = make_record("Normal message without secrets")

        RedactingFilter(SecretRedactor()).filter(record)

        assert record.msg == "Normal message without secrets"
