"""
Structured logging for adotasks.

Two output formats are supported:
- text: human readable, optionally colored, for terminals
- json: one JSON object per line, for log aggregation

Every handler installed by setup_logging carries a RedactingFilter, so the
personal access token and Authorization headers never reach a log sink.
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from adotasks.core.security import SecretRedactor, get_global_redactor


# Attributes every LogRecord has; anything else came in through ``extra``
STANDARD_RECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

# Loggers that are too chatty at INFO
NOISY_LOGGERS = ("urllib3", "requests")


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in STANDARD_RECORD_ATTRS and not key.startswith("_")
    }


# =============================================================================
# Formatters
# =============================================================================


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    def __init__(
        self,
        include_timestamp: bool = True,
        include_level: bool = True,
        include_logger: bool = True,
        include_location: bool = False,
        static_fields: dict[str, Any] | None = None,
    ):
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_level = include_level
        self.include_logger = include_logger
        self.include_location = include_location
        self.static_fields = dict(static_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {}

        if self.include_timestamp:
            created = datetime.fromtimestamp(record.created, tz=UTC)
            entry["timestamp"] = created.strftime("%Y-%m-%dT%H:%M:%S.") + f"{created.microsecond // 1000:03d}Z"
        if self.include_level:
            entry["level"] = record.levelname
        if self.include_logger:
            entry["logger"] = record.name

        entry["message"] = record.getMessage()
        entry.update(self.static_fields)

        if self.include_location:
            entry["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        context = _extra_fields(record)
        if context:
            entry["context"] = context

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
            }

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human readable formatter with optional colors and context."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, include_context: bool = False):
        super().__init__(fmt="%(asctime)s %(levelname)-8s %(name)s: %(message)s")
        self.use_colors = use_colors
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        output = super().format(record)

        if self.include_context:
            context = _extra_fields(record)
            if context:
                pairs = " ".join(f"{key}={value!r}" for key, value in context.items())
                output = f"{output} [{pairs}]"

        if self.use_colors and record.levelname in self.COLORS:
            output = f"{self.COLORS[record.levelname]}{output}{self.RESET}"
        return output


# =============================================================================
# Redaction
# =============================================================================


class RedactingFilter(logging.Filter):
    """
    Removes registered secrets from log records.

    Never drops a record; the message and its arguments are rewritten in place.
    """

    def __init__(self, redactor: SecretRedactor | None = None):
        super().__init__()
        self._redactor = redactor or get_global_redactor()

    @property
    def redactor(self) -> SecretRedactor:
        return self._redactor

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self._redactor.redact_string(record.msg)

        if isinstance(record.args, Mapping):
            record.args = self._redactor.redact_dict(dict(record.args))
        elif isinstance(record.args, tuple):
            record.args = tuple(self._redactor.redact_value(arg) for arg in record.args)

        return True


# =============================================================================
# Setup
# =============================================================================


def setup_logging(
    level: int = logging.INFO,
    log_format: str = "text",
    log_file: str | None = None,
    static_fields: dict[str, Any] | None = None,
    include_context: bool = False,
) -> RedactingFilter:
    """
    Configure the root logger.

    Existing root handlers are replaced. Console output goes to stderr; with
    ``log_file`` the same records are also appended to that file (without
    colors).

    Args:
        level: Root log level
        log_format: "text" or "json"
        log_file: Optional path of a log file
        static_fields: Fields added to every JSON record
        include_context: Append ``extra`` fields to text records (JSON records
            always carry them)

    Returns:
        The redacting filter attached to every handler

    Raises:
        OSError: If the log file cannot be opened
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.setLevel(level)

    redacting_filter = RedactingFilter()

    def make_formatter(use_colors: bool) -> logging.Formatter:
        if log_format == "json":
            return JSONFormatter(static_fields=static_fields)
        return TextFormatter(use_colors=use_colors, include_context=include_context)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(make_formatter(use_colors=sys.stderr.isatty()))
    console_handler.addFilter(redacting_filter)
    root.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(make_formatter(use_colors=False))
        file_handler.addFilter(redacting_filter)
        root.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return redacting_filter
