"""
Secret Redactor - keeps access tokens out of logs and diagnostics.

Secrets are redacted in three ways:
- registered values (e.g. the personal access token the client was built with)
- well-known patterns (Basic/Bearer authorization headers)
- sensitive dictionary keys (``access_token``, ``pat``, ``password``, ...)
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from typing import Any


DEFAULT_REDACTED = "[REDACTED]"

# Values shorter than this are too likely to collide with ordinary text
MIN_SECRET_LENGTH = 4

SENSITIVE_KEY_PATTERNS = frozenset(
    {
        "access_token",
        "api_key",
        "api_token",
        "authorization",
        "azure_devops_pat",
        "bearer_token",
        "passwd",
        "password",
        "pat",
        "personal_access_token",
        "refresh_token",
        "secret",
        "token",
    }
)

SENSITIVE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    # a credential is either long or padded; short unpadded words are prose
    (
        "Basic auth header",
        re.compile(r"(?i)\bbasic\s+(?:[A-Za-z0-9+/]{20,}={0,2}|[A-Za-z0-9+/]{8,}={1,2})(?![A-Za-z0-9+/=])"),
    ),
    ("Bearer token", re.compile(r"(?i)\bbearer\s+[A-Za-z0-9\-._~+/]{16,}=*")),
]


def _normalize_key(key: str) -> str:
    return key.lower().replace("-", "_")


def _is_sensitive_key(key: str) -> bool:
    normalized = _normalize_key(key)
    return normalized in SENSITIVE_KEY_PATTERNS or normalized.replace("_", "") in {
        k.replace("_", "") for k in SENSITIVE_KEY_PATTERNS
    }


@dataclass
class RedactionConfig:
    """How redacted values are rendered."""

    placeholder: str = DEFAULT_REDACTED
    show_partial: bool = False
    partial_chars: int = 4
    redact_patterns: bool = True


class SecretRedactor:
    """
    Redacts registered secrets and known secret patterns.

    Thread-safe: secrets may be registered while other threads log.
    """

    def __init__(self, config: RedactionConfig | None = None):
        self.config = config or RedactionConfig()
        self._secrets: set[str] = set()
        self._lock = threading.Lock()

    @property
    def registered_count(self) -> int:
        with self._lock:
            return len(self._secrets)

    def register_secret(self, value: str | None) -> None:
        """Register a value that must never appear in output."""
        if not value or len(value) < MIN_SECRET_LENGTH:
            return
        with self._lock:
            self._secrets.add(value)

    def register_secrets(self, *values: str | None) -> None:
        for value in values:
            self.register_secret(value)

    def _mask(self, value: str) -> str:
        if self.config.show_partial and len(value) > self.config.partial_chars * 2:
            n = self.config.partial_chars
            return f"{value[:n]}...{value[-n:]}"
        return self.config.placeholder

    def redact_string(self, text: str) -> str:
        """Return ``text`` with every secret replaced by the placeholder."""
        if not text:
            return text

        with self._lock:
            # longest first so that overlapping secrets are fully removed
            secrets = sorted(self._secrets, key=len, reverse=True)

        for secret in secrets:
            if secret in text:
                text = text.replace(secret, self._mask(secret))

        if self.config.redact_patterns:
            for _name, pattern in SENSITIVE_PATTERNS:
                text = pattern.sub(self.config.placeholder, text)

        return text

    def redact_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.redact_string(value)
        if isinstance(value, dict):
            return self.redact_dict(value)
        if isinstance(value, list):
            return [self.redact_value(v) for v in value]
        if isinstance(value, tuple):
            return tuple(self.redact_value(v) for v in value)
        return value

    def redact_dict(self, data: dict[str, Any], copy: bool = True) -> dict[str, Any]:
        """
        Redact sensitive keys and embedded secrets in a (nested) dictionary.

        Args:
            data: Dictionary to redact
            copy: Return a new dictionary instead of modifying ``data``
        """
        result = dict(data) if copy else data
        for key, value in list(result.items()):
            if isinstance(key, str) and _is_sensitive_key(key) and value:
                result[key] = self.config.placeholder
            else:
                result[key] = self.redact_value(value)
        return result


# -------------------------------------------------------------------------
# Global redactor
# -------------------------------------------------------------------------

_global_redactor: SecretRedactor | None = None
_global_lock = threading.Lock()


def get_global_redactor() -> SecretRedactor:
    """Get the process-wide redactor used by the logging filter."""
    global _global_redactor
    with _global_lock:
        if _global_redactor is None:
            _global_redactor = SecretRedactor()
        return _global_redactor


def register_secret(value: str | None) -> None:
    get_global_redactor().register_secret(value)
