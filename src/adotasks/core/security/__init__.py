"""
Security - secrets hygiene for logs and diagnostics.

Provides:
- SecretRedactor: Redact sensitive values from strings/dicts
- SENSITIVE_PATTERNS: Known patterns for secret detection
"""

from .redactor import (
    DEFAULT_REDACTED,
    SENSITIVE_KEY_PATTERNS,
    SENSITIVE_PATTERNS,
    RedactionConfig,
    SecretRedactor,
    get_global_redactor,
    register_secret,
)


__all__ = [
    "DEFAULT_REDACTED",
    "SENSITIVE_KEY_PATTERNS",
    "SENSITIVE_PATTERNS",
    "RedactionConfig",
    "SecretRedactor",
    "get_global_redactor",
    "register_secret",
]
