"""
Centralized exception hierarchy for adotasks.

All exceptions raised by the client, the repository adapter and the
configuration layer derive from AdoTasksError. Semantic absence (HTTP 404)
is never represented by an exception; transport failures raised by
``requests`` are propagated unwrapped.

Hierarchy:
    AdoTasksError
    ├── ConfigError
    │   ├── MissingConfigError
    │   └── ConfigFileError
    ├── TrackerError
    │   └── AzureDevOpsError
    ├── ClientClosedError
    └── OperationCancelledError
"""

from __future__ import annotations


__all__ = [
    "AdoTasksError",
    "AzureDevOpsError",
    "ClientClosedError",
    "ConfigError",
    "ConfigFileError",
    "MissingConfigError",
    "OperationCancelledError",
    "TrackerError",
]


class AdoTasksError(Exception):
    """Base exception for all adotasks errors."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} (caused by {type(self.cause).__name__}: {self.cause})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigError(AdoTasksError):
    """Configuration is missing or invalid."""


class MissingConfigError(ConfigError):
    """
    An operation was attempted without team, project or access token.

    Raised before any network call is made.
    """

    def __init__(
        self,
        message: str,
        missing: list[str] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause)
        self.missing = list(missing or [])


class ConfigFileError(ConfigError):
    """A configuration file could not be read or parsed."""

    def __init__(self, message: str, path: str | None = None, cause: BaseException | None = None):
        super().__init__(message, cause)
        self.path = path

    def __str__(self) -> str:
        base = super().__str__()
        if self.path:
            return f"{base} [{self.path}]"
        return base


# =============================================================================
# Tracker Errors
# =============================================================================


class TrackerError(AdoTasksError):
    """An error reported while talking to the work tracking service."""

    def __init__(
        self,
        message: str,
        issue_key: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause)
        self.issue_key = issue_key


class AzureDevOpsError(TrackerError):
    """
    The Azure DevOps API answered with an unexpected status code.

    ``reason`` holds the raw response body verbatim, for operator diagnosis.
    """

    def __init__(
        self,
        message: str,
        reason: str = "",
        status_code: int | None = None,
        issue_key: str | None = None,
    ):
        super().__init__(message, issue_key=issue_key)
        self.reason = reason
        self.status_code = status_code


# =============================================================================
# Lifecycle Errors
# =============================================================================


class ClientClosedError(AdoTasksError):
    """The client was used after its connection pool was released."""


class OperationCancelledError(AdoTasksError):
    """An in-flight operation was aborted at the caller's request."""
