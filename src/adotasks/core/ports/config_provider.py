"""
Configuration Provider Port - Abstract interface for configuration.

Implementations:
- FileConfigProvider: Load from YAML/TOML config files
- EnvironmentConfigProvider: Load from env vars and .env, layered over files
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


DEFAULT_BASE_URL = "https://dev.azure.com"


@dataclass
class AzureDevOpsConfig:
    """Connection settings for one Azure DevOps team project."""

    team_id: str = ""
    project_id: str = ""
    access_token: str = ""  # Personal Access Token, never logged

    # Preferred states applied when a task is opened or closed by a caller
    preferred_open_state: str | None = None
    preferred_close_state: str | None = None

    def missing_fields(self) -> list[str]:
        """Names of the required settings that are not set."""
        missing = []
        if not self.team_id:
            missing.append("team_id")
        if not self.project_id:
            missing.append("project_id")
        if not self.access_token:
            missing.append("access_token")
        return missing

    def is_valid(self) -> bool:
        """Check if configuration is complete enough to talk to the API."""
        return not self.missing_fields()

    def __repr__(self) -> str:
        token = "***" if self.access_token else ""
        return (
            f"AzureDevOpsConfig(team_id={self.team_id!r}, project_id={self.project_id!r}, "
            f"access_token={token!r})"
        )


@dataclass
class AppConfig:
    """Complete application configuration."""

    tracker: AzureDevOpsConfig = field(default_factory=AzureDevOpsConfig)

    # Logging / output
    verbose: bool = False
    log_format: str = "text"
    log_file: str | None = None

    def validate(self) -> list[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.tracker.team_id:
            errors.append("Missing Azure DevOps organization/team (AZURE_DEVOPS_ORG)")
        if not self.tracker.project_id:
            errors.append("Missing Azure DevOps project (AZURE_DEVOPS_PROJECT)")
        if not self.tracker.access_token:
            errors.append("Missing personal access token (AZURE_DEVOPS_PAT)")
        if self.log_format not in ("text", "json"):
            errors.append(f"Unknown log format '{self.log_format}' (expected text or json)")

        return errors


class ConfigProviderPort(ABC):
    """
    Abstract interface for configuration providers.

    Configuration can come from various sources:
    - Environment variables
    - .env files
    - YAML/TOML config files
    - Command line arguments
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the provider name."""
        ...

    @abstractmethod
    def load(self) -> AppConfig:
        """
        Load configuration from source.

        Returns:
            Complete application configuration
        """
        ...

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a specific configuration value.

        Args:
            key: Configuration key (dot notation supported)
            default: Default value if not found
        """
        ...

    @abstractmethod
    def validate(self) -> list[str]:
        """
        Validate loaded configuration.

        Returns:
            List of validation errors
        """
        ...
