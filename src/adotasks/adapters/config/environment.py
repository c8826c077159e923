"""
Environment Configuration Provider - Load settings from environment variables.

Settings are layered, later layers winning:
1. Config file (.adotasks.yaml, .adotasks.toml, pyproject.toml)
2. .env file
3. Process environment
4. Command line overrides
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from adotasks.core.exceptions import ConfigFileError
from adotasks.core.ports.config_provider import AppConfig, ConfigProviderPort

from .file_provider import FileConfigProvider, build_app_config


# Environment variable -> flat setting name
ENV_VARS = {
    "AZURE_DEVOPS_ORG": "team_id",
    "AZURE_DEVOPS_PROJECT": "project_id",
    "AZURE_DEVOPS_PAT": "access_token",
    "ADOTASKS_OPEN_STATE": "preferred_open_state",
    "ADOTASKS_CLOSE_STATE": "preferred_close_state",
    "ADOTASKS_VERBOSE": "verbose",
    "ADOTASKS_LOG_FORMAT": "log_format",
    "ADOTASKS_LOG_FILE": "log_file",
}

# Command line argument -> flat setting name
CLI_ARGS = {
    "team": "team_id",
    "project": "project_id",
    "verbose": "verbose",
    "log_format": "log_format",
    "log_file": "log_file",
}

# Where a missing setting can be provided, for error messages
SETTING_SOURCES = {
    "team_id": ("azure_devops.organization", "AZURE_DEVOPS_ORG", "--team"),
    "project_id": ("azure_devops.project", "AZURE_DEVOPS_PROJECT", "--project"),
    "access_token": ("azure_devops.pat", "AZURE_DEVOPS_PAT", None),
}


class EnvironmentConfigProvider(ConfigProviderPort):
    """
    Loads configuration from the environment, a .env file and a config file.
    """

    def __init__(
        self,
        config_file: Path | str | None = None,
        env_file: Path | str | None = None,
        cli_overrides: Mapping[str, Any] | None = None,
        environ: Mapping[str, str] | None = None,
        search_dir: Path | None = None,
    ):
        """
        Args:
            config_file: Explicit config file (auto-detected when omitted)
            env_file: .env file to read (defaults to .env in the working directory)
            cli_overrides: Parsed command line arguments, e.g. ``vars(args)``
            environ: Environment to read instead of ``os.environ``
            search_dir: Directory searched for the config and .env files
                instead of the working directory
        """
        self._file_provider = FileConfigProvider(config_file, search_dir=search_dir)
        self._env_file = Path(env_file) if env_file else (search_dir or Path.cwd()) / ".env"
        self._cli_overrides = dict(cli_overrides or {})
        self._environ = environ if environ is not None else os.environ
        self._settings: dict[str, Any] | None = None
        self.logger = logging.getLogger("EnvironmentConfigProvider")

    @property
    def name(self) -> str:
        path = self._file_provider.config_path
        return f"EnvironmentConfigProvider(file={path})" if path else "EnvironmentConfigProvider"

    def settings(self) -> dict[str, Any]:
        """
        Merged flat settings.

        Raises:
            ConfigFileError: If the config file is missing or malformed
        """
        if self._settings is None:
            settings = dict(self._file_provider.settings())
            settings.update(self._read_env_file())
            settings.update(_from_environment(self._environ))
            settings.update(self._read_cli_overrides())
            self._settings = settings
        return self._settings

    def _read_env_file(self) -> dict[str, Any]:
        if not self._env_file.is_file():
            return {}
        self.logger.debug(f"Loading environment from {self._env_file}")
        values = {key: value for key, value in dotenv_values(self._env_file).items() if value}
        return _from_environment(values)

    def _read_cli_overrides(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        for arg, setting in CLI_ARGS.items():
            value = self._cli_overrides.get(arg)
            # store_true flags are always present; only an explicit True overrides
            if value is None or value is False:
                continue
            settings[setting] = value
        return settings

    def load(self) -> AppConfig:
        return build_app_config(self.settings())

    def get(self, key: str, default: Any = None) -> Any:
        if key in ENV_VARS:
            key = ENV_VARS[key]
        return self.settings().get(key, default)

    def validate(self) -> list[str]:
        try:
            config = self.load()
        except ConfigFileError as e:
            return [str(e)]

        errors = []
        for setting in config.tracker.missing_fields():
            file_key, env_var, cli_flag = SETTING_SOURCES[setting]
            hint = f"set {env_var} or '{file_key}' in the config file"
            if cli_flag:
                hint += f", or pass {cli_flag}"
            errors.append(f"Missing {setting} ({hint})")

        # tracker errors are reported above with their hints
        errors.extend(error for error in config.validate() if not error.startswith("Missing"))
        return errors


def _from_environment(environ: Mapping[str, str | None]) -> dict[str, Any]:
    return {
        setting: environ[var]
        for var, setting in ENV_VARS.items()
        if environ.get(var)
    }
