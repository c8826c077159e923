"""
File Configuration Provider - Load settings from YAML or TOML files.

Supported files, searched in the working directory in this order:
- .adotasks.yaml / .adotasks.yml
- .adotasks.toml
- pyproject.toml ([tool.adotasks] section)

Example .adotasks.yaml:

    azure_devops:
      organization: my-org
      project: My Project
      pat: xxxxxxxx
      preferred_open_state: Active
      preferred_close_state: Closed

    logging:
      verbose: false
      format: json
      file: adotasks.log
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

import yaml

from adotasks.core.exceptions import ConfigFileError
from adotasks.core.ports.config_provider import AppConfig, AzureDevOpsConfig, ConfigProviderPort


CONFIG_FILE_NAMES = (".adotasks.yaml", ".adotasks.yml", ".adotasks.toml", "pyproject.toml")

# Accepted spellings in config files, mapped to flat setting names
TRACKER_KEYS = {
    "organization": "team_id",
    "org": "team_id",
    "team": "team_id",
    "team_id": "team_id",
    "project": "project_id",
    "project_id": "project_id",
    "pat": "access_token",
    "token": "access_token",
    "access_token": "access_token",
    "preferred_open_state": "preferred_open_state",
    "preferred_close_state": "preferred_close_state",
}

LOGGING_KEYS = {
    "verbose": "verbose",
    "format": "log_format",
    "log_format": "log_format",
    "file": "log_file",
    "log_file": "log_file",
}


def parse_bool(value: Any) -> bool:
    """Interpret config and environment booleans ("true", "1", "yes", ...)."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def flatten_settings(data: dict[str, Any]) -> dict[str, Any]:
    """Turn the nested file layout into flat setting names."""
    settings: dict[str, Any] = {}

    tracker = data.get("azure_devops") or data.get("azure-devops") or {}
    if isinstance(tracker, dict):
        for key, value in tracker.items():
            if key in TRACKER_KEYS and value is not None:
                settings[TRACKER_KEYS[key]] = str(value)

    log_section = data.get("logging") or {}
    if isinstance(log_section, dict):
        for key, value in log_section.items():
            if key in LOGGING_KEYS and value is not None:
                settings[LOGGING_KEYS[key]] = value

    return settings


def build_app_config(settings: dict[str, Any]) -> AppConfig:
    """Build an AppConfig from flat setting names."""
    tracker = AzureDevOpsConfig(
        team_id=settings.get("team_id", "") or "",
        project_id=settings.get("project_id", "") or "",
        access_token=settings.get("access_token", "") or "",
        preferred_open_state=settings.get("preferred_open_state") or None,
        preferred_close_state=settings.get("preferred_close_state") or None,
    )
    return AppConfig(
        tracker=tracker,
        verbose=parse_bool(settings.get("verbose", False)),
        log_format=str(settings.get("log_format") or "text"),
        log_file=settings.get("log_file") or None,
    )


class FileConfigProvider(ConfigProviderPort):
    """Loads configuration from a YAML or TOML file."""

    def __init__(self, config_path: Path | str | None = None, search_dir: Path | None = None):
        """
        Args:
            config_path: Explicit config file. When omitted the working
                directory (or ``search_dir``) is searched.
            search_dir: Directory to search instead of the working directory.
        """
        self._explicit_path = Path(config_path) if config_path else None
        self._search_dir = search_dir
        self._settings: dict[str, Any] | None = None
        self.logger = logging.getLogger("FileConfigProvider")

    @property
    def name(self) -> str:
        path = self.config_path
        return f"FileConfigProvider({path})" if path else "FileConfigProvider"

    @property
    def config_path(self) -> Path | None:
        """The file that is (or would be) loaded."""
        if self._explicit_path is not None:
            return self._explicit_path
        return self.find_config_file(self._search_dir or Path.cwd())

    @staticmethod
    def find_config_file(directory: Path) -> Path | None:
        """Find the first config file in ``directory``."""
        for file_name in CONFIG_FILE_NAMES:
            candidate = directory / file_name
            if not candidate.is_file():
                continue
            if file_name == "pyproject.toml" and not _has_tool_section(candidate):
                continue
            return candidate
        return None

    def settings(self) -> dict[str, Any]:
        """
        Flat settings read from the file (empty if there is no file).

        Raises:
            ConfigFileError: If an explicit file is missing or a file is malformed
        """
        if self._settings is None:
            self._settings = self._read()
        return self._settings

    def _read(self) -> dict[str, Any]:
        path = self.config_path
        if path is None:
            return {}
        if not path.is_file():
            raise ConfigFileError("Config file not found", path=str(path))

        self.logger.debug(f"Loading config from {path}")
        data = _parse_file(path)
        if path.name == "pyproject.toml":
            data = data.get("tool", {}).get("adotasks", {})
        return flatten_settings(data)

    def load(self) -> AppConfig:
        return build_app_config(self.settings())

    def get(self, key: str, default: Any = None) -> Any:
        value: Any = self.settings()
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    def validate(self) -> list[str]:
        try:
            config = self.load()
        except ConfigFileError as e:
            return [str(e)]
        return config.validate()


def _parse_file(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigFileError("Cannot read config file", path=str(path), cause=e) from e

    try:
        if path.suffix == ".toml":
            data = tomllib.loads(text)
        else:
            data = yaml.safe_load(text)
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise ConfigFileError("Invalid config file syntax", path=str(path), cause=e) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError("Config file must contain a mapping", path=str(path))
    return data


def _has_tool_section(path: Path) -> bool:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return "adotasks" in data.get("tool", {})
