"""
Configuration Adapters - Load settings from files and the environment.
"""

from .environment import ENV_VARS, EnvironmentConfigProvider
from .file_provider import CONFIG_FILE_NAMES, FileConfigProvider, build_app_config, parse_bool


__all__ = [
    "CONFIG_FILE_NAMES",
    "ENV_VARS",
    "EnvironmentConfigProvider",
    "FileConfigProvider",
    "build_app_config",
    "parse_bool",
]
