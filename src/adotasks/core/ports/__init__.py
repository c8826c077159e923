"""
Ports - Abstract interfaces that adapters implement.
"""

from .config_provider import (
    DEFAULT_BASE_URL,
    AppConfig,
    AzureDevOpsConfig,
    ConfigProviderPort,
)


__all__ = [
    "DEFAULT_BASE_URL",
    "AppConfig",
    "AzureDevOpsConfig",
    "ConfigProviderPort",
]
