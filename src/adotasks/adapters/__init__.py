"""
Adapters - Implementations of the core ports.
"""

from .azure_devops import AzureDevOpsApiClient, AzureDevOpsRepository, CancellableConnection
from .config import EnvironmentConfigProvider, FileConfigProvider


__all__ = [
    "AzureDevOpsApiClient",
    "AzureDevOpsRepository",
    "CancellableConnection",
    "EnvironmentConfigProvider",
    "FileConfigProvider",
]
