"""
Azure DevOps Adapter - Integration with Azure DevOps Work Items.

This module provides the low-level API client, the JSON mapping, WIQL and
JSON Patch builders, the per-type state cache and the repository adapter that
host applications call.
"""

from .client import AzureDevOpsApiClient, basic_auth_header, url_encode
from .mapper import parse_instant, work_item_from_json, work_item_state_from_json
from .patch import PatchOperation, build_state_patch
from .repository import AzureDevOpsRepository, CancellableConnection
from .state_cache import WorkItemStateCache
from .wiql import WorkItemQuery, build_work_item_query


__all__ = [
    "AzureDevOpsApiClient",
    "AzureDevOpsRepository",
    "CancellableConnection",
    "PatchOperation",
    "WorkItemQuery",
    "WorkItemStateCache",
    "basic_auth_header",
    "build_state_patch",
    "build_work_item_query",
    "parse_instant",
    "url_encode",
    "work_item_from_json",
    "work_item_state_from_json",
]
