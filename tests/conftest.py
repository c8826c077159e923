"""
Shared pytest fixtures for the adotasks test suite.

Fixture Categories:
- HTTP: fake responses and sessions for the API client
- Data: work item and state documents as the API returns them
- Configuration: AzureDevOpsConfig instances
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from adotasks.adapters.azure_devops import AzureDevOpsApiClient
from adotasks.core.ports import AzureDevOpsConfig


TEAM = "my team"
PROJECT = "My Project"
TOKEN = "secret-pat-123"


# =============================================================================
# HTTP Fixtures
# =============================================================================


def build_response(status_code: int = 200, json_data: Any = None, text: str | None = None) -> MagicMock:
    """Create a fake requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.headers = {}
    if text is None:
        text = json.dumps(json_data) if json_data is not None else ""
    response.text = text
    response.json.return_value = json_data
    return response


@pytest.fixture
def make_response() -> Callable[..., MagicMock]:
    """Factory for fake responses."""
    return build_response


@pytest.fixture
def mock_session() -> MagicMock:
    """A requests.Session stand-in that answers 200 with an empty object."""
    session = MagicMock()
    session.request.return_value = build_response(200, {})
    return session


@pytest.fixture
def client(mock_session: MagicMock) -> AzureDevOpsApiClient:
    """API client wired to the fake session."""
    return AzureDevOpsApiClient(
        team_id=TEAM,
        project_id=PROJECT,
        access_token=TOKEN,
        session=mock_session,
    )


# =============================================================================
# Data Fixtures
# =============================================================================


def build_work_item_json(
    work_id: int = 1,
    rev: int = 3,
    title: str = "Fix login",
    state: str | None = "Active",
    work_item_type: str = "Bug",
    description: str | None = "Steps to reproduce",
    created: str = "2024-01-15T10:30:00.47Z",
    changed: str = "2024-01-16T08:00:00Z",
) -> dict[str, Any]:
    """A work item document as returned by the work items endpoint."""
    fields: dict[str, Any] = {
        "System.Title": title,
        "System.WorkItemType": work_item_type,
        "System.CreatedDate": created,
        "System.ChangedDate": changed,
    }
    if state is not None:
        fields["System.State"] = state
    if description is not None:
        fields["System.Description"] = description
    return {
        "id": work_id,
        "rev": rev,
        "fields": fields,
        "url": f"https://dev.azure.com/org/_apis/wit/workItems/{work_id}",
    }


@pytest.fixture
def make_work_item_json() -> Callable[..., dict[str, Any]]:
    """Factory for work item documents."""
    return build_work_item_json


@pytest.fixture
def bug_states_json() -> dict[str, Any]:
    """State definitions of the Bug type."""
    return {
        "count": 4,
        "value": [
            {"name": "New", "color": "b2b2b2", "category": "Proposed"},
            {"name": "Active", "color": "007acc", "category": "InProgress"},
            {"name": "Resolved", "color": "ff9d00", "category": "Resolved"},
            {"name": "Closed", "color": "339933", "category": "Completed"},
        ],
    }


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def tracker_config() -> AzureDevOpsConfig:
    """A complete Azure DevOps configuration."""
    return AzureDevOpsConfig(team_id=TEAM, project_id=PROJECT, access_token=TOKEN)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove adotasks variables from the environment."""
    for var in (
        "AZURE_DEVOPS_ORG",
        "AZURE_DEVOPS_PROJECT",
        "AZURE_DEVOPS_PAT",
        "ADOTASKS_OPEN_STATE",
        "ADOTASKS_CLOSE_STATE",
        "ADOTASKS_VERBOSE",
        "ADOTASKS_LOG_FORMAT",
        "ADOTASKS_LOG_FILE",
    ):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
