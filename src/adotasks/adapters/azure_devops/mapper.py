"""
Mapping of Azure DevOps JSON documents onto domain values.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from adotasks.core.domain import ItemLink, TaskType, WorkItem, WorkItemState


# Work item field reference names
FIELD_TITLE = "System.Title"
FIELD_DESCRIPTION = "System.Description"
FIELD_STATE = "System.State"
FIELD_TYPE = "System.WorkItemType"
FIELD_CREATED = "System.CreatedDate"
FIELD_CHANGED = "System.ChangedDate"


def parse_instant(value: Any) -> datetime | None:
    """
    Parse an ISO-8601 instant such as ``2024-01-15T10:30:00.47Z``.

    Missing or empty values yield None.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return datetime.fromisoformat(text)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def work_item_from_json(data: dict[str, Any]) -> WorkItem:
    """
    Build a WorkItem from a work item document.

    Raises:
        ValueError: If the document has no id or no revision.
    """
    if data.get("id") is None:
        raise ValueError("Work item document has no 'id'")
    if data.get("rev") is None:
        raise ValueError(f"Work item {data['id']} has no 'rev'")

    fields = data.get("fields") or {}

    state_name = fields.get(FIELD_STATE)
    work_item_type = _text(fields.get(FIELD_TYPE))
    description = fields.get(FIELD_DESCRIPTION)

    return WorkItem(
        id=_text(data["id"]),
        summary=_text(fields.get(FIELD_TITLE)),
        description=None if description is None else _text(description),
        state=WorkItemState.from_name(_text(state_name)) if state_name is not None else None,
        type=TaskType.from_work_item_type(work_item_type),
        work_item_type=work_item_type,
        created=parse_instant(fields.get(FIELD_CREATED)),
        updated=parse_instant(fields.get(FIELD_CHANGED)),
        revision=int(data["rev"]),
    )


def work_item_state_from_json(data: dict[str, Any]) -> WorkItemState:
    """Build a WorkItemState from a state definition (``{"name": ...}``)."""
    return WorkItemState.from_name(_text(data["name"]))


def item_link_from_json(data: dict[str, Any]) -> ItemLink:
    """Build an ItemLink from a WIQL result entry."""
    return ItemLink(id=_text(data["id"]), url=_text(data.get("url")))
