"""
Domain Entities - work items and work item states.

Values are built from live API responses and never persisted; a WorkItem
lives only as long as the caller keeps it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .enums import TaskType


CLOSED_STATE_NAMES = frozenset({"closed", "resolved"})


@dataclass(frozen=True)
class WorkItemState:
    """
    A state a work item can be in (e.g. "New", "Active", "Closed").

    The id and the display name are both the remote state name.
    """

    id: str
    name: str

    @classmethod
    def from_name(cls, name: str) -> WorkItemState:
        return cls(id=name, name=name)

    @property
    def is_closed(self) -> bool:
        """True for "closed" and "resolved" states, ignoring case."""
        return self.name.lower() in CLOSED_STATE_NAMES

    def __str__(self) -> str:
        return self.name


@dataclass(eq=False)
class WorkItem:
    """
    A work item fetched from Azure DevOps.

    ``issue_url`` and ``repository`` are filled in by the caller that fetched
    the item; everything else comes from the API response. ``revision`` is the
    remote revision stamp of the response that produced this value.
    """

    id: str
    summary: str
    description: str | None = None
    state: WorkItemState | None = None
    type: TaskType = TaskType.OTHER
    work_item_type: str = ""
    created: datetime | None = None
    updated: datetime | None = None
    revision: int = 0
    issue_url: str | None = None
    repository: Any | None = field(default=None, repr=False)

    def __setattr__(self, name: str, value: Any) -> None:
        # the remote identifier is fixed once assigned
        if name == "id" and "id" in self.__dict__:
            raise AttributeError("WorkItem.id cannot be reassigned")
        super().__setattr__(name, value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WorkItem):
            return NotImplemented
        return self.id == other.id and self.revision == other.revision

    def __hash__(self) -> int:
        return hash((self.id, self.revision))

    @property
    def is_closed(self) -> bool:
        return self.state.is_closed if self.state is not None else False

    @property
    def is_issue(self) -> bool:
        return self.issue_url is not None

    @property
    def presentable_name(self) -> str:
        """Name in the "<id>: <summary>" form that extract_id understands."""
        return f"{self.id}: {self.summary}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "summary": self.summary,
            "description": self.description,
            "state": self.state.name if self.state else None,
            "closed": self.is_closed,
            "type": self.type.value,
            "work_item_type": self.work_item_type,
            "created": self.created.isoformat() if self.created else None,
            "updated": self.updated.isoformat() if self.updated else None,
            "revision": self.revision,
            "issue_url": self.issue_url,
        }


@dataclass(frozen=True)
class ItemLink:
    """A reference to a work item, as returned by a WIQL query."""

    id: str
    url: str = ""
