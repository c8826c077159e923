"""
Domain enums - task categories derived from upstream work item types.
"""

from __future__ import annotations

from enum import Enum


class TaskType(Enum):
    """Category of a work item, as presented to callers."""

    BUG = "bug"
    FEATURE = "feature"
    OTHER = "other"

    @classmethod
    def from_work_item_type(cls, value: str | None) -> TaskType:
        """
        Map a raw Azure DevOps work item type onto a category.

        The lookup is total: unknown types fall back to OTHER.
        """
        return _WORK_ITEM_TYPES.get(value or "", cls.OTHER)

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.name.title()


_WORK_ITEM_TYPES: dict[str, TaskType] = {
    "Bug": TaskType.BUG,
    "Defect": TaskType.BUG,
    "Story": TaskType.OTHER,
    "Task": TaskType.OTHER,
    "Feature": TaskType.FEATURE,
    "Epic": TaskType.FEATURE,
}
