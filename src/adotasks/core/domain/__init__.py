"""
Domain layer - entities and enums shared by the client and its callers.
"""

from .entities import CLOSED_STATE_NAMES, ItemLink, WorkItem, WorkItemState
from .enums import TaskType


__all__ = [
    "CLOSED_STATE_NAMES",
    "ItemLink",
    "TaskType",
    "WorkItem",
    "WorkItemState",
]
