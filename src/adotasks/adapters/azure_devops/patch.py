"""
JSON Patch documents for work item updates.

Azure DevOps applies all operations of a patch atomically: if a ``test``
operation fails, nothing else in the document is applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


JSON_PATCH_CONTENT_TYPE = "application/json-patch+json"

REVISION_PATH = "/rev"
STATE_FIELD_PATH = "/fields/System.State"


@dataclass(frozen=True)
class PatchOperation:
    """One operation of a JSON Patch document."""

    op: str
    path: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"op": self.op, "path": self.path, "value": self.value}


def build_state_patch(state: str, revision: int | None = None) -> list[PatchOperation]:
    """
    Build the operations that move a work item to ``state``.

    With a ``revision`` the state change is guarded by a test on the revision
    field, so the whole patch is rejected if the item has changed since. Without
    it the state is overwritten unconditionally.
    """
    operations = []
    if revision is not None:
        operations.append(PatchOperation("test", REVISION_PATH, revision))
    operations.append(PatchOperation("replace", STATE_FIELD_PATH, state))
    return operations


def to_document(operations: list[PatchOperation]) -> list[dict[str, Any]]:
    """Convert operations to the JSON-serializable patch document."""
    return [operation.to_dict() for operation in operations]
