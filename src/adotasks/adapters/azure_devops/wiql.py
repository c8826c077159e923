"""
WIQL query construction.

Builds the textual query used to search the work items assigned to the
current user. Work Item Query Language reference:
https://learn.microsoft.com/azure/devops/boards/queries/wiql-syntax
"""

from __future__ import annotations

from dataclasses import dataclass


SELECT_CLAUSE = "SELECT [System.Id],[System.Title],[System.State] FROM WorkItems"
ASSIGNED_TO_ME = "[System.AssignedTo] = @Me"
EXCLUDED_STATES = ("Closed", "Removed")
ORDER_BY_CLAUSE = "ORDER BY [System.CreatedDate] desc"


@dataclass(frozen=True)
class WorkItemQuery:
    """
    A search for the current user's work items.

    Attributes:
        filter_text: Optional text that the title must contain. Blank text
            means no title constraint.
        include_closed: Include items in the Closed and Removed states.
    """

    filter_text: str | None = None
    include_closed: bool = False

    def to_wiql(self) -> str:
        """
        Render the query as WIQL.

        The filter text is inserted literally; a quote character in it
        produces an invalid query.
        """
        conditions = [ASSIGNED_TO_ME]

        if self.filter_text and self.filter_text.strip():
            conditions.append(f"[System.Title] CONTAINS '{self.filter_text}'")

        if not self.include_closed:
            conditions.extend(f"[State] <> '{state}'" for state in EXCLUDED_STATES)

        return f"{SELECT_CLAUSE} WHERE {' AND '.join(conditions)} {ORDER_BY_CLAUSE}"

    def to_body(self) -> dict[str, str]:
        """Request body for the WIQL endpoint."""
        return {"query": self.to_wiql()}


def build_work_item_query(filter_text: str | None = None, include_closed: bool = False) -> str:
    """Shortcut for ``WorkItemQuery(filter_text, include_closed).to_wiql()``."""
    return WorkItemQuery(filter_text=filter_text, include_closed=include_closed).to_wiql()
