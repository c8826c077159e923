"""
Per-type cache of valid work item states.

This is a performance cache, not authoritative data: once a type has been
loaded it is served from memory for the lifetime of the cache, with no expiry
and no invalidation. The number of distinct work item types in a project is
small, so the cache is unbounded.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable

from adotasks.core.domain import WorkItemState


StateLoader = Callable[[str], Iterable[WorkItemState]]


class WorkItemStateCache:
    """
    Mapping from work item type to its valid states, filled on first use.

    Thread-safe. Loaders run outside the lock, so two threads asking for the
    same unknown type at once may both load it; the last result wins and the
    mapping is never left half-written.
    """

    def __init__(self) -> None:
        self._states: dict[str, frozenset[WorkItemState]] = {}
        self._lock = threading.Lock()
        self.logger = logging.getLogger("WorkItemStateCache")

    def get(self, work_item_type: str) -> frozenset[WorkItemState] | None:
        with self._lock:
            return self._states.get(work_item_type)

    def get_or_load(self, work_item_type: str, loader: StateLoader) -> frozenset[WorkItemState]:
        """
        Return the states of ``work_item_type``, calling ``loader`` on a miss.
        """
        cached = self.get(work_item_type)
        if cached is not None:
            return cached

        self.logger.debug(f"Loading states for work item type '{work_item_type}'")
        states = frozenset(loader(work_item_type))

        with self._lock:
            self._states[work_item_type] = states
        return states

    def __contains__(self, work_item_type: object) -> bool:
        with self._lock:
            return work_item_type in self._states

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)
