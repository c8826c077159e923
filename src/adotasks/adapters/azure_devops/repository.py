"""
Azure DevOps Repository - the host-facing adapter around the API client.

A repository holds the settings of one Azure DevOps team project and brokers
every call to the API: it checks the configuration, opens a client for the
duration of one operation, translates interrupts into cancellations and
stamps fetched work items with their repository and browser URL. It also owns
the per-type state cache, so states are loaded at most once per repository.
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Callable
from typing import TypeVar

from adotasks.core.domain import WorkItem, WorkItemState
from adotasks.core.exceptions import MissingConfigError, OperationCancelledError
from adotasks.core.ports.config_provider import DEFAULT_BASE_URL, AzureDevOpsConfig

from .client import AzureDevOpsApiClient, url_encode
from .state_cache import WorkItemStateCache


T = TypeVar("T")

ClientFactory = Callable[[AzureDevOpsConfig], AzureDevOpsApiClient]


def default_client_factory(config: AzureDevOpsConfig) -> AzureDevOpsApiClient:
    """Build a client with its own connection pool."""
    return AzureDevOpsApiClient(
        team_id=config.team_id,
        project_id=config.project_id,
        access_token=config.access_token,
    )


class CancellableConnection:
    """
    A connection test that another thread can abort.

    ``test()`` pings the API and releases the client; ``cancel()`` releases the
    client immediately, which makes a pending ``test()`` fail with
    OperationCancelledError rather than a transport error.
    """

    def __init__(self, client: AzureDevOpsApiClient):
        self._client = client
        self._cancelled = threading.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def test(self) -> None:
        """
        Ping the API.

        Raises:
            OperationCancelledError: If ``cancel()`` was called
            AzureDevOpsError: If the API rejected the request
        """
        try:
            if self._cancelled.is_set():
                raise OperationCancelledError("Connection test cancelled")
            self._client.ping()
        except OperationCancelledError:
            raise
        except Exception as e:
            if self._cancelled.is_set():
                raise OperationCancelledError("Connection test cancelled", cause=e) from e
            raise
        finally:
            self._client.close()

    def cancel(self) -> None:
        self._cancelled.set()
        self._client.close()


class AzureDevOpsRepository:
    """
    Settings and operations for one Azure DevOps team project.

    Every operation opens a fresh client and closes it when done, so a
    repository can be shared between threads. Only the state cache is kept
    between operations.
    """

    def __init__(
        self,
        config: AzureDevOpsConfig | None = None,
        client_factory: ClientFactory | None = None,
    ):
        self.config = config or AzureDevOpsConfig()
        self._client_factory = client_factory or default_client_factory
        self._state_cache = WorkItemStateCache()
        self.logger = logging.getLogger("AzureDevOpsRepository")

        self.preferred_open_task_state: WorkItemState | None = None
        self.preferred_close_task_state: WorkItemState | None = None
        if self.config.preferred_open_state:
            self.preferred_open_task_state = WorkItemState.from_name(self.config.preferred_open_state)
        if self.config.preferred_close_state:
            self.preferred_close_task_state = WorkItemState.from_name(
                self.config.preferred_close_state
            )

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    @property
    def is_configured(self) -> bool:
        """True when team, project and access token are all set."""
        return self.config.is_valid()

    @property
    def url(self) -> str:
        """Browser URL of the project."""
        team = url_encode(self.config.team_id) if self.config.team_id else "<team-id>"
        project = url_encode(self.config.project_id) if self.config.project_id else "<project-id>"
        return f"{DEFAULT_BASE_URL}/{team}/{project}/"

    @property
    def state_cache(self) -> WorkItemStateCache:
        return self._state_cache

    @property
    def log_context(self) -> dict[str, str]:
        """Fields attached to every log record of this repository."""
        return {"team": self.config.team_id, "project": self.config.project_id}

    def issue_url_for(self, work_id: str) -> str:
        """Browser URL of a work item."""
        return f"{self.url}_workitems/edit/{work_id}"

    @staticmethod
    def extract_id(task_name: str) -> str:
        """Extract the work item id from a "<id>: <summary>" task name."""
        return task_name.split(":", 1)[0]

    def clone(self) -> AzureDevOpsRepository:
        """Copy the settings into a new repository (the state cache is not shared)."""
        other = AzureDevOpsRepository(copy.copy(self.config), self._client_factory)
        other.preferred_open_task_state = self.preferred_open_task_state
        other.preferred_close_task_state = self.preferred_close_task_state
        return other

    # -------------------------------------------------------------------------
    # Client Lifecycle
    # -------------------------------------------------------------------------

    def _require_configured(self) -> None:
        if not self.is_configured:
            missing = self.config.missing_fields()
            raise MissingConfigError(
                f"The repository is not fully configured (missing: {', '.join(missing)})",
                missing=missing,
            )

    def _with_client(self, body: Callable[[AzureDevOpsApiClient], T]) -> T:
        """
        Run ``body`` with a new client and close the client afterwards.

        An interrupt while the operation blocks is reported as
        OperationCancelledError.
        """
        self._require_configured()
        self.logger.debug("Opening Azure DevOps client", extra=self.log_context)

        with self._client_factory(self.config) as client:
            try:
                return body(client)
            except KeyboardInterrupt as e:
                self.logger.info("Operation cancelled", extra=self.log_context)
                raise OperationCancelledError("Operation cancelled", cause=e) from e

    def _attach(self, work_item: WorkItem) -> WorkItem:
        # remember where the item came from and where the user can open it
        work_item.repository = self
        work_item.issue_url = self.issue_url_for(work_item.id)
        return work_item

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def get_issues(self, query: str | None = None, with_closed: bool = False) -> list[WorkItem]:
        """Search the work items assigned to the current user."""
        work_items = self._with_client(lambda client: client.query_work_items(query, with_closed))
        return [self._attach(work_item) for work_item in work_items]

    def find_task(self, task_id: str) -> WorkItem | None:
        """Fetch one work item, or None if it doesn't exist."""
        work_item = self._with_client(lambda client: client.get_work_item(task_id))
        if work_item is None:
            return None
        return self._attach(work_item)

    def get_states_for_type(self, work_item_type: str) -> frozenset[WorkItemState]:
        """Valid states of a work item type, loaded once per repository."""
        cached = self._state_cache.get(work_item_type)
        if cached is not None:
            return cached
        return self._with_client(
            lambda client: self._state_cache.get_or_load(work_item_type, client.get_work_item_states)
        )

    def get_available_task_states(self, task: WorkItem | str) -> set[WorkItemState]:
        """
        States the given task can be moved to.

        The item is fetched again to learn its type; an item that no longer
        exists has no available states.
        """
        task_id = task.id if isinstance(task, WorkItem) else task

        def load(client: AzureDevOpsApiClient) -> set[WorkItemState]:
            work_item = client.get_work_item(task_id)
            if work_item is None:
                return set()
            states = self._state_cache.get_or_load(
                work_item.work_item_type, client.get_work_item_states
            )
            return set(states)

        return self._with_client(load)

    def set_task_state(
        self,
        task: WorkItem | str,
        state: WorkItemState | str,
        expected_revision: int | None = None,
    ) -> bool:
        """
        Move a task to another state.

        Returns:
            True if applied, False if the item is missing or the revision moved
        """
        task_id = task.id if isinstance(task, WorkItem) else task
        state_id = state.id if isinstance(state, WorkItemState) else state
        return self._with_client(
            lambda client: client.set_work_item_state(task_id, state_id, expected_revision)
        )

    def create_cancellable_connection(self) -> CancellableConnection:
        """Create a connection test bound to a new client."""
        self._require_configured()
        return CancellableConnection(self._client_factory(self.config))
