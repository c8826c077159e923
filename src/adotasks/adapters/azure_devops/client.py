"""
Azure DevOps API Client - Low-level HTTP client for the Work Item Tracking API.

This handles authentication, the raw HTTP exchange and the classification of
responses. The AzureDevOpsRepository uses it for every remote operation.

REST API documentation:
https://learn.microsoft.com/rest/api/azure/devops/wit
"""

from __future__ import annotations

import base64
import logging
import threading
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote, urljoin

import requests
from requests.adapters import HTTPAdapter

from adotasks.core.domain import ItemLink, WorkItem, WorkItemState
from adotasks.core.exceptions import AzureDevOpsError, ClientClosedError
from adotasks.core.ports.config_provider import DEFAULT_BASE_URL
from adotasks.core.security import register_secret

from .mapper import item_link_from_json, work_item_from_json, work_item_state_from_json
from .patch import JSON_PATCH_CONTENT_TYPE, build_state_patch, to_document
from .wiql import WorkItemQuery


SUCCESS_STATUS_CODES = frozenset({200, 201})
NOT_FOUND_STATUS_CODE = 404


def url_encode(value: str) -> str:
    """Percent-encode a single URL path segment (spaces become %20)."""
    return quote(value, safe="")


def basic_auth_header(access_token: str) -> str:
    """Authorization header value for a personal access token (empty user name)."""
    encoded = base64.b64encode(f":{access_token}".encode()).decode().strip()
    return f"Basic {encoded}"


class AzureDevOpsApiClient:
    """
    Low-level Azure DevOps Work Item Tracking client.

    Owns one pooled ``requests.Session`` for its whole lifetime: the pool is
    created (or injected) at construction and released exactly once by
    ``close()``. The session is safe to share between threads, so concurrent
    calls through one client are allowed; ``close()`` must come after every
    call whose result the caller needs.

    Every call is a single attempt. Status 200/201 is success, 404 is treated
    as "no such record" (None, empty list or False depending on the operation)
    and any other status raises AzureDevOpsError with the raw response body.
    """

    PROJECTS_API_VERSION = "2.0"
    WIQL_API_VERSION = "7.2-preview.2"
    WORK_ITEMS_API_VERSION = "7.2-preview.3"
    STATES_API_VERSION = "7.2-preview.1"

    CONNECT_TIMEOUT = 10.0

    # Connection pool settings
    DEFAULT_POOL_CONNECTIONS = 10
    DEFAULT_POOL_MAXSIZE = 10

    def __init__(
        self,
        team_id: str,
        project_id: str,
        access_token: str,
        session: requests.Session | None = None,
        base_url: str = DEFAULT_BASE_URL,
        read_timeout: float | None = None,
    ):
        """
        Initialize the client.

        Args:
            team_id: Azure DevOps organization (team) name
            project_id: Project name or id
            access_token: Personal Access Token
            session: Transport to use instead of a new pooled session
            base_url: Service root, without the team segment
            read_timeout: Optional read timeout in seconds (connect timeout is fixed)
        """
        self.team_id = team_id
        self.project_id = project_id
        self.read_timeout = read_timeout
        self.logger = logging.getLogger("AzureDevOpsApiClient")

        self._encoded_team = url_encode(team_id)
        self._encoded_project = url_encode(project_id)
        self.base_url = f"{base_url.rstrip('/')}/{self._encoded_team}/"

        register_secret(access_token)
        self.headers = {
            "Accept": "application/json",
            "Authorization": basic_auth_header(access_token),
        }

        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=self.DEFAULT_POOL_CONNECTIONS,
                pool_maxsize=self.DEFAULT_POOL_MAXSIZE,
            )
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self._session = session

        self._closed = False
        self._close_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def execute(
        self,
        relative_path: str,
        method: str = "GET",
        body: Any | None = None,
        content_type: str | None = None,
    ) -> requests.Response:
        """
        Send one request to the API and return the raw response.

        Args:
            relative_path: Path (with query string) relative to the team URL
            method: HTTP method
            body: JSON-serializable request body
            content_type: Content type of the body (defaults to application/json)

        Raises:
            ClientClosedError: If the client has been closed
            requests.exceptions.RequestException: On connection or timeout errors
        """
        if self._closed:
            raise ClientClosedError("The Azure DevOps client has been closed")

        url = urljoin(self.base_url, relative_path)
        headers = dict(self.headers)
        kwargs: dict[str, Any] = {}
        if body is not None:
            headers["Content-Type"] = content_type or "application/json"
            kwargs["json"] = body

        self.logger.debug(f"{method} {relative_path}")

        return self._session.request(
            method,
            url,
            headers=headers,
            timeout=(self.CONNECT_TIMEOUT, self.read_timeout),
            allow_redirects=True,
            **kwargs,
        )

    def request(
        self,
        method: str,
        relative_path: str,
        body: Any | None = None,
        content_type: str | None = None,
    ) -> Any | None:
        """
        Execute a request and classify its response.

        Returns:
            Parsed JSON body, or None when the API answered 404

        Raises:
            AzureDevOpsError: On any status other than 200, 201 and 404
        """
        response = self.execute(relative_path, method=method, body=body, content_type=content_type)
        return self._handle_response(response, relative_path)

    def get(self, relative_path: str) -> Any | None:
        """Perform a GET request."""
        return self.request("GET", relative_path)

    def post(self, relative_path: str, body: Any) -> Any | None:
        """Perform a POST request with a JSON body."""
        return self.request("POST", relative_path, body=body)

    def patch(self, relative_path: str, body: Any, content_type: str | None = None) -> Any | None:
        """Perform a PATCH request."""
        return self.request("PATCH", relative_path, body=body, content_type=content_type)

    # -------------------------------------------------------------------------
    # Response Handling
    # -------------------------------------------------------------------------

    def _handle_response(self, response: requests.Response, endpoint: str) -> Any | None:
        """Interpret the status code of a response."""
        status = response.status_code

        if status in SUCCESS_STATUS_CODES:
            if not response.text:
                return {}
            return response.json()

        if status == NOT_FOUND_STATUS_CODE:
            self.logger.debug(f"Not found: {endpoint}")
            return None

        self.logger.warning(f"Unexpected status {status} from {endpoint}")
        raise AzureDevOpsError(
            f"An unexpected status code was returned: {status}",
            reason=response.text,
            status_code=status,
            issue_key=endpoint,
        )

    # -------------------------------------------------------------------------
    # Work Item API
    # -------------------------------------------------------------------------

    def ping(self) -> None:
        """Check that the API is reachable and accepts the credentials."""
        # projects are the lightest resource every user can read
        self.get(f"_apis/projects?api-version={self.PROJECTS_API_VERSION}")

    def query_work_item_links(self, query: WorkItemQuery) -> list[ItemLink]:
        """Run a WIQL query and return the link stubs it selects."""
        data = self.post(f"_apis/wit/wiql/?api-version={self.WIQL_API_VERSION}", query.to_body())
        if data is None:
            return []
        return [item_link_from_json(link) for link in data.get("workItems") or []]

    def query_work_items(
        self,
        filter_text: str | None = None,
        include_closed: bool = False,
    ) -> list[WorkItem]:
        """
        Query the work items assigned to the current user.

        The query returns id stubs only; they are resolved with a single batch
        request, so a search costs two round trips whatever its result size.

        Args:
            filter_text: Text the title must contain (blank for no filter)
            include_closed: Include items that were closed or removed
        """
        query = WorkItemQuery(filter_text=filter_text, include_closed=include_closed)
        links = self.query_work_item_links(query)
        self.logger.debug(f"Query matched {len(links)} work item(s)")
        return self.get_work_items([link.id for link in links])

    def get_work_item(self, work_id: str) -> WorkItem | None:
        """Get a work item by its id, or None if it doesn't exist."""
        data = self.get(
            f"{self._encoded_project}/_apis/wit/workitems/{url_encode(str(work_id))}/"
            f"?api-version={self.WORK_ITEMS_API_VERSION}"
        )
        if data is None:
            return None
        return work_item_from_json(data)

    def get_work_items(self, work_ids: Sequence[str]) -> list[WorkItem]:
        """
        Get several work items with one request.

        Items are returned in the order the API lists them. An empty id list
        returns an empty list without contacting the API.
        """
        if not work_ids:
            return []

        ids = ",".join(url_encode(str(work_id)) for work_id in work_ids)
        data = self.get(
            f"{self._encoded_project}/_apis/wit/workitems/?ids={ids}"
            f"&api-version={self.WORK_ITEMS_API_VERSION}"
        )
        if data is None:
            return []
        return [work_item_from_json(item) for item in data.get("value") or []]

    def get_work_item_states(self, work_item_type: str) -> set[WorkItemState]:
        """
        List the valid states of a work item type (e.g. "Bug", "User Story").

        A blank type has no states; it is answered without contacting the API.
        """
        if not work_item_type or not work_item_type.strip():
            return set()
        data = self.get(
            f"{self._encoded_project}/_apis/wit/workitemtypes/{url_encode(work_item_type)}/states"
            f"?api-version={self.STATES_API_VERSION}"
        )
        if data is None:
            return set()
        return {work_item_state_from_json(state) for state in data.get("value") or []}

    def set_work_item_state(
        self,
        work_id: str,
        state: str,
        revision: int | None = None,
    ) -> bool:
        """
        Move a work item to another state.

        With ``revision`` the update only applies if the item is still at that
        revision; without it the state is overwritten unconditionally.

        Returns:
            True if the update was applied, False if the API answered 404
            (the item does not exist, or the revision test failed)
        """
        operations = build_state_patch(state, revision)
        data = self.patch(
            f"{self._encoded_project}/_apis/wit/workitems/{url_encode(str(work_id))}"
            f"?api-version={self.WORK_ITEMS_API_VERSION}",
            to_document(operations),
            content_type=JSON_PATCH_CONTENT_TYPE,
        )

        applied = data is not None
        if applied:
            self.logger.info(f"Set state of work item {work_id} to '{state}'")
        else:
            self.logger.info(f"State of work item {work_id} not changed (not found or stale revision)")
        return applied

    # -------------------------------------------------------------------------
    # Resource Cleanup
    # -------------------------------------------------------------------------

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the connection pool. Safe to call more than once."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self._session.close()
        self.logger.debug("Closed HTTP session")

    def __enter__(self) -> AzureDevOpsApiClient:
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Context manager exit."""
        self.close()
