"""
Tracker API Client - Low-level HTTP client for the patch tracker REST API.

This handles the raw HTTP communication with the tracker server.
The TrackerAdapter uses this to implement the PatchTrackerPort.
"""

import logging
from typing import Any, Optional

import requests

from ...core.domain.patchset import decode_patch, encode_patch
from ...core.domain.value_objects import PatchStatus, TrackerAction
from ...core.exceptions import (
    AuthenticationError,
    FatalUsageError,
    NotFoundError,
    PermissionDeniedError,
    TransportError,
)


class TrackerApiClient:
    """
    Low-level patch tracker REST client.

    Handles authentication, request/response, and error handling. Every
    request is attempted exactly once; there is no retry and no timeout
    beyond the transport defaults.
    """

    def __init__(
        self,
        base_url: str,
        user: str,
        password: str,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the tracker client.

        Args:
            base_url: Tracker server URL (e.g., http://localhost:9292)
            user: Tracker username
            password: Tracker password
            session: Optional preconfigured requests session
        """
        self.base_url = base_url.rstrip("/")
        self.auth = (user, password)
        self.logger = logging.getLogger("TrackerApiClient")

        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    # -------------------------------------------------------------------------
    # Core Request Methods
    # -------------------------------------------------------------------------

    def url_for(self, endpoint: str) -> str:
        """Absolute URL for an endpoint; absolute URLs pass through."""
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def request(
        self,
        method: str,
        endpoint: str,
        authenticated: bool = True,
        **kwargs,
    ) -> requests.Response:
        """
        Make a request to the tracker API.

        Args:
            method: HTTP method (GET, POST)
            endpoint: API endpoint (e.g., 'set/42') or absolute URL
            authenticated: Send HTTP Basic credentials
            **kwargs: Additional arguments for requests

        Returns:
            The successful response

        Raises:
            TransportError: On connection problems or non-2xx responses
        """
        url = self.url_for(endpoint)
        if authenticated:
            kwargs["auth"] = self.auth

        self.logger.debug(f"{method} {url}")
        try:
            response = self._session.request(method, url, **kwargs)
        except requests.exceptions.ConnectionError as e:
            raise TransportError(f"Connection failed: {e}", cause=e)
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Request timed out: {e}", cause=e)
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request failed: {e}", cause=e)

        return self._handle_response(response, endpoint)

    def get(self, endpoint: str, **kwargs) -> requests.Response:
        """GET request."""
        return self.request("GET", endpoint, **kwargs)

    def post(self, endpoint: str, **kwargs) -> requests.Response:
        """POST request."""
        return self.request("POST", endpoint, **kwargs)

    # -------------------------------------------------------------------------
    # Response Handling
    # -------------------------------------------------------------------------

    def _handle_response(
        self,
        response: requests.Response,
        endpoint: str,
    ) -> requests.Response:
        """Raise the matching TransportError for failed responses."""
        if response.ok:
            return response

        status = response.status_code
        error_body = response.text[:500] if response.text else ""

        if status == 401:
            raise AuthenticationError(
                "Authentication failed. Check tracker user and password.",
                status_code=status,
                body=error_body,
            )

        if status == 403:
            raise PermissionDeniedError(
                f"Permission denied for {endpoint}",
                status_code=status,
                body=error_body,
            )

        if status == 404:
            raise NotFoundError(
                f"Not found: {endpoint}",
                status_code=status,
                body=error_body,
            )

        raise TransportError(
            f"API error {status}: {error_body}",
            status_code=status,
            body=error_body,
        )

    def _json(self, response: requests.Response) -> Any:
        """Decode a JSON body; an empty body decodes to None."""
        if not response.text:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON from {response.url}: {response.text[:200]}",
                status_code=response.status_code,
                body=response.text[:500],
                cause=e,
            )

    # -------------------------------------------------------------------------
    # Patch-set Resources
    # -------------------------------------------------------------------------

    def create_set(
        self,
        payload: list[dict[str, Any]],
        obsoletes: Optional[str] = None,
    ) -> dict[str, Any]:
        """POST /set with the encoded patch-set. Returns {id, revision}."""
        response = self.post(
            "set",
            json=payload,
            headers={"X-Obsoletes": str(obsoletes) if obsoletes else "no"},
        )
        return self._json(response) or {}

    def fetch_set(self, set_id: str) -> dict[str, Any]:
        """GET /set/{id}."""
        data = self._json(self.get(f"set/{set_id}"))
        if data is None:
            raise NotFoundError(f"Not found: set/{set_id}")
        return data

    def list_sets(
        self,
        filter_value: Optional[str] = None,
        filter_name: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """
        GET /set, unauthenticated.

        Raises:
            FatalUsageError: Non-status filter value without a filter name
        """
        params = self.build_list_filter(filter_value, filter_name)
        data = self._json(self.get("set", authenticated=False, params=params or None))
        return list(data or [])

    @staticmethod
    def build_list_filter(
        filter_value: Optional[str] = None,
        filter_name: Optional[str] = None,
    ) -> dict[str, str]:
        """Query parameters for the set listing."""
        if filter_value is None:
            return {}
        if filter_value in PatchStatus.filterable():
            return {"filter": "status", "filter_value": filter_value}
        if filter_name:
            return {"filter": filter_name, "filter_value": filter_value}
        raise FatalUsageError(
            "To use filters other than status, you must use -i FILTER_NAME parameter"
        )

    def mark_obsolete(self, set_id: str) -> None:
        """POST /patchset/{id}/obsolete."""
        self.post(
            f"patchset/{set_id}/obsolete",
            headers={"Content-Type": "application/json"},
        )

    def act_on_set(
        self, set_id: str, action: str, message: Optional[str] = None
    ) -> None:
        """POST /set/{id}/{action}."""
        self.post_action(self.url_for(f"set/{set_id}"), action, message)

    # -------------------------------------------------------------------------
    # Patch Resources
    # -------------------------------------------------------------------------

    def upload_patch_body(self, commit: str, body: str) -> None:
        """POST /patch/{commit}/body with the diff as multipart field `diff`."""
        self.post(
            f"patch/{commit}/body",
            files={"diff": (f"{commit}.patch", encode_patch(body), "text/plain")},
        )

    def download_patch_body(self, commit: str) -> str:
        """GET /patch/{commit}/download. Returns the diff, bytes preserved."""
        response = self.get(
            f"patch/{commit}/download",
            headers={"Accept": "text/plain", "Content-Type": "text/plain"},
        )
        return decode_patch(response.content)

    def fetch_patch_status(self, commit: str) -> dict[str, Any]:
        """
        GET /patch/{commit}.

        The server answers `null` for commits it does not know.
        """
        data = self._json(self.get(f"patch/{commit}"))
        if data is None:
            raise NotFoundError(f"Not found: patch/{commit}", status_code=200, body="null")
        return data

    def post_action(
        self, target_url: str, action: str, message: Optional[str] = None
    ) -> None:
        """POST {target_url}/{action} with {message}."""
        action = TrackerAction.from_string(action).value
        self.post(
            f"{target_url.rstrip('/')}/{action}",
            json={"message": message},
        )
