"""JSON-over-HTTP client for the agency REST API."""

import threading
from pathlib import Path
from typing import Any

import requests
import structlog

from agency_manager.errors import RemoteOperationError

logger = structlog.get_logger()


class ApiClient:
    """Thin wrapper around requests sessions bound to the API base URL.

    Without an injected session each thread gets its own ``requests.Session``,
    since sessions are not safe to share across threads.
    """

    def __init__(self, base_url: str, timeout: float = 10.0, session: requests.Session | None = None) -> None:
        """Initialize the API client.

        Args:
            base_url: API root, e.g. http://localhost:3001/api
            timeout: Per-request timeout in seconds
            session: Optional preconfigured session, shared by every caller
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._shared_session = session
        self._local = threading.local()
        if session is not None:
            session.headers.update({"Accept": "application/json"})
        logger.debug("API client initialized", base_url=self.base_url, timeout=timeout)

    @property
    def session(self) -> requests.Session:
        """Session for the calling thread."""
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update({"Accept": "application/json"})
            self._local.session = session
            logger.debug("Opened API session", thread=threading.current_thread().name)
        return session

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        """Extract the server's error message from a failed response."""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return f"HTTP {response.status_code}"

    def _send(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """Send a request and return the successful response undecoded."""
        url = self.url(path)
        logger.debug("Sending API request", method=method, url=url, params=kwargs.get("params"))

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("API request failed", method=method, url=url, error=str(e))
            raise RemoteOperationError(f"Network error: {e}") from e

        if not response.ok:
            message = self._error_message(response)
            logger.error("API request rejected", method=method, url=url, status=response.status_code, error=message)
            raise RemoteOperationError(message, status_code=response.status_code)
        return response

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
        files: dict[str, Any] | None = None,
        data: dict[str, str] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            RemoteOperationError: On network failure, non-success status or undecodable body
        """
        response = self._send(method, path, json=json, params=params, files=files, data=data)
        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            url = self.url(path)
            logger.error("Failed to parse API response", method=method, url=url, error=str(e))
            raise RemoteOperationError(f"Invalid JSON response from {url}", status_code=response.status_code) from e

    def check(self, path: str) -> int:
        """GET a path and return its status code, ignoring the body.

        Raises:
            RemoteOperationError: On network failure or non-success status
        """
        return self._send("GET", path).status_code

    def get(self, path: str, params: dict[str, str] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None, params: dict[str, str] | None = None) -> Any:
        return self.request("PUT", path, json=json, params=params)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def upload(self, path: str, file_path: str | Path, fields: dict[str, str] | None = None) -> Any:
        """POST a file as multipart form data under the ``file`` field."""
        file_path = Path(file_path)
        logger.info("Uploading file", path=path, file=file_path.name)
        with open(file_path, "rb") as fh:
            return self.request("POST", path, files={"file": (file_path.name, fh)}, data=fields)
