# Repofleet Connector Base
# Shared HTTP plumbing for provider directory clients

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

import httpx

from repofleet.errors import FetchError

DEFAULT_TIMEOUT = 30.0
USER_AGENT = "repofleet"


class ConnectorType(str, Enum):
    """Hosting provider family."""

    GITHUB = "github"
    GITEA = "gitea"
    BITBUCKET = "bitbucket"


def detect_type(host: str) -> ConnectorType:
    """
    Detect the provider family from a host name.

    Args:
        host: Host part of a source, e.g. "github.com".

    Returns:
        ConnectorType, Gitea for anything self-hosted.
    """
    host = host.lower()
    if "github.com" in host:
        return ConnectorType.GITHUB
    if "bitbucket.org" in host:
        return ConnectorType.BITBUCKET
    return ConnectorType.GITEA


class Connector(ABC):
    """
    Lists the repositories of a user or organization on one provider.

    Holds nothing but an HTTP client; every call starts from scratch.
    """

    name: str = ""

    def __init__(
        self,
        host: str,
        token: str | None = None,
        *,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize connector.

        Args:
            host: Provider host name.
            token: API token; requests are anonymous when empty.
            client: Optional pre-built httpx client (used by tests).
            timeout: Request timeout in seconds.
        """
        self.host = host
        self.token = token or ""
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @property
    @abstractmethod
    def api_url(self) -> str:
        """Base URL of the provider's REST API."""

    @property
    @abstractmethod
    def token_url(self) -> str:
        """Where a user generates an API token."""

    @abstractmethod
    def list_repos(self, owner: str) -> list[str]:
        """Return every syncable "owner/repo" name for a user or organization."""

    @abstractmethod
    def test_connection(self) -> None:
        """Verify the token is accepted; raises FetchError otherwise."""

    def _auth_header(self) -> str:
        return f"Bearer {self.token}"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        if self.token:
            headers["Authorization"] = self._auth_header()
        return headers

    def _get(self, url: str, what: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """Perform an authenticated GET, mapping transport errors to FetchError."""
        try:
            return self._client.get(url, headers=self._headers(), params=params)
        except httpx.HTTPError as e:
            raise FetchError(f"failed to {what}: {e}") from e

    def _json(self, response: httpx.Response, what: str) -> Any:
        """Decode a successful response body, raising FetchError otherwise."""
        if not response.is_success:
            raise FetchError.http_error(what, response.status_code, response.text)
        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"failed to decode {what} response: {e}") from e

    def _check_auth(self, url: str) -> None:
        response = self._get(url, "connect")
        if response.status_code == 401:
            raise FetchError("authentication failed: invalid credentials", status_code=401)
        if response.status_code != 200:
            raise FetchError.http_error("connect", response.status_code, response.text)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
