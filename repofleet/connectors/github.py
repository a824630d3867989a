# Repofleet GitHub Connector
# Repository listing via the GitHub REST API

from __future__ import annotations

import httpx

from repofleet.connectors.base import Connector
from repofleet.errors import FetchError, NotFoundError

PER_PAGE = 100


class GitHubConnector(Connector):
    """GitHub and GitHub Enterprise."""

    name = "github"

    def __init__(self, host: str = "github.com", token: str | None = None, **kwargs):
        super().__init__(host or "github.com", token, **kwargs)

    @property
    def api_url(self) -> str:
        if self.host == "github.com":
            return "https://api.github.com"
        # GitHub Enterprise
        return f"https://{self.host}/api/v3"

    @property
    def token_url(self) -> str:
        return f"https://{self.host}/settings/tokens"

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        headers["Accept"] = "application/vnd.github+json"
        headers["X-GitHub-Api-Version"] = "2022-11-28"
        return headers

    def test_connection(self) -> None:
        self._check_auth(f"{self.api_url}/user")

    def list_repos(self, owner: str) -> list[str]:
        segment = "orgs" if self._get_user_type(owner) == "Organization" else "users"
        url = f"{self.api_url}/{segment}/{owner}/repos"

        repos: list[str] = []
        page = 1
        while True:
            response = self._get(url, "fetch repos", params={"per_page": PER_PAGE, "page": page})
            repos.extend(self._syncable_names(self._json(response, "fetch repos")))
            if not self._has_next_page(response):
                break
            page += 1
        return repos

    def _get_user_type(self, owner: str) -> str:
        """Return "User" or "Organization" for an account name."""
        response = self._get(f"{self.api_url}/users/{owner}", "get user info")
        if response.status_code == 404:
            raise NotFoundError.owner(owner)
        data = self._json(response, "get user info")
        if not isinstance(data, dict):
            raise FetchError("failed to get user info: unexpected response shape")
        return str(data.get("type", "User"))

    @staticmethod
    def _syncable_names(data: object) -> list[str]:
        if not isinstance(data, list):
            raise FetchError("failed to fetch repos: unexpected response shape")
        # Archived and disabled repos are not synced
        return [
            repo["full_name"]
            for repo in data
            if not repo.get("archived") and not repo.get("disabled")
        ]

    @staticmethod
    def _has_next_page(response: httpx.Response) -> bool:
        return 'rel="next"' in response.headers.get("Link", "")
