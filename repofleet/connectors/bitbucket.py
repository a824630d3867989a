# Repofleet Bitbucket Connectors
# Repository listing for Bitbucket Cloud and Bitbucket Server/Data Center

from __future__ import annotations

from repofleet.connectors.base import Connector
from repofleet.errors import FetchError, NotFoundError

PAGE_LEN = 100


class BitbucketCloudConnector(Connector):
    """
    Bitbucket Cloud (bitbucket.org).

    Users and teams share the workspace namespace, so the workspace
    listing itself tells whether the owner exists.
    """

    name = "bitbucket"

    def __init__(self, host: str = "bitbucket.org", token: str | None = None, **kwargs):
        super().__init__(host or "bitbucket.org", token, **kwargs)

    @property
    def api_url(self) -> str:
        return "https://api.bitbucket.org/2.0"

    @property
    def token_url(self) -> str:
        return "https://bitbucket.org/account/settings/app-passwords/"

    def test_connection(self) -> None:
        self._check_auth(f"{self.api_url}/user")

    def list_repos(self, owner: str) -> list[str]:
        repos: list[str] = []
        url: str | None = f"{self.api_url}/repositories/{owner}"
        params: dict | None = {"pagelen": PAGE_LEN}

        while url:
            response = self._get(url, "fetch repos", params=params)
            if response.status_code == 404:
                raise NotFoundError.owner(owner)
            data = self._json(response, "fetch repos")
            if not isinstance(data, dict):
                raise FetchError("failed to fetch repos: unexpected response shape")
            repos.extend(repo["full_name"] for repo in data.get("values", []))
            # "next" is a complete URL including the page parameters
            url = data.get("next")
            params = None
        return repos


class BitbucketServerConnector(Connector):
    """
    Bitbucket Server / Data Center.

    Owners are project keys, or ``~slug`` for personal repositories.
    """

    name = "bitbucket"

    @property
    def api_url(self) -> str:
        return f"https://{self.host}/rest/api/1.0"

    @property
    def token_url(self) -> str:
        return f"https://{self.host}/plugins/servlet/access-tokens/manage"

    def test_connection(self) -> None:
        self._check_auth(f"{self.api_url}/application-properties")

    def list_repos(self, owner: str) -> list[str]:
        if owner.startswith("~"):
            url = f"{self.api_url}/users/{owner[1:]}/repos"
        else:
            url = f"{self.api_url}/projects/{owner}/repos"

        repos: list[str] = []
        start = 0
        while True:
            response = self._get(url, "fetch repos", params={"limit": PAGE_LEN, "start": start})
            if response.status_code == 404:
                raise NotFoundError.owner(owner)
            data = self._json(response, "fetch repos")
            if not isinstance(data, dict):
                raise FetchError("failed to fetch repos: unexpected response shape")

            repos.extend(f"{owner}/{repo['slug']}" for repo in data.get("values", []))

            next_start = data.get("nextPageStart")
            if data.get("isLastPage", True) or next_start is None:
                break
            start = next_start
        return repos
