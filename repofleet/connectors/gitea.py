# Repofleet Gitea Connector
# Repository listing via the Gitea/Forgejo REST API

from __future__ import annotations

from repofleet.connectors.base import Connector
from repofleet.errors import FetchError, NotFoundError

PAGE_LIMIT = 50


class GiteaConnector(Connector):
    """Gitea, Forgejo and other self-hosted Gitea-compatible servers."""

    name = "gitea"

    @property
    def api_url(self) -> str:
        return f"https://{self.host}/api/v1"

    @property
    def token_url(self) -> str:
        return f"https://{self.host.rstrip('/')}/user/settings/applications"

    def _auth_header(self) -> str:
        return f"token {self.token}"

    def test_connection(self) -> None:
        self._check_auth(f"{self.api_url}/user")

    def list_repos(self, owner: str) -> list[str]:
        segment = "orgs" if self._is_organization(owner) else "users"
        url = f"{self.api_url}/{segment}/{owner}/repos"

        repos: list[str] = []
        page = 1
        while True:
            response = self._get(url, "fetch repos", params={"page": page, "limit": PAGE_LIMIT})
            data = self._json(response, "fetch repos")
            if not isinstance(data, list):
                raise FetchError("failed to fetch repos: unexpected response shape")
            if not data:
                break
            # Archived and empty repos are not synced
            repos.extend(repo["full_name"] for repo in data if not repo.get("archived") and not repo.get("empty"))
            page += 1
        return repos

    def _is_organization(self, owner: str) -> bool:
        response = self._get(f"{self.api_url}/orgs/{owner}", "check organization")
        if response.status_code == 200:
            return True
        if response.status_code != 404:
            raise FetchError.http_error("check organization", response.status_code, response.text)

        user_response = self._get(f"{self.api_url}/users/{owner}", "check user")
        if user_response.status_code == 404:
            raise NotFoundError.owner(owner)
        if not user_response.is_success:
            raise FetchError.http_error("check user", user_response.status_code, user_response.text)
        return False
