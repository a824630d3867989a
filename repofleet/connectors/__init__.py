# Repofleet Connectors Module
# Provider directory clients and credential lookup

from __future__ import annotations

import httpx

from repofleet.connectors.base import Connector, ConnectorType, detect_type
from repofleet.connectors.bitbucket import BitbucketCloudConnector, BitbucketServerConnector
from repofleet.connectors.credentials import (
    Credentials,
    default_credentials_path,
    get_env_var_name,
    mask_token,
    save_credential,
)
from repofleet.connectors.gitea import GiteaConnector
from repofleet.connectors.github import GitHubConnector


def create_connector(
    connector_type: ConnectorType,
    host: str,
    token: str | None = None,
    *,
    client: httpx.Client | None = None,
) -> Connector:
    """
    Create a connector for a provider family.

    Args:
        connector_type: Provider family.
        host: Provider host; Bitbucket picks Cloud for bitbucket.org
              and Server for anything else.
        token: API token.
        client: Optional httpx client to use instead of a fresh one.

    Returns:
        Connector instance.
    """
    if connector_type == ConnectorType.GITHUB:
        return GitHubConnector(host, token, client=client)
    if connector_type == ConnectorType.GITEA:
        return GiteaConnector(host, token, client=client)
    if connector_type == ConnectorType.BITBUCKET:
        if not host or host == "bitbucket.org":
            return BitbucketCloudConnector(host, token, client=client)
        return BitbucketServerConnector(host, token, client=client)
    raise ValueError(f"unknown connector type: {connector_type}")


__all__ = [
    # Base
    "Connector",
    "ConnectorType",
    "detect_type",
    "create_connector",
    # Providers
    "GitHubConnector",
    "GiteaConnector",
    "BitbucketCloudConnector",
    "BitbucketServerConnector",
    # Credentials
    "Credentials",
    "default_credentials_path",
    "get_env_var_name",
    "mask_token",
    "save_credential",
]
