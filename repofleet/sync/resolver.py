# Repofleet Strategy Resolver
# Turns a source's strategy into a concrete repository list

from __future__ import annotations

import re
from collections.abc import Callable

from repofleet.config.schema import RepoEntry, Source, Strategy
from repofleet.connectors import Connector, ConnectorType, Credentials, create_connector
from repofleet.errors import (
    ConfigError,
    CredentialError,
    InvalidPatternError,
    UnsupportedStrategyError,
)

ConnectorFactory = Callable[[ConnectorType, str, str], Connector]


def filter_by_pattern(names: list[str], pattern: re.Pattern[str]) -> list[str]:
    """Keep names whose full "owner/repo" string matches the pattern."""
    return [name for name in names if pattern.search(name)]


class StrategyResolver:
    """
    Resolves sources into ordered RepoEntry lists.

    Enumeration goes through a connector built per call from the
    source's provider type, host and the token in ``credentials``.
    """

    def __init__(self, credentials: Credentials, connector_factory: ConnectorFactory | None = None):
        """
        Initialize resolver.

        Args:
            credentials: Token snapshot taken at process start.
            connector_factory: Builds a connector from (type, host, token).
        """
        self.credentials = credentials
        self.connector_factory = connector_factory or create_connector

    def resolve(self, source: Source) -> list[RepoEntry]:
        """
        Resolve a source's repository list.

        Raises:
            UnsupportedStrategyError: For the file strategy.
            InvalidPatternError: If the regex pattern doesn't compile.
            CredentialError: If no token exists for the provider.
            ConfigError: If the source has no owner segment.
            FetchError: If enumeration fails.
        """
        if source.strategy == Strategy.MANUAL:
            return list(source.repos)

        if source.strategy == Strategy.ALL:
            return [RepoEntry(name=name) for name in self.enumerate(source)]

        if source.strategy == Strategy.REGEX:
            # Compile before touching the network
            try:
                pattern = re.compile(source.regex_pattern)
            except re.error as e:
                raise InvalidPatternError(f"invalid regex pattern {source.regex_pattern!r}: {e}") from e
            return [RepoEntry(name=name) for name in filter_by_pattern(self.enumerate(source), pattern)]

        if source.strategy == Strategy.FILE:
            raise UnsupportedStrategyError("file strategy is not supported yet")

        raise UnsupportedStrategyError(f"unknown strategy: {source.strategy}")

    def enumerate(self, source: Source) -> list[str]:
        """List every syncable repository of the source's owner."""
        connector_type = source.connector_type
        token = self.credentials.token_for(connector_type)
        if not token:
            raise CredentialError.missing_token(self.credentials.env_var(connector_type))

        owner = source.owner
        if not owner:
            raise ConfigError("source must include user/org (e.g., github.com/username)")

        connector = self.connector_factory(connector_type, source.host, token)
        try:
            return connector.list_repos(owner)
        finally:
            connector.close()
