# Repofleet Errors
# Error taxonomy shared by config, connectors and sync


class RepofleetError(Exception):
    """Base class for all repofleet errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigError(RepofleetError):
    """Malformed or missing configuration."""


class FetchError(RepofleetError):
    """Provider API request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, what: str, status_code: int, body: str = "") -> "FetchError":
        """Return an error for a non-2xx response."""
        detail = body.strip()
        if detail:
            return cls(f"failed to {what}: HTTP {status_code}: {detail}", status_code=status_code)
        return cls(f"failed to {what}: HTTP {status_code}", status_code=status_code)


class NotFoundError(FetchError):
    """Owner is neither a user nor an organization."""

    @classmethod
    def owner(cls, name: str) -> "NotFoundError":
        """Return an error for an unknown user or organization."""
        return cls(f"user or organization not found: {name}", status_code=404)


class ResolveError(RepofleetError):
    """A source's strategy could not be turned into a repository list."""


class CredentialError(ResolveError):
    """No API token available for the source's provider."""

    def __init__(self, message: str, env_var: str = ""):
        self.env_var = env_var
        super().__init__(message)

    @classmethod
    def missing_token(cls, env_var: str) -> "CredentialError":
        """Return an error naming the expected credential variable."""
        return cls(f"no token found - set {env_var} or run 'repofleet connect'", env_var=env_var)


class UnsupportedStrategyError(ResolveError):
    """Strategy is recognized but not implemented."""


class InvalidPatternError(ResolveError):
    """Regex strategy pattern does not compile."""


class ExecutionError(RepofleetError):
    """A clone or pull job failed."""
