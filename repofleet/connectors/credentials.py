# Repofleet Credentials
# API token lookup from the environment and the credentials file

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import dotenv_values, set_key

from repofleet.connectors.base import ConnectorType

ENV_VARS: dict[ConnectorType, str] = {
    ConnectorType.GITHUB: "GITHUB_TOKEN",
    ConnectorType.GITEA: "GITEA_TOKEN",
    ConnectorType.BITBUCKET: "BITBUCKET_TOKEN",
}


def get_env_var_name(connector_type: ConnectorType) -> str:
    """Return the variable holding the token for a provider family."""
    return ENV_VARS[connector_type]


def default_credentials_path(environ: Mapping[str, str] | None = None) -> Path:
    """Get the path to credentials.env under the XDG data directory."""
    environ = os.environ if environ is None else environ
    data_home = environ.get("XDG_DATA_HOME")
    base = Path(data_home) if data_home else Path.home() / ".local" / "share"
    return base / "repofleet" / "credentials.env"


def read_credentials_file(path: Path) -> dict[str, str]:
    """
    Parse the credentials.env file.

    Comments, quotes and ``export`` prefixes follow dotenv rules; keys
    without a value are dropped. A missing file yields an empty dict.
    """
    if not path.exists():
        return {}
    return {key: value for key, value in dotenv_values(path, interpolate=False, encoding="utf-8").items() if value}


def save_credential(path: Path, key: str, value: str) -> None:
    """
    Insert or replace one KEY=VALUE line in the credentials file.

    The file is written with mode 0600.
    """
    path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
    path.touch(mode=0o600, exist_ok=True)
    set_key(path, key, value, quote_mode="never", encoding="utf-8")
    os.chmod(path, 0o600)


def gh_cli_token(host: str = "github.com", environ: Mapping[str, str] | None = None) -> str | None:
    """Read the OAuth token stored by the gh CLI for a host, if any."""
    environ = os.environ if environ is None else environ
    config_home = environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    hosts_path = base / "gh" / "hosts.yml"

    try:
        with open(hosts_path, encoding="utf-8") as f:
            hosts = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        return None

    if not isinstance(hosts, dict):
        return None
    entry = hosts.get(host)
    if isinstance(entry, dict) and entry.get("oauth_token"):
        return str(entry["oauth_token"])
    return None


@dataclass(frozen=True)
class Credentials:
    """
    Snapshot of API tokens per provider family.

    Built once at process start and passed explicitly to whatever
    needs to talk to a provider.
    """

    tokens: Mapping[ConnectorType, str] = field(default_factory=dict)

    def token_for(self, connector_type: ConnectorType) -> str | None:
        return self.tokens.get(connector_type) or None

    def env_var(self, connector_type: ConnectorType) -> str:
        return get_env_var_name(connector_type)

    @classmethod
    def from_environment(
        cls,
        environ: Mapping[str, str] | None = None,
        credentials_path: Path | None = None,
        *,
        use_gh_cli: bool = True,
    ) -> Credentials:
        """
        Collect tokens from the environment and credentials.env.

        Environment variables win over the file. GitHub falls back to
        the gh CLI token when neither provides one.
        """
        environ = dict(os.environ if environ is None else environ)
        path = credentials_path or default_credentials_path(environ)
        file_values = read_credentials_file(path)

        tokens: dict[ConnectorType, str] = {}
        for connector_type, var in ENV_VARS.items():
            token = environ.get(var) or file_values.get(var)
            if token:
                tokens[connector_type] = token

        if ConnectorType.GITHUB not in tokens and use_gh_cli:
            token = gh_cli_token("github.com", environ)
            if token:
                tokens[ConnectorType.GITHUB] = token

        return cls(tokens=tokens)


def mask_token(token: str) -> str:
    """Show only the first and last four characters of a token."""
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}{'*' * (len(token) - 8)}{token[-4:]}"
