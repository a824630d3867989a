# Repofleet Configuration Schema
# Pydantic models for YAML configuration validation

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, PrivateAttr, field_validator, model_serializer, model_validator

from repofleet.connectors.base import ConnectorType, detect_type
from repofleet.utils.paths import expand_user_path


class Strategy(str, Enum):
    """How a source's repository set is determined."""

    MANUAL = "manual"
    ALL = "all"
    REGEX = "regex"
    FILE = "file"


def repo_basename(full_name: str) -> str:
    """Return the repository name from an "owner/repo" string."""
    return full_name.rstrip("/").split("/")[-1]


class RepoEntry(BaseModel):
    """
    A repository declared in a source.

    Accepts either a bare "owner/repo" string or a mapping with
    ``name`` and an optional ``local_path`` override. Serializes back to
    the bare string when no override is set.
    """

    name: str
    local_path: str | None = None

    @model_validator(mode="before")
    @classmethod
    def from_plain_string(cls, data: Any) -> Any:
        """Normalize the plain string form into a mapping."""
        if isinstance(data, str):
            return {"name": data}
        return data

    @model_serializer
    def compact(self) -> str | dict[str, str]:
        if self.local_path:
            return {"name": self.name, "local_path": self.local_path}
        return self.name

    @property
    def basename(self) -> str:
        return repo_basename(self.name)

    @property
    def has_custom_local_path(self) -> bool:
        return bool(self.local_path)

    def resolved_local_path(self, root: str | Path) -> Path:
        """Return the override if set, else ``root / basename``."""
        if self.local_path:
            return Path(self.local_path)
        return Path(root) / self.basename


class SSHOptions(BaseModel):
    """SSH transport options for generated clone URLs."""

    port: int | None = Field(default=None, description="Non-standard SSH port")
    private_key: str | None = Field(default=None, description="Path to SSH private key")


class RegexStrategyConfig(BaseModel):
    pattern: str = ""


class FileStrategyConfig(BaseModel):
    filename: str = ""


class Source(BaseModel):
    """One configured synchronization unit."""

    name: str = Field(description="Display name")
    source: str = Field(description="host/owner, e.g. github.com/octocat")
    strategy: Strategy = Field(description="Repository selection strategy")
    type: str | None = Field(default=None, description="Provider override: github, gitea, bitbucket")
    local_path: str = Field(description="Root directory for working copies")
    branch: str | None = Field(default=None, description="Branch to clone, remote default if unset")
    ssh_options: SSHOptions | None = Field(default=None, description="SSH transport options")
    private_key: str | None = Field(default=None, description="Deprecated: use ssh_options.private_key")
    repos: list[RepoEntry] = Field(default_factory=list, description="Declared repositories")
    regex_strategy: RegexStrategyConfig | None = Field(default=None, description="Regex strategy settings")
    file_strategy: FileStrategyConfig | None = Field(default=None, description="File strategy settings")

    _origin: Path | None = PrivateAttr(default=None)

    @field_validator("name", "source", "local_path")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("type")
    @classmethod
    def known_type(cls, v: str | None) -> str | None:
        if v is None or v == "":
            return None
        v = v.lower()
        if v not in {t.value for t in ConnectorType}:
            raise ValueError(f"unknown connector type {v!r}")
        return v

    @model_validator(mode="after")
    def check_strategy(self) -> "Source":
        if self.strategy == Strategy.MANUAL:
            if not self.repos:
                raise ValueError("repos list is required for manual strategy")
            if any(not entry.name for entry in self.repos):
                raise ValueError("repo name is required")
        elif self.strategy == Strategy.REGEX:
            pattern = self.regex_strategy.pattern if self.regex_strategy else ""
            if not pattern:
                raise ValueError("regex_strategy.pattern is required for regex strategy")
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid regex pattern: {e}") from e
        elif self.strategy == Strategy.FILE:
            if not self.file_strategy or not self.file_strategy.filename:
                raise ValueError("file_strategy.filename is required for file strategy")
        return self

    @property
    def origin(self) -> Path | None:
        """File this source was loaded from, None for remote documents."""
        return self._origin

    @property
    def host(self) -> str:
        return self.source.split("/", 1)[0]

    @property
    def owner(self) -> str:
        """User, organization or workspace part of ``source``."""
        if "/" not in self.source:
            return ""
        return self.source.split("/", 1)[1]

    @property
    def connector_type(self) -> ConnectorType:
        """Explicit ``type`` wins, otherwise detect from the host."""
        if self.type:
            return ConnectorType(self.type)
        return detect_type(self.host)

    @property
    def effective_private_key(self) -> str | None:
        if self.ssh_options and self.ssh_options.private_key:
            return self.ssh_options.private_key
        return self.private_key or None

    @property
    def ssh_port(self) -> int | None:
        if self.ssh_options and self.ssh_options.port and self.ssh_options.port > 0:
            return self.ssh_options.port
        return None

    @property
    def regex_pattern(self) -> str:
        return self.regex_strategy.pattern if self.regex_strategy else ""

    def repo_url(self, full_name: str) -> str:
        """Build the SSH clone URL for a repository."""
        port = self.ssh_port
        if port:
            return f"ssh://git@{self.host}:{port}/{full_name}.git"
        return f"git@{self.host}:{full_name}.git"

    def expand_paths(self) -> None:
        """Expand ~ and environment variables in all path fields."""
        self.local_path = expand_user_path(self.local_path)
        if self.private_key:
            self.private_key = expand_user_path(self.private_key)
        if self.ssh_options and self.ssh_options.private_key:
            self.ssh_options.private_key = expand_user_path(self.ssh_options.private_key)
        for entry in self.repos:
            if entry.local_path:
                entry.local_path = expand_user_path(entry.local_path)


@dataclass
class InvalidSource:
    """A source entry that failed validation and is skipped for this run."""

    origin: Path | None
    index: int
    raw: Any
    errors: list[str]

    @property
    def label(self) -> str:
        if isinstance(self.raw, dict) and self.raw.get("name"):
            return str(self.raw["name"])
        return f"#{self.index}"


class RepofleetConfig(BaseModel):
    """Root configuration model."""

    sources: list[Source] = Field(default_factory=list, description="Synchronization sources")

    _invalid: list[InvalidSource] = PrivateAttr(default_factory=list)

    @property
    def invalid_sources(self) -> list[InvalidSource]:
        """Entries skipped at load time; kept so saving does not drop them."""
        return self._invalid

    def get_source(self, name: str) -> Source | None:
        """Get a source by name."""
        for source in self.sources:
            if source.name == name:
                return source
        return None

    def expand_paths(self) -> None:
        for source in self.sources:
            source.expand_paths()
