# Repofleet Test Fixtures
# Pytest fixtures for Repofleet tests

import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import yaml

from repofleet.config.schema import RepoEntry, Source
from repofleet.connectors.credentials import ENV_VARS


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory with XDG paths inside it."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / ".local" / "share"))
    monkeypatch.delenv("REPOFLEET_CONFIG", raising=False)
    for var in ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def make_git_repo() -> Callable[[Path], Path]:
    """Create a directory that looks like a working copy."""

    def _make(path: Path) -> Path:
        (path / ".git").mkdir(parents=True)
        return path

    return _make


@pytest.fixture
def workspace(temp_dir: Path) -> Path:
    """Root directory for a source's working copies."""
    root = temp_dir / "git"
    root.mkdir()
    return root


@pytest.fixture
def manual_source(workspace: Path) -> Source:
    """A manual source rooted at the workspace."""
    return Source(
        name="GitHub",
        source="github.com/a",
        strategy="manual",
        local_path=str(workspace),
        repos=[RepoEntry(name="a/x"), RepoEntry(name="a/y")],
    )


@pytest.fixture
def sample_config(workspace: Path) -> dict:
    """Create sample configuration dict."""
    return {
        "sources": [
            {
                "name": "GitHub",
                "source": "github.com/octocat",
                "strategy": "manual",
                "local_path": str(workspace),
                "repos": [
                    "octocat/hello-world",
                    {"name": "octocat/spoon-knife", "local_path": str(workspace.parent / "custom" / "spoon")},
                ],
            },
            {
                "name": "Platform",
                "source": "git.example.com/platform",
                "strategy": "regex",
                "local_path": str(workspace.parent / "platform"),
                "regex_strategy": {"pattern": "^platform/svc-"},
            },
        ]
    }


@pytest.fixture
def config_file(temp_home: Path, sample_config: dict) -> Path:
    """Create a configuration file."""
    config_dir = temp_home / ".config" / "repofleet"
    config_dir.mkdir(parents=True)
    config_path = config_dir / "config.yaml"

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(sample_config, f, default_flow_style=False, sort_keys=False)

    return config_path
