# Repofleet Configuration Loader
# Load, save, and validate YAML configuration from files, URLs and SSH paths

import os
import subprocess
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml
from pydantic import ValidationError

from repofleet.config.defaults import generate_default_config
from repofleet.config.schema import InvalidSource, RepofleetConfig, Source
from repofleet.errors import ConfigError
from repofleet.utils.paths import atomic_write, ensure_dir

FETCH_TIMEOUT = 30.0
SOURCES_DIR_NAME = "sources.d"


def get_config_dir() -> Path:
    """Get the repofleet configuration directory."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / "repofleet"


def get_config_path() -> str | Path:
    """Get the configuration location; remote overrides are returned verbatim."""
    # Allow override via environment variable
    env_path = os.environ.get("REPOFLEET_CONFIG")
    if env_path:
        if is_remote(env_path):
            return env_path
        return Path(env_path).expanduser()
    return get_config_dir() / "config.yaml"


def is_ssh_path(location: str) -> bool:
    """Check for the scp-like ``user@host:/path`` form."""
    at_idx = location.find("@")
    colon_idx = location.find(":")
    # Must not be a Windows drive path (C:\)
    return 0 < at_idx < colon_idx and not location[colon_idx:].startswith(":\\")


def is_remote(location: str | Path) -> bool:
    """Check if a config location is an HTTP(S) URL or an SSH path."""
    location = str(location)
    return location.startswith(("http://", "https://", "ssh://")) or is_ssh_path(location)


def fetch_http(url: str) -> bytes:
    """Fetch a configuration document over HTTP(S)."""
    try:
        response = httpx.get(url, timeout=FETCH_TIMEOUT, follow_redirects=True)
    except httpx.HTTPError as e:
        raise ConfigError(f"failed to fetch config: {e}") from e
    if response.status_code != 200:
        raise ConfigError(f"failed to fetch config: HTTP {response.status_code}")
    return response.content


def fetch_ssh(location: str) -> bytes:
    """Read a configuration document from a remote host with ``ssh host cat path``."""
    if location.startswith("ssh://"):
        rest = location[len("ssh://"):]
        slash_idx = rest.find("/")
        if slash_idx == -1:
            raise ConfigError("invalid SSH URL: missing path")
        host, remote_path = rest[:slash_idx], rest[slash_idx:]
    else:
        host, remote_path = location.split(":", 1)

    try:
        result = subprocess.run(["ssh", host, "cat", remote_path], capture_output=True, check=False)
    except FileNotFoundError as e:
        raise ConfigError("ssh command not found. Is OpenSSH installed?") from e
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise ConfigError(f"SSH failed: {stderr}")
    return result.stdout


def read_config_bytes(location: str | Path) -> bytes:
    """
    Read raw configuration bytes from a file, HTTP(S) URL or SSH path.

    Raises:
        FileNotFoundError: If a local file doesn't exist.
        ConfigError: If a remote document can't be fetched.
    """
    location_str = str(location)
    if location_str.startswith(("http://", "https://")):
        return fetch_http(location_str)
    if location_str.startswith("ssh://") or is_ssh_path(location_str):
        return fetch_ssh(location_str)
    return Path(location_str).read_bytes()


def _parse_document(data: bytes, label: str) -> list[Any]:
    """Parse YAML bytes and return the raw ``sources`` list."""
    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse {label}: {e}") from e

    if document is None:
        return []
    if not isinstance(document, dict):
        raise ConfigError(f"failed to parse {label}: top level must be a mapping")

    sources = document.get("sources") or []
    if not isinstance(sources, list):
        raise ConfigError(f"failed to parse {label}: 'sources' must be a list")
    return sources


def format_validation_error(error: ValidationError) -> list[str]:
    """Flatten pydantic errors into "loc -> loc: message" strings."""
    messages = []
    for err in error.errors():
        loc = " -> ".join(str(part) for part in err["loc"])
        msg = err["msg"]
        messages.append(f"{loc}: {msg}" if loc else msg)
    return messages


def _validate_sources(raw_sources: list[Any], origin: Optional[Path], config: RepofleetConfig) -> None:
    for index, raw in enumerate(raw_sources):
        try:
            source = Source.model_validate(raw)
        except ValidationError as e:
            config.invalid_sources.append(
                InvalidSource(origin=origin, index=index, raw=raw, errors=format_validation_error(e))
            )
            continue
        source._origin = origin
        config.sources.append(source)


def _load_sources_dir(sources_dir: Path, config: RepofleetConfig) -> None:
    """Append sources from every *.yaml / *.yml file in sources.d, alphabetically."""
    if not sources_dir.exists():
        return
    if not sources_dir.is_dir():
        raise ConfigError(f"{sources_dir} is not a directory")

    for path in sorted(sources_dir.iterdir()):
        if path.is_dir() or path.suffix not in (".yaml", ".yml"):
            continue
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ConfigError(f"failed to read {path.name}: {e}") from e
        _validate_sources(_parse_document(data, path.name), path, config)


def load_config(config_path: Optional[str | Path] = None) -> RepofleetConfig:
    """
    Load configuration from a YAML document plus any sources.d fragments.

    Sources that fail validation are recorded in ``invalid_sources`` and
    skipped; the remaining sources are returned.

    Args:
        config_path: File path, URL or SSH path. Uses default if not provided.

    Returns:
        RepofleetConfig: Validated configuration object.

    Raises:
        FileNotFoundError: If a local config file doesn't exist and no
            sources.d fragments provide sources.
        ConfigError: If the document is unreadable or defines no usable source.
    """
    location = config_path if config_path is not None else get_config_path()
    remote = is_remote(location)
    config = RepofleetConfig()
    missing = False

    try:
        data = read_config_bytes(location)
    except FileNotFoundError:
        # sources.d may still provide sources
        missing = True
    except OSError as e:
        raise ConfigError(f"failed to read config file: {e}") from e
    else:
        origin = None if remote else Path(location)
        _validate_sources(_parse_document(data, "config file"), origin, config)

    if not remote:
        _load_sources_dir(Path(location).parent / SOURCES_DIR_NAME, config)

    if not config.sources and not config.invalid_sources:
        if missing:
            raise FileNotFoundError(
                f"Configuration file not found: {location}\nRun 'repofleet config' to create one."
            )
        raise ConfigError("invalid config: no sources defined")

    if not config.sources:
        details = "; ".join(f"{s.label}: {', '.join(s.errors)}" for s in config.invalid_sources)
        raise ConfigError(f"invalid config: no valid sources ({details})")

    config.expand_paths()
    return config


def save_config(config: RepofleetConfig, config_path: Optional[Path] = None) -> Path:
    """
    Save the sources that belong to one configuration file.

    Sources loaded from other files (sources.d fragments) are left out,
    invalid entries from this file are written back unchanged.

    Args:
        config: Configuration object to save.
        config_path: Target file. Uses default if not provided.

    Returns:
        Path: Path where config was saved.
    """
    if config_path is None:
        config_path = get_config_path()
    if is_remote(config_path):
        raise ConfigError(f"cannot save remote configuration: {config_path}")
    config_path = Path(config_path)

    def belongs(origin: Optional[Path]) -> bool:
        return origin is None or origin == config_path

    # Use mode='json' to serialize Enums as their string values
    entries: list[Any] = [
        source.model_dump(exclude_defaults=True, mode="json") for source in config.sources if belongs(source.origin)
    ]
    for invalid in sorted(config.invalid_sources, key=lambda s: s.index):
        if belongs(invalid.origin):
            entries.insert(min(invalid.index, len(entries)), invalid.raw)

    ensure_dir(config_path.parent)
    text = yaml.dump({"sources": entries}, default_flow_style=False, sort_keys=False, allow_unicode=True)
    atomic_write(config_path, text)
    return config_path


def save_source(config: RepofleetConfig, source: Source, config_path: Optional[Path] = None) -> Path:
    """Persist the file a source came from."""
    return save_config(config, source.origin or config_path)


def create_default_config(config_path: Optional[Path] = None) -> Path:
    """
    Write the default configuration template.

    Raises:
        FileExistsError: If a config file already exists.
        ConfigError: If the location is remote.
    """
    location = config_path if config_path is not None else get_config_path()
    if is_remote(location):
        raise ConfigError(f"cannot create remote configuration: {location}")
    config_path = Path(location)
    if config_path.exists():
        raise FileExistsError(f"Configuration file already exists: {config_path}")
    ensure_dir(config_path.parent)
    config_path.write_text(generate_default_config(), encoding="utf-8")
    return config_path


def config_exists(config_path: Optional[str | Path] = None) -> bool:
    """Check if a config exists; remote locations are assumed to exist."""
    location = config_path if config_path is not None else get_config_path()
    if is_remote(location):
        return True
    return Path(location).exists()


def validate_config_file(config_path: Optional[str | Path] = None) -> tuple[bool, list[str]]:
    """
    Validate a configuration document strictly.

    Every invalid source counts as an error here.

    Args:
        config_path: Path to config file to validate.

    Returns:
        Tuple of (is_valid, error_messages).
    """
    try:
        config = load_config(config_path)
    except FileNotFoundError as e:
        return False, [str(e).splitlines()[0]]
    except ConfigError as e:
        return False, [e.message]

    errors = [f"source {s.label}: {msg}" for s in config.invalid_sources for msg in s.errors]
    return len(errors) == 0, errors
