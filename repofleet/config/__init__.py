# Repofleet Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from repofleet.config.defaults import DEFAULT_TEMPLATE, generate_default_config
from repofleet.config.loader import (
    config_exists,
    create_default_config,
    get_config_path,
    is_remote,
    load_config,
    save_config,
    save_source,
    validate_config_file,
)
from repofleet.config.schema import (
    InvalidSource,
    RepoEntry,
    RepofleetConfig,
    SSHOptions,
    Source,
    Strategy,
    repo_basename,
)

__all__ = [
    # Schema
    "RepofleetConfig",
    "Source",
    "RepoEntry",
    "SSHOptions",
    "Strategy",
    "InvalidSource",
    "repo_basename",
    # Loader
    "load_config",
    "save_config",
    "save_source",
    "get_config_path",
    "config_exists",
    "create_default_config",
    "is_remote",
    "validate_config_file",
    # Defaults
    "DEFAULT_TEMPLATE",
    "generate_default_config",
]
