"""Click-based CLI for Repofleet."""

from __future__ import annotations

import sys
import threading
from pathlib import Path
from typing import Optional

import click

from repofleet import __version__
from repofleet.config import (
    DEFAULT_TEMPLATE,
    RepofleetConfig,
    config_exists,
    create_default_config,
    get_config_path,
    is_remote,
    load_config,
    validate_config_file,
)
from repofleet.connectors import (
    ConnectorType,
    Credentials,
    create_connector,
    default_credentials_path,
    get_env_var_name,
    mask_token,
    save_credential,
)
from repofleet.errors import ConfigError, FetchError
from repofleet.output import Console, create_console
from repofleet.sync import DEFAULT_WORKERS, SyncEngine

DEFAULT_HOSTS = {
    ConnectorType.GITHUB: "github.com",
    ConnectorType.GITEA: "gitea.com",
    ConnectorType.BITBUCKET: "bitbucket.org",
}


def normalize_host(host: str) -> str:
    """Strip scheme and trailing slash from a host argument."""
    for prefix in ("https://", "http://"):
        if host.startswith(prefix):
            host = host[len(prefix) :]
    return host.rstrip("/")


def _location(ctx: click.Context) -> str:
    return ctx.obj.get("config_path") or str(get_config_path())


def _console(ctx: click.Context) -> Console:
    return ctx.obj["console"]


def _load(ctx: click.Context) -> tuple[RepofleetConfig, str]:
    """Load the configuration or exit with code 1."""
    console = _console(ctx)
    location = _location(ctx)
    try:
        config = load_config(location)
    except FileNotFoundError as e:
        console.print_error(str(e))
        sys.exit(1)
    except ConfigError as e:
        console.print_error(f"failed to load config: {e}")
        sys.exit(1)

    for invalid in config.invalid_sources:
        console.print_warning(f"skipping invalid source source={invalid.label} error={'; '.join(invalid.errors)}")
    console.print_debug(f"loaded config path={location} sources={len(config.sources)}")
    return config, location


@click.group()
@click.version_option(version=__version__, prog_name="repofleet")
@click.option(
    "--config",
    "-c",
    "config_path",
    help="Config file, URL or SSH path (default: $XDG_CONFIG_HOME/repofleet/config.yaml)",
)
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], debug: bool) -> None:
    """Repofleet - sync local repositories with remote sources.

    \b
    Sources list repositories on GitHub, Gitea or Bitbucket. Repofleet
    clones what is missing, reports what is not declared and pulls
    updates for everything it finds.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["console"] = create_console(debug=debug)


@cli.command()
@click.option("--prune", "-p", is_flag=True, help="Prune repos not in config")
@click.option("--add", "-a", is_flag=True, help="Add orphaned repos to config")
@click.option("--force", is_flag=True, help="Skip confirmation prompts")
@click.option("--jobs", "-j", default=DEFAULT_WORKERS, show_default=True, help="Number of parallel clone workers")
@click.option("--dry-run", "-n", is_flag=True, help="Show what would happen without making changes")
@click.pass_context
def sync(ctx: click.Context, prune: bool, add: bool, force: bool, jobs: int, dry_run: bool) -> None:
    """Synchronize local repositories with configured sources.

    Clones missing repositories and handles repositories that exist
    locally but are not declared.
    """
    if prune and add:
        raise click.UsageError("--prune and --add are mutually exclusive")

    console = _console(ctx)
    config, location = _load(ctx)

    stop = threading.Event()
    engine = SyncEngine(config, Credentials.from_environment(), console, config_path=location, stop=stop)
    try:
        result = engine.sync(prune=prune, add=add, force=force, jobs=jobs, dry_run=dry_run)
    except KeyboardInterrupt:
        stop.set()
        console.print_warning("interrupted, remaining repos were not started")
        sys.exit(130)

    console.print_sync_result(result, dry_run=dry_run)
    if result.failed:
        sys.exit(1)


@cli.command()
@click.option("--force", is_flag=True, help="Skip confirmation prompts")
@click.option("--jobs", "-j", default=DEFAULT_WORKERS, show_default=True, help="Number of parallel pull workers")
@click.pass_context
def pull(ctx: click.Context, force: bool, jobs: int) -> None:
    """Pull updates for all local repos.

    Runs git pull on every repository found in the configured source
    directories.
    """
    console = _console(ctx)
    config, location = _load(ctx)

    def confirm(count: int) -> bool:
        return console.confirm(f"Pull {count} repo(s)?", default=True)

    stop = threading.Event()
    engine = SyncEngine(config, Credentials.from_environment(), console, config_path=location, stop=stop)
    try:
        result = engine.pull(jobs=jobs, confirm=None if force else confirm)
    except KeyboardInterrupt:
        stop.set()
        console.print_warning("interrupted, remaining repos were not started")
        sys.exit(130)

    console.print_pull_result(result)
    if result.failed:
        sys.exit(1)


@cli.command()
@click.pass_context
def diff(ctx: click.Context) -> None:
    """Show diff between local repos and config.

    \b
    + declared, not cloned yet
    - present locally, not declared
    """
    console = _console(ctx)
    config, location = _load(ctx)

    engine = SyncEngine(config, Credentials.from_environment(), console, config_path=location)
    sources = engine.diff()
    if not sources:
        console.print_info("no sources to diff")
        return

    console.print_unified_diff(sources)


@cli.command("config")
@click.option("--validate", "-v", is_flag=True, help="Validate config file without editing")
@click.option("--generate", "-g", is_flag=True, help="Print the default config template")
@click.option("--path", "show_path", is_flag=True, help="Print the config location")
@click.pass_context
def config_cmd(ctx: click.Context, validate: bool, generate: bool, show_path: bool) -> None:
    """Edit, validate or generate the configuration.

    Without options, opens the config in $EDITOR, creating it from the
    default template first when it doesn't exist.
    """
    console = _console(ctx)
    location = _location(ctx)

    if show_path:
        click.echo(location)
        return

    if generate:
        click.echo(DEFAULT_TEMPLATE, nl=False)
        return

    if validate:
        if not config_exists(location):
            console.print_error(f"config file not found: {location}")
            sys.exit(1)
        valid, errors = validate_config_file(location)
        if not valid:
            for error in errors:
                console.print_error(error)
            sys.exit(1)
        console.print_success(f"config is valid path={location}")
        return

    if is_remote(location):
        console.print_error("cannot edit remote config, use --validate to check it")
        sys.exit(1)

    path = Path(location)
    if not path.exists():
        console.print_info(f"creating default config path={path}")
        create_default_config(path)

    original = path.read_text(encoding="utf-8")
    console.print_info(f"opening config in editor path={path}")
    while True:
        click.edit(filename=str(path))
        valid, errors = validate_config_file(path)
        if valid:
            console.print_success(f"config saved successfully path={path}")
            return

        for error in errors:
            console.print_error(error)
        if not console.confirm("Config validation failed. Edit again?", default=True):
            path.write_text(original, encoding="utf-8")
            console.print_warning("changes discarded")
            sys.exit(1)


@cli.command()
@click.option(
    "--type",
    "-t",
    "connector_type",
    type=click.Choice([t.value for t in ConnectorType]),
    help="Connector type",
)
@click.option("--host", "-H", help="Git server host (e.g., gitea.company.com)")
@click.option("--token", "-T", help="API token (skips interactive prompt)")
@click.option("--list", "-l", "list_only", is_flag=True, help="List configured connections")
@click.pass_context
def connect(
    ctx: click.Context,
    connector_type: Optional[str],
    host: Optional[str],
    token: Optional[str],
    list_only: bool,
) -> None:
    """Store an API token for a Git provider.

    The token is verified against the provider before it is written to
    credentials.env.
    """
    console = _console(ctx)
    credentials_path = default_credentials_path()

    if list_only:
        credentials = Credentials.from_environment(credentials_path=credentials_path)
        rows = []
        for kind in ConnectorType:
            value = credentials.token_for(kind)
            rows.append((kind.value, get_env_var_name(kind), mask_token(value) if value else "not set"))
        console.print_credentials(rows)
        console.print(f"[dim]Credentials file: {credentials_path}[/dim]")
        return

    if connector_type is None:
        connector_type = click.prompt(
            "Git provider",
            type=click.Choice([t.value for t in ConnectorType]),
            default=ConnectorType.GITHUB.value,
        )
    kind = ConnectorType(connector_type)

    if host is None:
        host = DEFAULT_HOSTS[kind] if token else click.prompt("Host", default=DEFAULT_HOSTS[kind])
    host = normalize_host(host)

    connector = create_connector(kind, host)
    try:
        if token is None:
            console.print_info(f"create a token at {connector.token_url}")
            token = click.prompt("API token", hide_input=True)
    finally:
        connector.close()

    console.print_info("testing connection...")
    connector = create_connector(kind, host, token)
    try:
        connector.test_connection()
    except FetchError as e:
        console.print_error(f"connection test failed: {e}")
        sys.exit(1)
    finally:
        connector.close()
    console.print_success("connection successful")

    env_var = get_env_var_name(kind)
    save_credential(credentials_path, env_var, token)
    console.print_info(f"credential saved path={credentials_path}")
    console.print(f"\nTo use in the current session, run:\n  export {env_var}=<token>\n")


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
