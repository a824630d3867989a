# Repofleet Console Output
# Rich-based console output for user-friendly display

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from repofleet.sync.engine import PullResult, SourceStatus, SyncResult
from repofleet.sync.orphans import OrphanAction
from repofleet.sync.reconcile import RepoStatus, StatusType

_STATUS_STYLES = {
    StatusType.TO_CREATE: "green",
    StatusType.ORPHANED: "red",
    StatusType.UNCHANGED: "dim",
}


class Console:
    """
    Console output manager using Rich.

    Provides formatted output and prompts for sync operations.
    """

    def __init__(self, *, debug: bool = False, colored: bool = True):
        """
        Initialize console.

        Args:
            debug: Show debug messages.
            colored: Enable colored output.
        """
        self.debug = debug
        self._console = RichConsole(force_terminal=colored, no_color=not colored, highlight=False)

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{escape(message)}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{escape(message)}[/blue]")

    def print_debug(self, message: str) -> None:
        """Print debug message, only with --debug."""
        if self.debug:
            self._console.print(f"[dim]Debug: {escape(message)}[/dim]")

    def print_diff(self, source_name: str, statuses: list[RepoStatus]) -> None:
        """
        Print the classified repositories of one source.

        Args:
            source_name: Source display name.
            statuses: Reconciliation result.
        """
        self._console.print()
        self._console.print(f"  [bold]{escape(source_name)}[/bold]")
        self._console.print()
        for status in statuses:
            self._console.print(f"  {status.symbol} {escape(status.name)}", style=_STATUS_STYLES[status.status])
        self._console.print()

    def print_unified_diff(self, sources: list[SourceStatus]) -> None:
        """Print all sources as one diff of local state against config."""
        self._console.print("--- local", style="cyan")
        self._console.print("+++ config", style="cyan")
        for source in sources:
            self._console.print(f"@@ {escape(source.name)} @@", style="magenta")
            for status in source.statuses:
                self._console.print(f"{status.symbol} {escape(status.name)}", style=_STATUS_STYLES[status.status])
            self._console.print()

    @contextmanager
    def progress(self, description: str, total: int) -> Iterator[Callable[[int, int], None]]:
        """
        Show a progress bar while jobs run.

        Yields:
            Callback taking (completed, total).
        """
        with Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=self._console,
            transient=True,
        ) as progress:
            task = progress.add_task(description, total=total)

            def advance(completed: int, total: int) -> None:
                progress.update(task, completed=completed, total=total)

            yield advance

    def print_sync_result(self, result: SyncResult, *, dry_run: bool = False) -> None:
        """
        Print sync result summary.

        Args:
            result: Sync result to display.
            dry_run: Whether this was a dry run (changes wording).
        """
        status_text = "Dry run completed" if dry_run else "Sync completed"
        lines = [
            f"Cloned: {result.cloned}",
            f"Pruned: {result.pruned}",
            f"Added: {result.added}",
            f"Skipped: {result.skipped}",
            f"Failed: {result.failed}",
        ]
        if result.source_errors:
            lines.append(f"Sources skipped: {len(result.source_errors)}")

        self._console.print()
        if result.has_issues:
            self._console.print(
                Panel(
                    f"[yellow]{status_text} with errors[/yellow]\n" + "\n".join(lines),
                    title="Summary",
                    border_style="yellow",
                )
            )
        else:
            self._console.print(
                Panel(f"[green]{status_text}[/green]\n" + "\n".join(lines), title="Summary", border_style="green")
            )

    def print_pull_result(self, result: PullResult) -> None:
        """Print pull result summary."""
        border = "green" if result.failed == 0 else "yellow"
        self._console.print(
            Panel(
                f"Updated: {result.updated}\nFailed: {result.failed}",
                title="Pull complete",
                border_style=border,
            )
        )

    def print_credentials(self, rows: list[tuple[str, str, str]]) -> None:
        """
        Print configured tokens.

        Args:
            rows: (provider, variable, masked token) tuples.
        """
        table = Table(show_header=True, header_style="bold")
        table.add_column("Provider")
        table.add_column("Variable", style="dim")
        table.add_column("Token")
        for provider, env_var, masked in rows:
            table.add_row(provider, env_var, masked)
        self._console.print(table)

    def confirm(self, message: str, default: bool = False) -> bool:
        """
        Ask for confirmation.

        Args:
            message: Confirmation message.
            default: Default value if user just presses enter.

        Returns:
            True if confirmed.
        """
        suffix = " [Y/n]" if default else " [y/N]"
        response = self._console.input(f"{escape(message)}{escape(suffix)}: ").strip().lower()

        if not response:
            return default

        return response in ("y", "yes")

    def confirm_create_dir(self, path: Path) -> bool:
        """Ask whether to create a missing source root."""
        return self.confirm(f"Directory does not exist: {path}. Create it?")

    def confirm_prune(self, names: list[str]) -> bool:
        """Ask before deleting orphaned working copies."""
        if not names:
            return False
        self._console.print(f"[bold red]{len(names)} repo(s) not in config will be permanently deleted:[/bold red]")
        for name in names:
            self._console.print(f"  - {escape(name)}")
        return self.confirm("Delete these repos from disk?")

    def choose_orphan_action(self) -> OrphanAction:
        """
        Interactive menu for orphaned working copies.

        Returns:
            The chosen action.
        """
        self._console.print("[bold]Repos found that are not in config. What would you like to do?[/bold]")
        self._console.print("  [cyan]1[/cyan] - [bold]Prune[/bold]: delete repos not in config")
        self._console.print("  [cyan]2[/cyan] - [bold]Add[/bold]: add repos to config")
        self._console.print("  [cyan]3[/cyan] - [bold]Skip[/bold]: do nothing")

        while True:
            choice = self._console.input("\nYour choice [1-3]: ").strip().lower()

            if choice in ("1", "prune"):
                return OrphanAction.PRUNE
            elif choice in ("2", "add"):
                return OrphanAction.ADD
            elif choice in ("3", "skip", ""):
                return OrphanAction.SKIP
            else:
                self._console.print("[yellow]Please enter 1, 2 or 3[/yellow]")


def create_console(*, debug: bool = False, colored: bool = True) -> Console:
    """
    Create a console instance.

    Args:
        debug: Show debug messages.
        colored: Enable colored output.

    Returns:
        Console instance.
    """
    return Console(debug=debug, colored=colored)
