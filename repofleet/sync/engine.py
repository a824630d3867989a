# Repofleet Sync Engine
# Coordinates resolve, reconcile, orphan handling and cloning per source

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from repofleet.config.loader import is_remote, save_source
from repofleet.config.schema import RepoEntry, RepofleetConfig, Source
from repofleet.connectors.credentials import Credentials
from repofleet.errors import ConfigError, RepofleetError
from repofleet.git.operations import is_git_repo
from repofleet.sync.executor import (
    DEFAULT_WORKERS,
    ExecutionEngine,
    ExecutionJob,
    ExecutionOutcome,
    Operation,
)
from repofleet.sync.orphans import DispositionResult, OrphanAction, OrphanHandler
from repofleet.sync.reconcile import RepoStatus, has_changes, orphaned, reconcile, to_create
from repofleet.sync.resolver import StrategyResolver
from repofleet.sync.scanner import scan_local_repos, scan_or_empty

if TYPE_CHECKING:
    from repofleet.output.console import Console

JobRunner = Callable[[ExecutionJob], None]


@dataclass
class SourceError:
    """A source that was skipped because of an error."""

    source: str
    error: str


@dataclass
class SyncResult:
    """Result of a complete sync run."""

    cloned: int = 0
    pruned: int = 0
    added: int = 0
    skipped: int = 0
    failures: list[ExecutionOutcome] = field(default_factory=list)
    source_errors: list[SourceError] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def has_issues(self) -> bool:
        return bool(self.failures or self.source_errors)


@dataclass
class PullResult:
    """Result of a pull run across all sources."""

    updated: int = 0
    failures: list[ExecutionOutcome] = field(default_factory=list)
    source_errors: list[SourceError] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)


@dataclass
class SourceStatus:
    """Reconciliation of one source, as shown by diff."""

    name: str
    statuses: list[RepoStatus]


class SyncEngine:
    """
    Main synchronization engine.

    Runs every source in turn. Errors scoped to one source are reported
    as warnings and the next source proceeds.
    """

    def __init__(
        self,
        config: RepofleetConfig,
        credentials: Credentials,
        console: Console,
        *,
        config_path: Optional[str | Path] = None,
        resolver: Optional[StrategyResolver] = None,
        runner: Optional[JobRunner] = None,
        stop: Optional[threading.Event] = None,
    ):
        """
        Initialize sync engine.

        Args:
            config: Loaded configuration.
            credentials: Token snapshot.
            console: Output and prompts.
            config_path: Location the configuration was loaded from.
            resolver: Optional resolver (creates one from credentials if not provided).
            runner: Optional job runner for the execution engine.
            stop: Stop signal shared with the execution engine.
        """
        self.config = config
        self.console = console
        self.config_path = config_path
        self.resolver = resolver or StrategyResolver(credentials)
        self.runner = runner
        self.stop = stop or threading.Event()

    def compute_status(self, source: Source) -> list[RepoStatus]:
        """
        Resolve and reconcile a source without changing anything.

        Raises:
            RepofleetError: If the source can't be resolved.
            OSError: If the root can't be scanned.
        """
        entries = self.resolver.resolve(source)
        return self._reconcile(source, entries)

    def _reconcile(self, source: Source, entries: list[RepoEntry]) -> list[RepoStatus]:
        root = Path(source.local_path)
        overrides = [
            entry.resolved_local_path(root)
            for entry in entries
            if entry.has_custom_local_path and is_git_repo(entry.resolved_local_path(root))
        ]
        return reconcile(root, entries, scan_or_empty(root), existing_overrides=overrides)

    def diff(self) -> list[SourceStatus]:
        """Compute the status of every source, skipping failing ones."""
        results: list[SourceStatus] = []
        for source in self.config.sources:
            try:
                statuses = self.compute_status(source)
            except (RepofleetError, OSError) as e:
                self.console.print_warning(f"skipping source source={source.name} error={e}")
                continue
            results.append(SourceStatus(name=source.name, statuses=statuses))
        return results

    def sync(
        self,
        *,
        prune: bool = False,
        add: bool = False,
        force: bool = False,
        jobs: int = DEFAULT_WORKERS,
        dry_run: bool = False,
    ) -> SyncResult:
        """
        Synchronize all sources.

        Args:
            prune: Delete orphans without asking which action to take.
            add: Add orphans to the configuration without asking.
            force: Skip confirmation prompts.
            jobs: Number of parallel clone workers.
            dry_run: Report what would happen without changing anything.

        Returns:
            SyncResult with counters across all sources.
        """
        result = SyncResult()

        for source in self.config.sources:
            if self.stop.is_set():
                break
            try:
                self.sync_source(source, result, prune=prune, add=add, force=force, jobs=jobs, dry_run=dry_run)
            except (RepofleetError, OSError) as e:
                self.console.print_warning(f"skipping source source={source.name} error={e}")
                result.source_errors.append(SourceError(source=source.name, error=str(e)))

        return result

    def sync_source(
        self,
        source: Source,
        result: SyncResult,
        *,
        prune: bool = False,
        add: bool = False,
        force: bool = False,
        jobs: int = DEFAULT_WORKERS,
        dry_run: bool = False,
    ) -> None:
        """Synchronize one source, accumulating into result."""
        entries = self.resolver.resolve(source)
        self.console.print_debug(f"resolved repos source={source.name} count={len(entries)}")

        root = Path(source.local_path)
        if not root.exists():
            if dry_run:
                self.console.print_info(f"would create directory path={root}")
            else:
                if not force and not self.console.confirm_create_dir(root):
                    self.console.print_info(f"skipping source source={source.name} reason=directory not created")
                    result.skipped += 1
                    return
                root.mkdir(parents=True, exist_ok=True)
                self.console.print_info(f"created directory path={root}")

        statuses = self._reconcile(source, entries)
        if not has_changes(statuses):
            self.console.print_info(f"source is up to date source={source.name}")
            return

        self.console.print_diff(source.name, statuses)

        orphans = orphaned(statuses)
        if orphans:
            disposition = self._handle_orphans(source, orphans, prune=prune, add=add, force=force, dry_run=dry_run)
            self._record_disposition(source, disposition, result)

        missing = to_create(statuses)
        if not missing:
            return

        if dry_run:
            for status in missing:
                self.console.print_info(f"would clone repo={status.full_name} path={status.local_path}")
            return

        clone_jobs = [
            ExecutionJob(
                name=status.full_name or status.name,
                path=status.local_path,
                operation=Operation.CLONE,
                url=source.repo_url(status.full_name or status.name),
                branch=source.branch,
                private_key=source.effective_private_key,
            )
            for status in missing
        ]
        outcomes = self._execute(clone_jobs, jobs, "Cloning repos")

        cloned = sum(1 for o in outcomes if o.success)
        result.cloned += cloned
        result.failures.extend(o for o in outcomes if not o.success)
        for outcome in outcomes:
            if not outcome.success:
                self.console.print_error(f"failed to clone repo={outcome.name} error={outcome.error}")
        if cloned:
            self.console.print_info(f"cloned repos count={cloned}")

    def _handle_orphans(
        self,
        source: Source,
        orphans: list[RepoStatus],
        *,
        prune: bool,
        add: bool,
        force: bool,
        dry_run: bool,
    ) -> DispositionResult:
        if prune:
            action = OrphanAction.PRUNE
        elif add:
            action = OrphanAction.ADD
        elif dry_run:
            action = OrphanAction.SKIP
        else:
            action = self.console.choose_orphan_action()

        handler = OrphanHandler(source)
        return handler.handle(
            action,
            orphans,
            force=force,
            dry_run=dry_run,
            confirm=self.console.confirm_prune,
        )

    def _record_disposition(self, source: Source, disposition: DispositionResult, result: SyncResult) -> None:
        if disposition.cancelled:
            self.console.print_info("prune cancelled")
            return

        for outcome in disposition.outcomes:
            if disposition.action == OrphanAction.PRUNE:
                if disposition.dry_run:
                    self.console.print_info(f"would prune repo={outcome.name}")
                elif outcome.success:
                    self.console.print_info(f"removed repo={outcome.name}")
                    result.pruned += 1
                else:
                    self.console.print_error(f"failed to remove repo={outcome.name} error={outcome.error}")
            elif disposition.action == OrphanAction.ADD:
                if disposition.dry_run:
                    self.console.print_info(f"would add to config repo={outcome.full_name}")
                else:
                    self.console.print_info(f"added to config repo={outcome.full_name}")
                    result.added += 1

        if disposition.action == OrphanAction.SKIP:
            result.skipped += len(disposition.outcomes)

        if disposition.config_changed:
            self._save(source)

    def _save(self, source: Source) -> None:
        if self.config_path is not None and is_remote(self.config_path):
            self.console.print_warning(f"remote config not saved source={source.name}")
            return
        try:
            path = save_source(self.config, source, Path(self.config_path) if self.config_path else None)
        except (ConfigError, OSError) as e:
            self.console.print_error(f"failed to save config error={e}")
            return
        self.console.print_info(f"config saved path={path}")

    def pull(self, *, jobs: int = DEFAULT_WORKERS, confirm: Optional[Callable[[int], bool]] = None) -> PullResult:
        """
        Pull every working copy of every source.

        Sources whose root is missing or unreadable are skipped.

        Args:
            jobs: Number of parallel pull workers.
            confirm: Called with the job count before pulling; declining pulls nothing.
        """
        result = PullResult()
        pull_jobs: list[ExecutionJob] = []

        for source in self.config.sources:
            root = Path(source.local_path)
            try:
                local = scan_local_repos(root)
            except FileNotFoundError:
                self.console.print_warning(f"skipping source - directory does not exist source={source.name} path={root}")
                result.source_errors.append(SourceError(source=source.name, error=f"directory does not exist: {root}"))
                continue
            except OSError as e:
                self.console.print_warning(f"skipping source - failed to scan local repos source={source.name} error={e}")
                result.source_errors.append(SourceError(source=source.name, error=str(e)))
                continue

            self.console.print_info(f"found repos to pull source={source.name} count={len(local)}")
            for name in local:
                pull_jobs.append(
                    ExecutionJob(
                        name=name,
                        path=root / name,
                        operation=Operation.PULL,
                        private_key=source.effective_private_key,
                    )
                )

        if not pull_jobs:
            self.console.print_info("no repos to pull")
            return result

        if confirm is not None and not confirm(len(pull_jobs)):
            self.console.print_info("pull cancelled")
            return result

        outcomes = self._execute(pull_jobs, jobs, "Pulling repos")
        result.updated = sum(1 for o in outcomes if o.success)
        result.failures = [o for o in outcomes if not o.success]
        for outcome in result.failures:
            self.console.print_error(f"failed to pull repo={outcome.name} error={outcome.error}")
        return result

    def _execute(self, jobs: list[ExecutionJob], workers: int, description: str) -> list[ExecutionOutcome]:
        engine = ExecutionEngine(self.runner, workers=workers)
        with self.console.progress(description, total=len(jobs)) as advance:
            return engine.execute(jobs, on_progress=advance, stop=self.stop)
