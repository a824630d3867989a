# Repofleet Orphan Disposition
# Prune, adopt or ignore working copies that no source declares

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from repofleet.config.schema import RepoEntry, Source
from repofleet.sync.reconcile import RepoStatus
from repofleet.utils.paths import safe_delete

ConfirmCallback = Callable[[list[str]], bool]


class OrphanAction(str, Enum):
    """What to do with orphaned working copies."""

    SKIP = "skip"
    PRUNE = "prune"
    ADD = "add"


@dataclass
class OrphanOutcome:
    """Result of handling one orphan."""

    name: str
    success: bool
    full_name: Optional[str] = None
    error: Optional[str] = None


@dataclass
class DispositionResult:
    """Result of handling all orphans of a source."""

    action: OrphanAction
    dry_run: bool = False
    cancelled: bool = False
    outcomes: list[OrphanOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed(self) -> list[OrphanOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def config_changed(self) -> bool:
        """Check if the source's repo list was mutated."""
        return self.action == OrphanAction.ADD and not self.dry_run and self.succeeded > 0


def guess_full_name(source: str, repo_name: str) -> str:
    """
    Build "owner/repo" for an orphan from the source's declared owner.

    This is a guess; the remote is not consulted.

    Args:
        source: The source's ``host/owner`` string.
        repo_name: Orphan directory name.
    """
    parts = source.rstrip("/").split("/")
    if len(parts) >= 2:
        return f"{parts[-1]}/{repo_name}"
    return repo_name


class OrphanHandler:
    """
    Executes an orphan decision for one source.

    The decision itself comes from the caller (flag or prompt).
    """

    def __init__(self, source: Source):
        self.source = source

    def handle(
        self,
        action: OrphanAction,
        orphans: Sequence[RepoStatus],
        *,
        force: bool = False,
        dry_run: bool = False,
        confirm: Optional[ConfirmCallback] = None,
    ) -> DispositionResult:
        """
        Apply an action to the orphans.

        Args:
            action: skip, prune or add.
            orphans: Orphaned statuses from reconciliation.
            force: Prune without asking.
            dry_run: Report only, mutate nothing.
            confirm: Called with orphan names before pruning unless forced.
        """
        if action == OrphanAction.PRUNE:
            return self.prune(orphans, force=force, dry_run=dry_run, confirm=confirm)
        if action == OrphanAction.ADD:
            return self.add(orphans, dry_run=dry_run)
        return self.skip(orphans, dry_run=dry_run)

    def prune(
        self,
        orphans: Sequence[RepoStatus],
        *,
        force: bool = False,
        dry_run: bool = False,
        confirm: Optional[ConfirmCallback] = None,
    ) -> DispositionResult:
        """Remove each orphan's directory; one failure doesn't stop the rest."""
        result = DispositionResult(action=OrphanAction.PRUNE, dry_run=dry_run)

        if dry_run:
            result.outcomes = [OrphanOutcome(name=o.name, success=True) for o in orphans]
            return result

        if not force:
            if confirm is None or not confirm([o.name for o in orphans]):
                result.cancelled = True
                return result

        for orphan in orphans:
            try:
                safe_delete(orphan.local_path)
            except OSError as e:
                result.outcomes.append(OrphanOutcome(name=orphan.name, success=False, error=str(e)))
                continue
            result.outcomes.append(OrphanOutcome(name=orphan.name, success=True))

        return result

    def add(self, orphans: Sequence[RepoStatus], *, dry_run: bool = False) -> DispositionResult:
        """Append a guessed entry per orphan to the source's repo list."""
        result = DispositionResult(action=OrphanAction.ADD, dry_run=dry_run)

        for orphan in orphans:
            full_name = guess_full_name(self.source.source, orphan.name)
            if not dry_run:
                self.source.repos.append(RepoEntry(name=full_name))
            result.outcomes.append(OrphanOutcome(name=orphan.name, success=True, full_name=full_name))

        return result

    def skip(self, orphans: Sequence[RepoStatus], *, dry_run: bool = False) -> DispositionResult:
        """Leave orphans in place."""
        return DispositionResult(
            action=OrphanAction.SKIP,
            dry_run=dry_run,
            outcomes=[OrphanOutcome(name=o.name, success=True) for o in orphans],
        )
