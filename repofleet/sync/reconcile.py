# Repofleet Reconciler
# Classifies declared repositories against the working copies on disk

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from repofleet.config.schema import RepoEntry


class StatusType(str, Enum):
    """Reconciliation classification."""

    TO_CREATE = "to_create"  # Declared, missing on disk
    UNCHANGED = "unchanged"  # Declared and present
    ORPHANED = "orphaned"  # On disk, not declared


@dataclass(frozen=True)
class RepoStatus:
    """Reconciliation result for one repository."""

    name: str
    full_name: str | None
    local_path: Path
    status: StatusType
    in_config: bool
    exists_local: bool

    @property
    def symbol(self) -> str:
        return {
            StatusType.TO_CREATE: "+",
            StatusType.ORPHANED: "-",
            StatusType.UNCHANGED: " ",
        }[self.status]


def reconcile(
    root: Path,
    entries: Iterable[RepoEntry],
    local_state: Mapping[str, bool],
    *,
    existing_overrides: Iterable[Path] = (),
) -> list[RepoStatus]:
    """
    Classify declared entries and local working copies.

    Declared entries come first in declaration order, then orphans in
    the order of ``local_state``. A basename is never emitted twice; for
    repeated declarations the first one wins.

    Args:
        root: Source root directory.
        entries: Resolved repository entries.
        local_state: Basenames of working copies found under root.
        existing_overrides: Override paths known to hold a working copy.

    Returns:
        Ordered list of RepoStatus.
    """
    overrides_present = set(existing_overrides)
    declared: set[str] = set()
    statuses: list[RepoStatus] = []

    for entry in entries:
        name = entry.basename
        if name in declared:
            continue
        declared.add(name)

        local_path = entry.resolved_local_path(root)
        if entry.has_custom_local_path:
            exists = local_path in overrides_present
        else:
            exists = bool(local_state.get(name))

        statuses.append(
            RepoStatus(
                name=name,
                full_name=entry.name,
                local_path=local_path,
                status=StatusType.UNCHANGED if exists else StatusType.TO_CREATE,
                in_config=True,
                exists_local=exists,
            )
        )

    for name, present in local_state.items():
        if not present or name in declared:
            continue
        statuses.append(
            RepoStatus(
                name=name,
                full_name=None,
                local_path=root / name,
                status=StatusType.ORPHANED,
                in_config=False,
                exists_local=True,
            )
        )

    return statuses


def to_create(statuses: Iterable[RepoStatus]) -> list[RepoStatus]:
    return [s for s in statuses if s.status == StatusType.TO_CREATE]


def orphaned(statuses: Iterable[RepoStatus]) -> list[RepoStatus]:
    return [s for s in statuses if s.status == StatusType.ORPHANED]


def has_changes(statuses: Iterable[RepoStatus]) -> bool:
    """Check if anything needs cloning or is orphaned."""
    return any(s.status != StatusType.UNCHANGED for s in statuses)
