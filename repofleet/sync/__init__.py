# Repofleet Sync Module
# Resolution, reconciliation and parallel execution

from repofleet.sync.engine import PullResult, SourceError, SourceStatus, SyncEngine, SyncResult
from repofleet.sync.executor import (
    DEFAULT_WORKERS,
    ExecutionEngine,
    ExecutionJob,
    ExecutionOutcome,
    GitJobRunner,
    Operation,
)
from repofleet.sync.orphans import DispositionResult, OrphanAction, OrphanHandler, OrphanOutcome, guess_full_name
from repofleet.sync.reconcile import RepoStatus, StatusType, has_changes, orphaned, reconcile, to_create
from repofleet.sync.resolver import StrategyResolver, filter_by_pattern
from repofleet.sync.scanner import scan_local_repos, scan_or_empty

__all__ = [
    # Engine
    "SyncEngine",
    "SyncResult",
    "PullResult",
    "SourceError",
    "SourceStatus",
    # Execution
    "ExecutionEngine",
    "ExecutionJob",
    "ExecutionOutcome",
    "GitJobRunner",
    "Operation",
    "DEFAULT_WORKERS",
    # Orphans
    "OrphanAction",
    "OrphanHandler",
    "OrphanOutcome",
    "DispositionResult",
    "guess_full_name",
    # Reconciliation
    "RepoStatus",
    "StatusType",
    "reconcile",
    "to_create",
    "orphaned",
    "has_changes",
    # Resolution
    "StrategyResolver",
    "filter_by_pattern",
    # Scanning
    "scan_local_repos",
    "scan_or_empty",
]
