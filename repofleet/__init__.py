"""Repofleet - keep local working copies in line with declared repositories.

Reconciles configured repository sources from GitHub, Gitea and Bitbucket
against the working copies on disk, then clones, prunes or updates them
in parallel.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "RepofleetConfig",
    "Source",
    "RepoEntry",
    "load_config",
    "SyncEngine",
    "SyncResult",
    "PullResult",
    "reconcile",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("RepofleetConfig", "Source", "RepoEntry", "load_config"):
        from repofleet import config

        return getattr(config, name)
    if name in ("SyncEngine", "SyncResult", "PullResult", "reconcile"):
        from repofleet import sync

        return getattr(sync, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
