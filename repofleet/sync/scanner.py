# Repofleet Local State Scanner
# Discovers working copies directly under a source's root

from pathlib import Path

from repofleet.git.operations import is_git_repo

HIDDEN_PREFIX = "."


def scan_local_repos(root: Path) -> dict[str, bool]:
    """
    Find working copies among the immediate subdirectories of root.

    Hidden entries are skipped; a directory counts only if it holds a
    .git directory. Entries are returned sorted by name.

    Args:
        root: Source root directory.

    Returns:
        Dict of basename to True for every recognized working copy.

    Raises:
        FileNotFoundError: If root doesn't exist.
        NotADirectoryError: If root is a file.
    """
    repos: dict[str, bool] = {}
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if entry.name.startswith(HIDDEN_PREFIX):
            continue
        if entry.is_dir() and is_git_repo(entry):
            repos[entry.name] = True
    return repos


def scan_or_empty(root: Path) -> dict[str, bool]:
    """Scan root, treating a missing root as having no working copies."""
    try:
        return scan_local_repos(root)
    except FileNotFoundError:
        return {}
