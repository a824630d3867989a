# Repofleet Git Operations
# Git command execution for cloning and updating working copies

import os
import shlex
import subprocess
from pathlib import Path
from typing import Optional

GIT_MARKER = ".git"


class GitError(Exception):
    """Exception raised for git operation errors."""

    def __init__(self, message: str, returncode: int = 1, stderr: str = ""):
        self.message = message
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)

    def __str__(self) -> str:
        if self.stderr:
            return f"{self.message}\n{self.stderr}"
        return self.message


def ssh_command(private_key: str) -> str:
    """Build the GIT_SSH_COMMAND value for a private key."""
    return f"ssh -i {shlex.quote(private_key)} -o IdentitiesOnly=yes -o StrictHostKeyChecking=accept-new"


def _git_env(private_key: Optional[str]) -> Optional[dict[str, str]]:
    if not private_key:
        return None
    env = dict(os.environ)
    env["GIT_SSH_COMMAND"] = ssh_command(private_key)
    return env


def _run_git(
    *args: str,
    cwd: Optional[Path] = None,
    check: bool = True,
    private_key: Optional[str] = None,
) -> subprocess.CompletedProcess[str]:
    """
    Run a git command.

    Args:
        *args: Git command arguments.
        cwd: Working directory.
        check: Whether to raise on non-zero exit.
        private_key: Optional SSH key used for remote operations.

    Returns:
        CompletedProcess with result.

    Raises:
        GitError: If command fails and check is True.
    """
    cmd = ["git", *args]
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            env=_git_env(private_key),
        )
    except FileNotFoundError:
        raise GitError("git command not found. Is git installed?")

    if check and result.returncode != 0:
        raise GitError(
            f"git {args[0]} failed (exit {result.returncode})",
            returncode=result.returncode,
            stderr=result.stdout.strip() if result.stdout else "",
        )
    return result


def is_git_repo(path: Path) -> bool:
    """
    Check if a directory is a working copy.

    Args:
        path: Directory to check.

    Returns:
        True if the directory contains a .git directory.
    """
    return (path / GIT_MARKER).is_dir()


def clone(
    url: str,
    path: Path,
    *,
    branch: Optional[str] = None,
    private_key: Optional[str] = None,
) -> None:
    """
    Clone a repository.

    Args:
        url: Repository URL.
        path: Destination directory; parents are created.
        branch: Optional branch to checkout.
        private_key: Optional SSH private key.

    Raises:
        GitError: If the clone fails.
    """
    if not url:
        raise GitError("URL is required")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise GitError(f"failed to create parent directory: {e}")

    args = ["clone"]
    if branch:
        args.extend(["--branch", branch])
    args.extend([url, str(path)])

    _run_git(*args, private_key=private_key)


def pull(path: Path, *, private_key: Optional[str] = None) -> None:
    """
    Pull changes from the tracked remote.

    Args:
        path: Working copy path.
        private_key: Optional SSH private key.

    Raises:
        GitError: If the pull fails.
    """
    _run_git("pull", cwd=path, private_key=private_key)

