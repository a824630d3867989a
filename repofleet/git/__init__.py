# Repofleet Git Module
# Git operations for working copy management

from repofleet.git.operations import (
    GitError,
    clone,
    is_git_repo,
    pull,
)

__all__ = [
    "GitError",
    "clone",
    "pull",
    "is_git_repo",
]
