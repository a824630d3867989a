# Repofleet Utilities Module
# Helper functions for path handling

from repofleet.utils.paths import (
    atomic_write,
    ensure_dir,
    expand_user_path,
    safe_delete,
)

__all__ = [
    "expand_user_path",
    "ensure_dir",
    "safe_delete",
    "atomic_write",
]
