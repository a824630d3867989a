# Repofleet Path Utilities
# Path expansion and safe filesystem operations

import os
import shutil
import tempfile
from pathlib import Path


def expand_user_path(path: str | Path) -> str:
    """
    Expand ~ and environment variables in a path.

    Args:
        path: Path string or Path object.

    Returns:
        Expanded path string (not resolved, so relative paths stay relative).
    """
    path_str = str(path)
    # Expand ~ first, then environment variables
    path_str = os.path.expanduser(path_str)
    path_str = os.path.expandvars(path_str)
    return path_str


def ensure_dir(path: Path) -> Path:
    """
    Ensure directory exists, creating if necessary.

    Args:
        path: Directory path.

    Returns:
        The path that was ensured.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_delete(path: Path) -> None:
    """
    Delete a file or directory tree.

    Args:
        path: Path to delete.

    Raises:
        FileNotFoundError: If path doesn't exist.
    """
    if not path.exists() and not path.is_symlink():
        raise FileNotFoundError(f"Path does not exist: {path}")

    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def atomic_write(path: Path, content: str | bytes, *, encoding: str = "utf-8") -> None:
    """
    Atomically write content to a file.

    Args:
        path: Target file path.
        content: Text or bytes to write.
        encoding: Encoding used for text content.
    """
    ensure_dir(path.parent)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        if isinstance(content, str):
            with os.fdopen(fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
        # Atomic rename
        os.replace(temp_path, path)
    except Exception:
        # Cleanup on failure
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise
