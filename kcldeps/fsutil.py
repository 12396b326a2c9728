"""Small file-system predicates."""

from __future__ import annotations

import os
import stat


def _lstat_mode(path: str | os.PathLike) -> int | None:
    try:
        return os.lstat(path).st_mode
    except (OSError, ValueError):
        return None


def file_exists(path: str | os.PathLike) -> bool:
    """Return True if ``path`` exists and is not a directory (links are not followed)."""
    mode = _lstat_mode(path)
    return mode is not None and not stat.S_ISDIR(mode)


def dir_exists(path: str | os.PathLike) -> bool:
    """Return True if ``path`` exists and is a directory (links are not followed)."""
    mode = _lstat_mode(path)
    return mode is not None and stat.S_ISDIR(mode)