"""MD5 helpers for release checksums."""

from __future__ import annotations

import hashlib
import os
import re

_MD5_RE = re.compile(r"[a-f0-9]{32}")


def is_md5_text(s: str) -> bool:
    """Return True if ``s``, stripped of surrounding whitespace, is a lower-case MD5 hex digest."""
    return _MD5_RE.fullmatch(s.strip()) is not None


def md5_file(filename: str | os.PathLike) -> str:
    """Return the hex MD5 digest of a file, or an empty string if it cannot be read."""
    digest = hashlib.md5()
    try:
        with open(filename, "rb") as stream:
            for chunk in iter(lambda: stream.read(65536), b""):
                digest.update(chunk)
    except OSError:
        return ""
    return digest.hexdigest()