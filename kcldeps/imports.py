"""Parsing KCL import statements and resolving them to package/file paths.

Paths handled here are slash-separated and relative to a module root directory;
paths that could not name a file below that root (absolute ones, or ones with
``..`` or empty segments) are treated as absent.
"""

from __future__ import annotations

import os
import posixpath
import stat

STANDARD_SYSTEM_MODULES = frozenset(
    {
        "collection",
        "net",
        "manifests",
        "math",
        "datetime",
        "regex",
        "yaml",
        "json",
        "crypto",
        "base64",
        "units",
        "file",
        "template",
        "runtime",
    }
)


def is_builtin_pkg(pkgpath: str) -> bool:
    """Return True for the standard system modules."""
    return pkgpath in STANDARD_SYSTEM_MODULES


def is_plugin_pkg(pkgpath: str) -> bool:
    """Return True for plugin packages (``kcl_plugin/...`` or ``kcl_plugin.``...)."""
    return pkgpath.startswith("kcl_plugin/") or pkgpath.startswith("kcl_plugin.")


def _clean(path: str) -> str:
    """Lexically clean a slash path; an empty path becomes ``.``."""
    if not path:
        return "."
    cleaned = posixpath.normpath(path)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def _dir(path: str) -> str:
    """Return all but the last element of a slash path, cleaned."""
    return _clean(posixpath.dirname(path))


def _join(*parts: str) -> str:
    """Join non-empty slash path parts and clean the result."""
    joined = "/".join(part for part in parts if part)
    return _clean(joined) if joined else ""


def _valid_path(name: str) -> bool:
    if name == ".":
        return True
    return all(part not in ("", ".", "..") for part in name.split("/"))


def _vfs_stat(root: str | os.PathLike, name: str) -> os.stat_result | None:
    """Stat ``name`` below ``root``; None if it is invalid or missing."""
    if not _valid_path(name):
        return None
    try:
        return os.stat(os.path.join(os.fspath(root), *name.split("/")))
    except (OSError, ValueError):
        return None


def _vfs_is_dir(root: str | os.PathLike, name: str) -> bool:
    info = _vfs_stat(root, name)
    return info is not None and stat.S_ISDIR(info.st_mode)


def _vfs_is_file(root: str | os.PathLike, name: str) -> bool:
    info = _vfs_stat(root, name)
    return info is not None and not stat.S_ISDIR(info.st_mode)


def _long_string_opener(line_code: str) -> str:
    """Return the delimiter still open after a line starting a long string, or ''."""
    for delimiter in ('"""', "'''"):
        if line_code.startswith(delimiter):
            if line_code[len(delimiter):].endswith(delimiter):
                return ""
            return delimiter
    raise ValueError("not a long string")


def parse_import(code: str) -> list[str]:
    """Return the sorted, distinct import paths of the leading import block of ``code``.

    Comments, blank lines and string literals before the imports are skipped;
    the first other statement ends the block.
    """
    found: set[str] = set()
    open_delimiter = ""
    for line in code.split("\n"):
        line_code = line.strip()
        hash_index = line_code.find("#")
        if hash_index >= 0:
            line_code = line_code[:hash_index].strip()
        if not line_code:
            continue

        if open_delimiter:
            if line_code.endswith(open_delimiter):
                open_delimiter = ""
            continue
        if line_code.startswith(('"""', "'''")):
            open_delimiter = _long_string_opener(line_code)
            continue
        if line_code.startswith(('"', "'")):
            continue

        fields = line_code.split()
        if not fields[0].startswith("import"):
            break
        if len(fields) >= 2:
            found.add(fields[1].strip("'\""))
    return sorted(found)


def fix_import_path(path: str, import_path: str) -> str:
    """Turn an import path written in file ``path`` into a slash package/file path.

    Absolute imports ``a.b`` become ``a/b``; relative imports are resolved against
    the package of ``path``, leaving ``..`` segments where they climb above the root.
    """
    if not import_path.startswith("."):
        return import_path.replace(".", "/")

    pkgpath = _dir(path) if path.endswith(".k") else path

    stripped = import_path.lstrip(".")
    dot_count = len(import_path) - len(stripped)
    target = stripped.replace(".", "/")

    if dot_count == 1:
        return f"{pkgpath}/{target}"

    parts = pkgpath.split("/")
    ups = dot_count - 1
    if ups < len(parts):
        return "/".join(parts[: len(parts) - ups] + [target])
    return pkgpath + "/.." * ups + "/" + target


def fix_path(root: str | os.PathLike, path: str) -> str:
    """Resolve ``path`` below ``root`` to a package directory or a ``.k`` file path.

    A ``.k`` path or an existing directory is kept; otherwise ``path.k`` is used
    if that file exists; failing both, ``path`` is returned unchanged.
    """
    if path.endswith(".k"):
        return path
    if _vfs_is_dir(root, path):
        return path
    if _vfs_is_file(root, path + ".k"):
        return path + ".k"
    return path


def should_ignore(name: str) -> bool:
    """Return True for non-KCL files, private ``_x.k`` files and ``x_test.k`` files."""
    return not name.endswith(".k") or name.startswith("_") or name.endswith("_test.k")


def list_k_files(root: str | os.PathLike, path: str) -> list[str]:
    """List the KCL files ``path`` stands for, below ``root``.

    A ``.k`` path is returned alone; a directory yields the KCL files directly in
    it (sorted, ignoring private and test files); otherwise ``path.k`` if it is a
    file; otherwise nothing.
    """
    if path.endswith(".k"):
        return [path]

    if _vfs_is_dir(root, path):
        directory = os.path.join(os.fspath(root), *path.split("/"))
        try:
            names = sorted(os.listdir(directory))
        except OSError:
            names = []
        return [
            _join(path, name)
            for name in names
            if not os.path.isdir(os.path.join(directory, name)) and not should_ignore(name)
        ]

    if _vfs_is_file(root, path + ".k"):
        return [path + ".k"]
    return []