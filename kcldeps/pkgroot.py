"""Locating the root of a KCL module (the directory holding ``kcl.mod``)."""

from __future__ import annotations

import os

KCL_MOD_FILE = "kcl.mod"


class PkgRootNotFound(Exception):
    """Raised when no directory holding ``kcl.mod`` encloses the given path."""


def _absolute(path: str) -> str:
    """Return ``path`` made absolute, or an empty string if that is impossible."""
    try:
        return os.path.abspath(path)
    except OSError:
        return ""


def _working_dir(work_dir: str) -> str:
    wd = work_dir
    if not wd:
        try:
            wd = os.getcwd()
        except OSError:
            wd = ""
    return _absolute(wd) or wd


def _has_kcl_mod(directory: str) -> bool:
    return os.path.exists(os.path.join(directory, KCL_MOD_FILE))


def _to_slash(path: str) -> str:
    return path.replace(os.sep, "/") if os.sep != "/" else path


def find_pkg_root(work_dir: str) -> str:
    """Return the nearest directory at or above ``work_dir`` that holds ``kcl.mod``.

    An empty ``work_dir`` means the current directory.
    """
    wd = _working_dir(work_dir)
    if not wd:
        raise PkgRootNotFound("not found pkgroot")

    pkgroot = wd
    while pkgroot:
        if _has_kcl_mod(pkgroot):
            return pkgroot
        parent = os.path.dirname(pkgroot)
        if parent == pkgroot:
            break
        pkgroot = parent
    raise PkgRootNotFound("not found pkgroot")


def good_pkg_path(path: str) -> str:
    """Return the package path of ``path`` relative to its module root, with ``/`` separators.

    A path ending in ``.k`` stands for the package (directory) that holds it.
    """
    path = _absolute(path) or path
    if path.endswith(".k"):
        path = os.path.dirname(path)
    pkg_root = find_pkg_root(path)
    return _to_slash(os.path.relpath(path, pkg_root))


def _expand_env(work_dir: str) -> str:
    start = work_dir.find("${")
    if start < 0:
        return work_dir
    end = work_dir.find("}")
    if end <= start:
        return work_dir
    key = work_dir[start + 2 : end - 1]
    return work_dir.replace("${%s}" % key, os.environ.get(key, ""), 1)


def find_pkg_info(work_dir: str) -> tuple[str, str]:
    """Return ``(pkgroot, pkgpath)`` for ``work_dir``, both with ``/`` separators.

    ``pkgroot`` is the nearest enclosing directory holding ``kcl.mod`` (the
    file-system root itself is not considered) and ``pkgpath`` is ``work_dir``
    relative to it.
    """
    work_dir = _expand_env(work_dir)
    wd = _working_dir(work_dir)
    if not wd:
        raise PkgRootNotFound("not found pkg root")

    pkgroot = wd
    while pkgroot:
        if _has_kcl_mod(pkgroot):
            pkgpath = os.path.relpath(wd, pkgroot)
            return _to_slash(pkgroot), _to_slash(pkgpath)
        pkgroot = os.path.dirname(pkgroot)
        if not pkgroot or pkgroot == "/" or pkgroot == os.path.dirname(pkgroot):
            break
    raise PkgRootNotFound("pkgroot: not found")