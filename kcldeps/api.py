"""High-level queries over the import dependencies of a KCL module."""

from __future__ import annotations

from .graph import DepOptions, ImportDepParser
from .imports import is_builtin_pkg
from .options import Option, is_external_pkg
from .pkgroot import find_pkg_info
from .single_app import SingleAppDepParser


def list_dep_files(work_dir: str, opt: Option | None = None) -> list[str]:
    """Return the files the application at ``work_dir`` is made of.

    With ``opt.flag_all`` the files of every package it depends on are included;
    with ``opt.use_abs_path`` each path is prefixed by the module root.
    """
    opt = opt if opt is not None else Option()
    pkgroot, pkgpath = find_pkg_info(work_dir)
    parser = SingleAppDepParser(pkgroot, opt)
    app_files = parser.get_app_files(pkgpath, opt.flag_all)
    if opt.use_abs_path:
        return [f"{pkgroot}/{file}" for file in app_files]
    return list(app_files)


def list_dep_packages(work_dir: str, opt: Option | None = None) -> list[str]:
    """Return the packages the application at ``work_dir`` depends on.

    Built-in and external packages are left out when the options ask for it.
    """
    opt = opt if opt is not None else Option()
    pkgroot, pkgpath = find_pkg_info(work_dir)
    parser = SingleAppDepParser(pkgroot, opt)
    packages = []
    for pkg in parser.get_app_pkgs(pkgpath, opt.flag_all):
        if opt.exclude_builtin and is_builtin_pkg(pkg):
            continue
        if opt.exclude_external_package and is_external_pkg(pkgroot, pkg):
            continue
        packages.append(pkg)
    return packages


def list_upstream_files(work_dir: str, opt: DepOptions | None = None) -> list[str]:
    """Return, sorted, the files and packages that ``opt.files`` import, directly or not.

    An empty list comes back when no files are given.
    """
    if opt is None or not opt.files:
        return []
    pkgroot, _ = find_pkg_info(work_dir)
    return ImportDepParser(pkgroot, opt).upstream_files()


def list_downstream_files(work_dir: str, opt: DepOptions | None = None) -> list[str]:
    """Return, sorted, the files and packages that depend on ``opt.upstreams``.

    Only the part of the module reachable from ``opt.files`` is inspected; an empty
    list comes back when either list is empty.
    """
    if opt is None or not opt.files or not opt.upstreams:
        return []
    pkgroot, _ = find_pkg_info(work_dir)
    return ImportDepParser(pkgroot, opt).downstream_files()