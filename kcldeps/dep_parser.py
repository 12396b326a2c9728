"""Import dependencies of every application found in a KCL module tree."""

from __future__ import annotations

import errno
import json
import os
import posixpath
import stat
from collections.abc import Iterator
from enum import IntEnum

from .imports import fix_import_path, is_builtin_pkg, is_plugin_pkg, parse_import
from .options import KclFileError, Option, is_external_pkg, load_k_file_list


class _Color(IntEnum):
    WHITE = 0
    BLACK = 1
    GREY = 2


def _valid_path(name: str) -> bool:
    if name == ".":
        return True
    return all(part not in ("", ".", "..") for part in name.split("/"))


def _full(root: str, name: str) -> str:
    return os.path.join(root, *name.split("/"))


def _is_file(root: str, name: str) -> bool:
    if not _valid_path(name):
        return False
    try:
        return not stat.S_ISDIR(os.stat(_full(root, name)).st_mode)
    except (OSError, ValueError):
        return False


def _read_text(root: str, name: str) -> str:
    if not _valid_path(name):
        raise OSError(errno.EINVAL, "invalid argument", name)
    with open(_full(root, name), "rb") as stream:
        return stream.read().decode("utf-8", errors="replace")


def _dir(path: str) -> str:
    return posixpath.normpath(posixpath.dirname(path) or ".")


def _walk(root: str, relative: str = "") -> Iterator[str]:
    """Yield slash paths below ``root`` in lexical depth-first order, skipping ``.git*``."""
    directory = _full(root, relative) if relative else root
    with os.scandir(directory) as entries:
        listed = sorted(entries, key=lambda entry: entry.name)
    for entry in listed:
        path = f"{relative}/{entry.name}" if relative else entry.name
        if path.startswith(".git"):
            continue
        yield path
        if entry.is_dir(follow_symlinks=False):
            yield from _walk(root, path)


class DepParser:
    """Scans a module tree for applications and builds their package import map.

    Applications are directories holding ``main.k`` or a settings file. A failure
    while loading packages does not raise; it is kept in ``error``.
    """

    def __init__(self, root: str | os.PathLike, *args: Option) -> None:
        self.root = os.fspath(root) or "."
        self.opt = Option()
        for option in args:
            self.opt.merge(option)
        self.opt.adjust()

        self.import_map: dict[str, list[str]] = {}
        self.pkg_files_map: dict[str, list[str]] = {}
        self.error: Exception | None = None

        self._touched_files: list[str] | None = None
        self._touched_dag: dict[str, _Color] = {}
        self._touched_apps: list[str] = []
        self._untouched_apps: list[str] = []

        paths = list(_walk(self.root))
        self.k_list = [
            p
            for p in paths
            if p.endswith(".k")
            and not p.endswith("_test.k")
            and not posixpath.basename(p).startswith("_")
        ]
        self.main_k_list = [p for p in paths if p.endswith("/main.k")]
        self.kcl_yaml_list = [p for p in paths if p.endswith("/" + self.opt.kcl_yaml)]
        project_suffix = "/" + self.opt.project_yaml
        self.project_yaml_dir_list = [
            p.removesuffix(project_suffix) for p in paths if p.endswith(project_suffix)
        ]

        try:
            for entry in [*self.main_k_list, *self.kcl_yaml_list]:
                self._load_import_map(_dir(entry))
        except KclFileError as exc:
            self.error = exc

    def _skipped(self, pkgpath: str) -> bool:
        if is_builtin_pkg(pkgpath) or is_plugin_pkg(pkgpath):
            return True
        return self.opt.exclude_external_package and is_external_pkg(self.root, pkgpath)

    def _load_import_map(self, path: str) -> None:
        pkgpath = _dir(path) if path.endswith(".k") else path
        if self._skipped(pkgpath) or pkgpath in self.import_map:
            return

        k_files = self.pkg_files_map.get(pkgpath)
        if k_files is None:
            try:
                k_files = load_k_file_list(self.root, pkgpath, self.opt)
            except KclFileError as exc:
                raise KclFileError(f"package {pkgpath}: {exc}") from exc
            self.pkg_files_map[pkgpath] = k_files

        for file in k_files:
            try:
                source = _read_text(self.root, file)
            except (OSError, ValueError) as exc:
                raise KclFileError(f"package {pkgpath}: {exc}") from exc
            for import_path in parse_import(source):
                import_path = fix_import_path(file, import_path)
                imports = self.import_map.setdefault(pkgpath, [])
                if import_path in imports:
                    continue
                imports.append(import_path)
                self._load_import_map(import_path)

        if pkgpath in self.import_map:
            self.import_map[pkgpath].sort()

    def _reachable(self, pkgpath: str) -> set[str]:
        seen: set[str] = set()
        pending = [pkgpath]
        while pending:
            current = pending.pop()
            for imported in self.import_map.get(current, ()):
                if imported not in seen:
                    seen.add(imported)
                    pending.append(imported)
        return seen

    def get_app_files(self, pkgpath: str, include_depend_files: bool) -> list[str]:
        """Return the files of ``pkgpath``, or, sorted, those of all it imports too."""
        if not include_depend_files:
            return list(self.pkg_files_map.get(pkgpath, []))
        files: set[str] = set(self.pkg_files_map.get(pkgpath, ()))
        for pkg in self._reachable(pkgpath):
            files.update(self.pkg_files_map.get(pkg, ()))
        return sorted(files)

    def get_app_pkgs(self, pkgpath: str, include_depend_files: bool) -> list[str]:
        """Return the packages ``pkgpath`` imports, directly or (sorted) transitively."""
        if not include_depend_files:
            return list(self.import_map.get(pkgpath, []))
        return sorted(self._reachable(pkgpath))

    def get_touched_apps(self, *args: str) -> tuple[list[str], list[str]]:
        """Split the applications into those affected by the changed files ``args`` and the rest."""
        if not args:
            return [], []
        touched_files = list(args)
        if touched_files == self._touched_files:
            return list(self._touched_apps), list(self._untouched_apps)

        self._touched_files = touched_files
        self._touched_dag = {}
        self._touched_apps = []
        self._untouched_apps = []

        def mark(path: str) -> None:
            self._touched_dag[_dir(path)] = _Color.GREY
            self._touched_dag[path.removesuffix(".k")] = _Color.GREY

        for file in touched_files:
            mark(file)
        for file in touched_files:
            project_dir = self._project_yaml_dir(file)
            if project_dir:
                for k_file in self.k_list:
                    if k_file == project_dir or k_file.startswith(project_dir + "/"):
                        mark(k_file)

        for main_k in self.main_k_list:
            app = _dir(main_k)
            if self._check_pkg_color(app, set()) != _Color.BLACK:
                self._touched_apps.append(app)
            else:
                self._untouched_apps.append(app)
        return list(self._touched_apps), list(self._untouched_apps)

    def _check_pkg_color(self, pkgpath: str, visiting: set[str]) -> _Color:
        if "/" not in pkgpath and "\\" not in pkgpath:
            return _Color.BLACK
        if self._skipped(pkgpath):
            return _Color.BLACK
        color = self._touched_dag.get(pkgpath, _Color.WHITE)
        if color != _Color.WHITE:
            return color
        if pkgpath in visiting:
            return _Color.BLACK
        visiting.add(pkgpath)
        for imported in self.import_map.get(pkgpath, ()):
            if self._check_pkg_color(imported, visiting) != _Color.BLACK:
                self._touched_dag[pkgpath] = _Color.GREY
                return _Color.GREY
        self._touched_dag[pkgpath] = _Color.BLACK
        return _Color.BLACK

    def _project_yaml_dir(self, pkgpath: str) -> str:
        for directory in self.project_yaml_dir_list:
            if pkgpath == directory or pkgpath.startswith(directory + "/"):
                return directory
        return ""

    def is_app(self, pkgpath: str) -> bool:
        """Return True if ``pkgpath`` holds a ``main.k`` or a settings file."""
        return _is_file(self.root, pkgpath + "/main.k") or _is_file(
            self.root, posixpath.normpath(posixpath.join(pkgpath, self.opt.kcl_yaml))
        )

    def get_dep_pkg_list(self, pkgpath: str) -> list[str]:
        """Return the packages ``pkgpath`` imports directly."""
        return list(self.import_map.get(pkgpath, []))

    def get_pkg_file_list(self, pkgpath: str) -> list[str]:
        """Return the KCL files of ``pkgpath``, or nothing if it has none."""
        try:
            return load_k_file_list(self.root, pkgpath, self.opt)
        except KclFileError:
            return []

    def get_pkg_list(self) -> list[str]:
        """Return, sorted, every package that imports something."""
        return sorted(self.import_map)

    def get_import_map_string(self) -> str:
        """Return the import map as indented JSON with sorted keys."""
        return json.dumps(self.import_map, indent=4, sort_keys=True)