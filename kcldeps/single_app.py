"""Import dependencies of one application, parsed on demand."""

from __future__ import annotations

import errno
import os

from .imports import fix_import_path, is_builtin_pkg, is_plugin_pkg, parse_import
from .options import KclFileError, Option, is_external_pkg, load_k_file_list


def _valid_path(name: str) -> bool:
    if name == ".":
        return True
    return all(part not in ("", ".", "..") for part in name.split("/"))


def _read_text(root: str, name: str) -> str:
    if not _valid_path(name):
        raise OSError(errno.EINVAL, "invalid argument", name)
    with open(os.path.join(root, *name.split("/")), "rb") as stream:
        return stream.read().decode("utf-8", errors="replace")


class SingleAppDepParser:
    """Parses the import tree of the application last asked for and caches it."""

    def __init__(self, root: str | os.PathLike, *args: Option) -> None:
        self.root = os.fspath(root) or "."
        self.opt = Option()
        for option in args:
            self.opt.merge(option)
        self.opt.adjust()

        self._app_pkgpath = ""
        self.import_map: dict[str, list[str]] = {}
        self.pkg_files_map: dict[str, list[str]] = {}
        self._all_files: list[str] = []
        self._error: Exception | None = None

    def get_app_files(self, app_pkgpath: str, include_depend_files: bool) -> list[str]:
        """Return the files of the application, or, sorted, those of everything it needs."""
        self._parse_once(app_pkgpath)
        if include_depend_files:
            return list(self._all_files)
        return list(self.pkg_files_map.get(app_pkgpath, []))

    def get_app_pkgs(self, app_pkgpath: str, include_depend_files: bool) -> list[str]:
        """Return the packages the application imports, or, sorted, every package scanned."""
        self._parse_once(app_pkgpath)
        if include_depend_files:
            return sorted(self.import_map)
        return list(self.import_map.get(app_pkgpath, []))

    def _parse_once(self, app_pkgpath: str) -> None:
        if self._app_pkgpath == app_pkgpath:
            if self._error is not None:
                raise self._error
            return

        self._app_pkgpath = app_pkgpath
        self.import_map = {}
        self.pkg_files_map = {}
        self._all_files = []
        self._error = None

        try:
            self._scan_app_files(app_pkgpath)
        except (KclFileError, OSError) as exc:
            self._error = exc
            raise

        self._all_files = sorted(
            {file for files in self.pkg_files_map.values() for file in files}
        )

    def _scan_app_files(self, pkgpath: str) -> None:
        if is_builtin_pkg(pkgpath) or is_plugin_pkg(pkgpath):
            return
        if self.opt.exclude_external_package and is_external_pkg(self.root, pkgpath):
            return
        if pkgpath in self.pkg_files_map:
            return

        try:
            k_files = load_k_file_list(self.root, pkgpath, self.opt)
        except KclFileError as exc:
            raise KclFileError(f"package {pkgpath}: {exc}") from exc
        self.pkg_files_map[pkgpath] = k_files

        imports: set[str] = set()
        for file in k_files:
            source = _read_text(self.root, file)
            imports.update(fix_import_path(file, path) for path in parse_import(source))

        import_list = sorted(imports)
        self.import_map[pkgpath] = import_list
        for import_path in import_list:
            self._scan_app_files(import_path)