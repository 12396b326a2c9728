"""Dependency-listing options and the package file lookup shared by the parsers."""

from __future__ import annotations

import os
import posixpath
import stat
import tomllib
from dataclasses import dataclass

import yaml

KCL_MOD_PATH_ENV = "${KCL_MOD}"

DEFAULT_KCL_MOD = "kcl.mod"
DEFAULT_KCL_YAML = "kcl.yaml"
DEFAULT_PROJECT_YAML = "project.yaml"


class KclFileError(Exception):
    """Raised when a package has no KCL files or its settings file is unusable."""


@dataclass
class Option:
    """Settings for dependency parsing; empty names fall back to the defaults."""

    kcl_mod: str = ""
    kcl_yaml: str = ""
    project_yaml: str = ""
    flag_all: bool = False
    use_abs_path: bool = False
    exclude_external_package: bool = False
    exclude_builtin: bool = False
    ignore_import_error: bool = False

    def merge(self, other: Option) -> None:
        """Take every name ``other`` sets and every flag it turns on."""
        if other.kcl_mod:
            self.kcl_mod = other.kcl_mod
        if other.kcl_yaml:
            self.kcl_yaml = other.kcl_yaml
        if other.project_yaml:
            self.project_yaml = other.project_yaml
        self.flag_all = self.flag_all or other.flag_all
        self.use_abs_path = self.use_abs_path or other.use_abs_path
        self.exclude_external_package = (
            self.exclude_external_package or other.exclude_external_package
        )
        self.exclude_builtin = self.exclude_builtin or other.exclude_builtin
        self.ignore_import_error = self.ignore_import_error or other.ignore_import_error

    def adjust(self) -> None:
        """Fill in default file names where none is set."""
        if not self.kcl_mod:
            self.kcl_mod = DEFAULT_KCL_MOD
        if not self.kcl_yaml:
            self.kcl_yaml = DEFAULT_KCL_YAML
        if not self.project_yaml:
            self.project_yaml = DEFAULT_PROJECT_YAML


def _valid_path(name: str) -> bool:
    if name == ".":
        return True
    return all(part not in ("", ".", "..") for part in name.split("/"))


def _full(root: str | os.PathLike, name: str) -> str:
    return os.path.join(os.fspath(root), *name.split("/"))


def _stat(root: str | os.PathLike, name: str) -> os.stat_result:
    """Stat a slash path below ``root``; raise OSError or ValueError when it cannot."""
    if not _valid_path(name):
        raise ValueError(f"stat {name}: invalid argument")
    return os.stat(_full(root, name))


def _is_file(root: str | os.PathLike, name: str) -> bool:
    try:
        return not stat.S_ISDIR(_stat(root, name).st_mode)
    except (OSError, ValueError):
        return False


def _read_bytes(root: str | os.PathLike, name: str) -> bytes:
    if not _valid_path(name):
        raise ValueError(f"open {name}: invalid argument")
    with open(_full(root, name), "rb") as stream:
        return stream.read()


def _clean(path: str) -> str:
    return posixpath.normpath(path) if path else "."


def _join(*parts: str) -> str:
    joined = "/".join(part for part in parts if part)
    return _clean(joined) if joined else ""


def is_external_pkg(root: str | os.PathLike, pkgpath: str) -> bool:
    """Return True if ``pkgpath`` belongs to a dependency declared in ``kcl.mod`` below ``root``."""
    try:
        data = tomllib.loads(_read_bytes(root, DEFAULT_KCL_MOD).decode("utf-8"))
    except (OSError, ValueError, UnicodeDecodeError):
        return False
    deps = data.get("dependencies")
    if not isinstance(deps, dict):
        return False
    return any(
        pkgpath.startswith(dep) or pkgpath.startswith(dep.replace("-", "_")) for dep in deps
    )


def _settings_files(root: str | os.PathLike, kcl_yaml_path: str) -> list[str]:
    try:
        settings = yaml.safe_load(_read_bytes(root, kcl_yaml_path))
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise KclFileError(f"{kcl_yaml_path}: {exc}") from exc
    if settings is None:
        return []
    if not isinstance(settings, dict):
        raise KclFileError(f"{kcl_yaml_path}: settings must be a mapping")
    config = settings.get("kcl_cli_configs") or {}
    if not isinstance(config, dict):
        raise KclFileError(f"{kcl_yaml_path}: kcl_cli_configs must be a mapping")
    files = config.get("file") or []
    if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
        raise KclFileError(f"{kcl_yaml_path}: file must be a list of strings")
    return files


def _resolve_setting_file(root: str | os.PathLike, path: str, entry: str, kcl_yaml_path: str) -> str:
    if entry.startswith(KCL_MOD_PATH_ENV):
        golden = entry.replace(KCL_MOD_PATH_ENV + "/", "/")
    else:
        golden = _join(path, entry)
    golden = _clean(golden.strip("/"))
    try:
        _stat(root, golden)
    except (OSError, ValueError) as exc:
        raise KclFileError(f"{kcl_yaml_path}: {exc}") from exc
    return golden


def load_k_file_list(root: str | os.PathLike, path: str, opt: Option) -> list[str]:
    """Return the KCL files that make up package ``path`` below ``root``.

    A ``.k`` path stands for itself; ``path.k`` is used when it is a file; a
    ``kcl.yaml`` in the package lists its files; otherwise the public, non-test
    ``.k`` files directly in the directory are taken, sorted by name.
    """
    if path.endswith(".k"):
        return [path]

    if _is_file(root, path + ".k"):
        return [path + ".k"]

    kcl_yaml_path = _join(path, opt.kcl_yaml)
    if _is_file(root, kcl_yaml_path):
        files = [
            _resolve_setting_file(root, path, entry, kcl_yaml_path)
            for entry in _settings_files(root, kcl_yaml_path)
        ]
        if files or opt.ignore_import_error:
            return files
        raise KclFileError("no kcl file")

    k_files: list[str] = []
    if _valid_path(path):
        try:
            with os.scandir(_full(root, path)) as entries:
                names = sorted(
                    entry.name for entry in entries if not entry.is_dir(follow_symlinks=False)
                )
        except OSError:
            names = []
        k_files = [
            _join(path, name)
            for name in names
            if name.endswith(".k") and not name.startswith("_") and not name.endswith("_test.k")
        ]

    if k_files or opt.ignore_import_error:
        return k_files
    raise KclFileError("no kcl file")