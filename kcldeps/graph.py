"""Import graph of a KCL work directory, walked upstream and downstream."""

from __future__ import annotations

import os
import posixpath
from collections.abc import Callable
from dataclasses import dataclass, field

from .imports import fix_import_path, fix_path, list_k_files, parse_import, should_ignore

WalkFunc = Callable[[str], bool]


@dataclass
class DepOptions:
    """Files that bound the inspection, and the changed paths to list downstreams of.

    Every value is a file or package path relative to the work directory.
    """

    files: list[str] = field(default_factory=list)
    upstreams: list[str] = field(default_factory=list)


@dataclass
class ImportGraph:
    """Import and package-membership indexes, with their inversions.

    ``import_index`` maps a file to the paths it imports; ``file_index`` maps a
    package to its files; the inverted indexes map back.
    """

    import_index: dict[str, set[str]] = field(default_factory=dict)
    import_index_inverted: dict[str, set[str]] = field(default_factory=dict)
    file_index: dict[str, set[str]] = field(default_factory=dict)
    file_index_inverted: dict[str, str] = field(default_factory=dict)
    processed: set[str] = field(default_factory=set)

    def walk_upstream(self, start: str, walk_func: WalkFunc) -> None:
        """Visit everything ``start`` imports, directly or not.

        ``walk_func`` returns True for a path already walked, which stops descent there.
        """
        for nxt in sorted(self.import_index.get(start, ())):
            if walk_func(nxt):
                continue
            files = self.file_index.get(nxt)
            if files is not None:
                for file in sorted(files):
                    if walk_func(file):
                        continue
                    self.walk_upstream(file, walk_func)
            else:
                self.walk_upstream(nxt, walk_func)

    def walk_downstream(self, start: str, walk_func: WalkFunc) -> None:
        """Visit every file importing ``start`` and every package containing it, recursively."""
        nexts = set(self.import_index_inverted.get(start, ()))
        pkg = self.file_index_inverted.get(start)
        if pkg is not None:
            nexts.add(pkg)
        for nxt in sorted(nexts):
            if walk_func(nxt):
                continue
            self.walk_downstream(nxt, walk_func)


def _valid_path(name: str) -> bool:
    if name == ".":
        return True
    return all(part not in ("", ".", "..") for part in name.split("/"))


def _full(root: str, name: str) -> str:
    return os.path.join(root, *name.split("/"))


def _dir(path: str) -> str:
    return posixpath.normpath(posixpath.dirname(path))


def _base(path: str) -> str:
    trimmed = path.rstrip("/")
    return posixpath.basename(trimmed) if trimmed else ("/" if path else ".")


def _check_exists(root: str, name: str) -> None:
    if not _valid_path(name):
        raise ValueError(f"invalid file path: stat {name}: invalid argument")
    try:
        os.stat(_full(root, name))
    except FileNotFoundError as exc:
        raise FileNotFoundError(
            f"invalid file path: stat {name}: no such file or directory"
        ) from exc
    except OSError as exc:
        raise OSError(f"invalid file path: stat {name}: {exc.strerror or exc}") from exc


def _is_missing(root: str, name: str) -> bool:
    if not _valid_path(name):
        return False
    try:
        os.stat(_full(root, name))
    except FileNotFoundError:
        return True
    except OSError:
        return False
    return False


def _read_text(root: str, name: str) -> str:
    if not _valid_path(name):
        raise ValueError(f"open {name}: invalid argument")
    with open(_full(root, name), "rb") as stream:
        return stream.read().decode("utf-8", errors="replace")


def _collector() -> tuple[set[str], WalkFunc]:
    seen: set[str] = set()

    def walk(path: str) -> bool:
        if path in seen:
            return True
        seen.add(path)
        return False

    return seen, walk


class ImportDepParser:
    """Builds the import graph reachable from ``opt.files`` below ``root``."""

    def __init__(self, root: str | os.PathLike, opt: DepOptions) -> None:
        self.root = posixpath.normpath(os.fspath(root)) if os.fspath(root) else "."
        for file in opt.files:
            _check_exists(self.root, file)
        self.opt = opt
        self.graph = ImportGraph()
        for file in opt.files:
            self._inspect(file)

    def _inspect(self, path: str) -> None:
        pkg_path = _dir(path) if path.endswith(".k") else path
        graph = self.graph
        if pkg_path in graph.processed:
            return
        graph.processed.add(pkg_path)

        for file in list_k_files(self.root, pkg_path):
            graph.file_index_inverted[file] = pkg_path
            graph.file_index.setdefault(pkg_path, set()).add(file)

            for import_path in parse_import(_read_text(self.root, file)):
                import_path = fix_path(self.root, fix_import_path(file, import_path))
                graph.import_index.setdefault(file, set()).add(import_path)
                graph.import_index_inverted.setdefault(import_path, set()).add(file)
                self._inspect(import_path)

    def upstream_files(self) -> list[str]:
        """Return, sorted, every file and package that ``opt.files`` depend on."""
        seen, walk = _collector()
        for file in self.opt.files:
            self.graph.walk_upstream(file, walk)
        return sorted(seen)

    def downstream_files(self) -> list[str]:
        """Return, sorted, every file and package depending on ``opt.upstreams``.

        A changed ``.k`` file that no longer exists still counts: its package and
        its module path are taken into the walk.
        """
        upstreams = list(self.opt.upstreams)
        for file in self.opt.upstreams:
            if should_ignore(_base(file)):
                continue
            if _is_missing(self.root, file):
                self.graph.file_index_inverted[file] = _dir(file)
                upstreams.append(file.removesuffix(".k"))

        seen, walk = _collector()
        for file in upstreams:
            self.graph.walk_downstream(file, walk)
        return sorted(seen)