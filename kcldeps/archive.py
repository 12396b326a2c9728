"""Extracting and building tar.gz and zip archives."""

from __future__ import annotations

import gzip
import os
import shutil
import tarfile
import zipfile
from typing import BinaryIO


class ArchiveError(Exception):
    """Raised when an archive cannot be extracted or written."""


def _join(base: str | os.PathLike, name: str) -> str:
    """Join like a path-cleaning join: ``name`` never escapes by being absolute."""
    base = os.fspath(base)
    if not name:
        return os.path.normpath(base)
    return os.path.normpath(base + os.sep + name)


def untar_gz(
    tar_gz_file: str | os.PathLike, trim_prefix: str, output_dir: str | os.PathLike
) -> None:
    """Extract a gzip-compressed tar archive, dropping ``trim_prefix`` from member names.

    Only directories and regular files are allowed; parent directories of files must
    be present in the archive before the files themselves.
    """
    os.makedirs(output_dir, exist_ok=True)
    with open(tar_gz_file, "rb") as raw, gzip.GzipFile(fileobj=raw) as stream:
        try:
            archive = tarfile.open(fileobj=stream, mode="r|")
        except tarfile.ReadError as exc:
            if "empty" in str(exc):
                return
            raise ArchiveError(f"UnTarGz: Next() failed: {exc}") from exc
        except (OSError, EOFError) as exc:
            raise ArchiveError(f"UnTarGz: Next() failed: {exc}") from exc
        with archive:
            members = iter(archive)
            while True:
                try:
                    member = next(members)
                except StopIteration:
                    break
                except (tarfile.TarError, OSError, EOFError) as exc:
                    raise ArchiveError(f"UnTarGz: Next() failed: {exc}") from exc
                _extract_member(archive, member, trim_prefix, output_dir)


def _extract_member(
    archive: tarfile.TarFile,
    member: tarfile.TarInfo,
    trim_prefix: str,
    output_dir: str | os.PathLike,
) -> None:
    if not (member.isdir() or member.isreg()):
        typeflag = member.type[0] if member.type else 0
        raise ArchiveError(f"UnTarGz: unknown type: {typeflag} in {member.name}")

    name = member.name
    if trim_prefix and name.startswith(trim_prefix):
        name = name[len(trim_prefix):]
    path = _join(output_dir, name)
    if ".." in path:
        raise ArchiveError('UnTarGz: MkdirAll() failed: path contains ".."')

    if member.isdir():
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as exc:
            raise ArchiveError(f"UnTarGz: MkdirAll() failed: {exc}") from exc
        return

    try:
        out = open(path, "wb")
    except OSError as exc:
        raise ArchiveError(f"UnTarGz: Create() failed: {exc}") from exc
    with out:
        source = archive.extractfile(member)
        try:
            if source is not None:
                shutil.copyfileobj(source, out)
        except (OSError, tarfile.TarError, EOFError) as exc:
            raise ArchiveError(f"UnTarGz: Copy() failed: {exc}") from exc


def unzip(zip_file: str | os.PathLike, output_dir: str | os.PathLike) -> None:
    """Extract a zip archive into ``output_dir``, refusing entries that escape it."""
    root = os.path.normpath(os.fspath(output_dir))
    with zipfile.ZipFile(zip_file) as archive:
        for info in archive.infolist():
            file_path = _join(output_dir, info.filename)
            if not file_path.startswith(root + os.sep):
                raise ArchiveError("invalid file path")
            if info.is_dir():
                os.makedirs(file_path, exist_ok=True)
                continue
            os.makedirs(os.path.dirname(file_path), exist_ok=True)
            mode = (info.external_attr >> 16) & 0o777 or 0o666
            fd = os.open(file_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
            with os.fdopen(fd, "wb") as out, archive.open(info) as source:
                shutil.copyfileobj(source, out)


def _walk_files(root: str, relative: str = ""):
    directory = os.path.join(root, relative) if relative else root
    for name in sorted(os.listdir(directory)):
        rel = f"{relative}/{name}" if relative else name
        if os.path.isdir(os.path.join(root, rel)):
            yield from _walk_files(root, rel)
        else:
            yield rel


def zip_dir(out: BinaryIO, root: str | os.PathLike) -> None:
    """Write every file below ``root`` into a zip archive on the binary stream ``out``.

    Entry names are relative to ``root``, use ``/`` separators and come in lexical
    walk order; directories get no entries of their own.
    """
    root = os.fspath(root)
    with zipfile.ZipFile(out, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for rel in _walk_files(root):
            with open(os.path.join(root, rel), "rb") as source, archive.open(rel, "w") as dest:
                shutil.copyfileobj(source, dest)