# kcldeps

`kcldeps` inspects KCL configuration repositories and works out how their files
and packages depend on each other. It reads the leading `import` statements of
`.k` files, follows them through a module rooted at a `kcl.mod` file, and tells
you which files an application depends on, or which files are affected when
some file changes.

## Installation

```
pip install kcldeps
```

## Listing the files of an application

```python
from kcldeps.api import list_dep_files, list_dep_packages
from kcldeps.options import Option

# every file the application in ./repo/app0 depends on, relative to the kcl.mod root
files = list_dep_files("repo/app0", Option(flag_all=True))

# imported packages, leaving out builtin modules and packages declared in kcl.mod
pkgs = list_dep_packages(
    "repo/app0",
    Option(exclude_builtin=True, exclude_external_package=True, ignore_import_error=True),
)
```

`Option` fields: `kcl_mod`, `kcl_yaml`, `project_yaml` (file names, defaulting
to `kcl.mod`, `kcl.yaml` and `project.yaml`), and the flags `flag_all`,
`use_abs_path`, `exclude_external_package`, `exclude_builtin` and
`ignore_import_error`. A package with no KCL files raises
`kcldeps.options.KclFileError` unless `ignore_import_error` is set. When no
`kcl.mod` encloses the working directory, `kcldeps.pkgroot.PkgRootNotFound`
is raised.

## Upstream and downstream files

```python
from kcldeps.api import list_upstream_files, list_downstream_files
from kcldeps.graph import DepOptions

scope = ["appops/projectA/base/base.k", "appops/projectA/dev/main.k"]

# what the given files import, directly or indirectly
up = list_upstream_files("repo", DepOptions(files=scope))

# what is affected when a file changes (or was deleted)
down = list_downstream_files(
    "repo",
    DepOptions(files=scope, upstreams=["base/frontend/container/container_port.k"]),
)
```

Both return sorted lists, and an empty list when `files` (or, for downstream,
`upstreams`) is empty. A changed `.k` file that no longer exists still counts:
its package and module path take part in the walk. The graph itself is
available as `kcldeps.graph.ImportDepParser` and `kcldeps.graph.ImportGraph`.

## Working with a repository directly

`kcldeps.dep_parser.DepParser` scans a whole repository once, finding every
`main.k` and `kcl.yaml` application, and answers questions about it:
`get_app_files`, `get_app_pkgs`, `get_touched_apps`, `is_app`,
`get_dep_pkg_list`, `get_pkg_file_list`, `get_pkg_list` and
`get_import_map_string`. A failure while loading packages does not raise; it is
kept in its `error` attribute.

For a single application, `kcldeps.single_app.SingleAppDepParser` parses only
what that application reaches, through `get_app_files` and `get_app_pkgs`.

The lower-level pieces are available too: `kcldeps.imports.parse_import`
extracts import paths from KCL source, `kcldeps.imports.fix_import_path`
turns relative imports into repository paths, `fix_path` and `list_k_files`
resolve them against a directory, and `kcldeps.pkgroot` offers
`find_pkg_root`, `good_pkg_path` and `find_pkg_info` to locate the `kcl.mod`
root of a path.

## Helpers

- `kcldeps.archive`: `untar_gz`, `unzip` and `zip_dir` for release archives.
- `kcldeps.download`: `http_get_data` and `http_get_file`.
- `kcldeps.checksum`: `md5_file` and `is_md5_text`.
- `kcldeps.fsutil`: `file_exists` and `dir_exists`.
- `kcldeps.versions`: the known `KclvmVersion` and `KclvmTriple` values.

## What it does not do

`kcldeps` is a library only: it has no command-line tool. It does not run,
format, lint or validate KCL code, and it does not download module
dependencies; it only reads `import` statements and settings files.

## Running the tests

```
pip install -e ".[test]"
pytest
```