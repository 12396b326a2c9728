import pytest

from kcldeps.imports import (
    fix_import_path,
    fix_path,
    is_builtin_pkg,
    is_plugin_pkg,
    list_k_files,
    parse_import,
    should_ignore,
)


PARSE_CASES = [
    (1, '\n\t"""abc"""\n\timport base.pkg.kusion_kubernetes.apimachinery.apis\n\t'),
    (1, "\n\t'''abc'''\n\timport base.pkg.kusion_kubernetes.apimachinery.apis\n\t"),
    (
        1,
        '\n\t"""\n\tThis is the mutating_webhook_configuration module in '
        "kusion_kubernetes.api.admissionregistration.v1beta1 package.\n"
        "\tThis file was generated by the KCL auto-gen tool. DO NOT EDIT.\n"
        "\tEditing this file might prove futile when you re-run the KCL auto-gen generate command.\n"
        '\t"""\n\timport base.pkg.kusion_kubernetes.apimachinery.apis\n\t',
    ),
    (
        2,
        '\n\t\t"""\n\t\tThis file was generated by the KCL auto-gen tool. DO NOT EDIT.\n'
        "\t\tEditing this file might prove futile when you re-run the KCL auto-gen generate command.\n"
        '\t\t"""\n\t\timport base.pkg.kusion_kubernetes.apimachinery.apis\n'
        "\t\timport base.pkg.kusion_kubernetes.api.core.v1\n\t\t",
    ),
    (
        1,
        "\n\t\t'''\n\t\tThis file was generated by the KCL auto-gen tool. DO NOT EDIT.\n"
        "\t\tEditing this file might prove futile when you re-run the KCL auto-gen generate command.\n"
        '\t\t"""\n\t\timport base.pkg.kusion_kubernetes.apimachinery.apis\n'
        "\t\timport base.pkg.kusion_kubernetes.api.core.v1\n\t\t'''\n\t\timport abc\n\t\t",
    ),
    (1, "\n\t\t'aaa'\n\t\timport kcl_plugin.hello\n\t\ta = 2\n\t\t"),
    (1, '\n\t\t"aaa"\n\t\timport kcl_plugin.hello\n\t\ta = 2\n\t\t'),
]


@pytest.mark.parametrize("count, code", PARSE_CASES)
def test_parse_import_counts(count, code):
    assert len(parse_import(code)) == count


def test_parse_import_values_sorted_and_distinct():
    code = (
        "# header comment\n"
        "import base.frontend\n"
        "import base.api.core.v1 as core_v1\n"
        "import base.frontend  # again\n"
        "\n"
        "main = frontend.Server{}\n"
        "import late.one\n"
    )
    assert parse_import(code) == ["base.api.core.v1", "base.frontend"]


def test_parse_import_strips_quotes():
    assert parse_import("import 'quoted.pkg'\n") == ["quoted.pkg"]


def test_parse_import_stops_at_first_statement():
    assert parse_import("a = 1\nimport b\n") == []


@pytest.mark.parametrize(
    "file_path, import_path, expect",
    [
        ("main.k", "base.b", "base/b"),
        ("base/b.k", ".a", "base/a"),
        ("base/a.k", "..frontend", "base/../frontend"),
        ("base/a.k", "...frontend", "base/../../frontend"),
    ],
)
def test_fix_import_path(file_path, import_path, expect):
    assert fix_import_path(file_path, import_path) == expect


def test_fix_import_path_relative_within_root():
    assert fix_import_path("appops/projectF/dev/main.k", "..base.base") == "appops/projectF/base/base"


@pytest.fixture
def complicate(tmp_path):
    files = [
        "base/frontend/container/container.k",
        "base/frontend/container/container_port.k",
        "base/frontend/container/probe/probe.k",
        "base/frontend/container/probe/exec.k",
        "base/frontend/container/probe/http.k",
        "base/frontend/container/probe/tcp.k",
        "base/frontend/container/probe/_internal.k",
        "base/frontend/container/probe/probe_test.k",
        "base/frontend/container/probe/README.md",
        "base/frontend/container/probe/nested/deep.k",
    ]
    for name in files:
        path = tmp_path.joinpath(*name.split("/"))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("a = 1\n")
    return tmp_path


@pytest.mark.parametrize(
    "ori_path, expect",
    [
        ("base/frontend/container/container.k", "base/frontend/container/container.k"),
        ("base/frontend/container/container", "base/frontend/container/container.k"),
        ("base/frontend/container", "base/frontend/container"),
        ("base/frontend/container/invalid", "base/frontend/container/invalid"),
    ],
)
def test_fix_path(complicate, ori_path, expect):
    assert fix_path(complicate, ori_path) == expect


def test_fix_path_keeps_paths_escaping_root(complicate):
    path = "base/../base/frontend/container/container"
    assert fix_path(complicate, path) == path


@pytest.mark.parametrize(
    "file_path, expect",
    [
        ("base/frontend/container/container.k", ["base/frontend/container/container.k"]),
        ("base/frontend/container/container", ["base/frontend/container/container.k"]),
        (
            "base/frontend/container",
            ["base/frontend/container/container.k", "base/frontend/container/container_port.k"],
        ),
        (
            "base/frontend/container/probe",
            [
                "base/frontend/container/probe/probe.k",
                "base/frontend/container/probe/exec.k",
                "base/frontend/container/probe/http.k",
                "base/frontend/container/probe/tcp.k",
            ],
        ),
    ],
)
def test_list_k_files(complicate, file_path, expect):
    assert sorted(list_k_files(complicate, file_path)) == sorted(expect)


def test_list_k_files_missing_path(complicate):
    assert list_k_files(complicate, "base/nothing_here") == []


@pytest.mark.parametrize(
    "name, ignored",
    [
        ("main.k", False),
        ("_private.k", True),
        ("main_test.k", True),
        ("README.md", True),
        ("kcl.mod", True),
    ],
)
def test_should_ignore(name, ignored):
    assert should_ignore(name) is ignored


@pytest.mark.parametrize(
    "pkgpath, builtin",
    [("math", True), ("regex", True), ("runtime", True), ("mathx", False), ("base/math", False)],
)
def test_is_builtin_pkg(pkgpath, builtin):
    assert is_builtin_pkg(pkgpath) is builtin


@pytest.mark.parametrize(
    "pkgpath, plugin",
    [
        ("kcl_plugin/hello", True),
        ("kcl_plugin.hello", True),
        ("kcl_plugin", False),
        ("my/kcl_plugin/hello", False),
    ],
)
def test_is_plugin_pkg(pkgpath, plugin):
    assert is_plugin_pkg(pkgpath) is plugin