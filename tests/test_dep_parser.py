import json

import pytest

from kcldeps.dep_parser import DepParser
from kcldeps.options import Option


def _make_tree(root, files):
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


APP0_KCL_YAML = """kcl_cli_configs:
  file:
    - ../main.k
    - before/base.k
    - main.k
"""


@pytest.fixture
def app_tree(tmp_path):
    return _make_tree(
        tmp_path,
        {
            "kcl.mod": "",
            "main.k": "a = 1\n",
            "app0/kcl.yaml": APP0_KCL_YAML,
            "app0/main.k": "import .sub\n\nx = 1\n",
            "app0/before/base.k": "b = 1\n",
            "app0/sub/sub.k": "c = 1\n",
            "app0-failed/main.k": "import .sub_not_found\n",
        },
    )


@pytest.fixture
def myapp(tmp_path):
    return _make_tree(
        tmp_path,
        {
            "kcl.mod": "",
            "myapp/main.k": "import mypkg",
            "myapp/base.k": "",
            "mypkg/a.k": "import .subpkg",
            "mypkg/subpkg/b.k": "a = 1",
        },
    )


def test_vfs_app_files(myapp):
    parser = DepParser(myapp)
    assert parser.get_app_files("myapp", False) == ["myapp/base.k", "myapp/main.k"]
    assert parser.get_app_files("myapp", True) == [
        "myapp/base.k",
        "myapp/main.k",
        "mypkg/a.k",
        "mypkg/subpkg/b.k",
    ]
    assert parser.get_app_pkgs("myapp", True) == ["mypkg", "mypkg/subpkg"]


def test_vfs_direct_pkgs_and_lists(myapp):
    parser = DepParser(myapp)
    assert parser.error is None
    assert parser.get_app_pkgs("myapp", False) == ["mypkg"]
    assert parser.get_dep_pkg_list("mypkg") == ["mypkg/subpkg"]
    assert parser.get_pkg_list() == ["myapp", "mypkg"]
    assert parser.main_k_list == ["myapp/main.k"]
    assert parser.k_list == ["myapp/base.k", "myapp/main.k", "mypkg/a.k", "mypkg/subpkg/b.k"]


def test_import_map_string(myapp):
    parser = DepParser(myapp)
    assert json.loads(parser.get_import_map_string()) == {
        "myapp": ["mypkg"],
        "mypkg": ["mypkg/subpkg"],
    }


def test_is_app(myapp):
    parser = DepParser(myapp)
    assert parser.is_app("myapp") is True
    assert parser.is_app("mypkg") is False


def test_kcl_mod_env(tmp_path):
    _make_tree(
        tmp_path,
        {
            "kcl.mod": "",
            "kcl.yaml": "kcl_cli_configs:\n  file:\n    - ${KCL_MOD}/main1.k\n    - main2.k\n",
            "main1.k": "a = 1\n",
            "main2.k": "b = 1\n",
        },
    )
    parser = DepParser(tmp_path)
    assert parser.get_pkg_file_list(".") == ["main1.k", "main2.k"]


def test_pkg_file_list_missing_package(myapp):
    parser = DepParser(myapp)
    assert parser.get_pkg_file_list("nothing/here") == []


def test_list_dep_files(app_tree):
    parser = DepParser(app_tree, Option())
    files = parser.get_app_files("app0", True)
    assert sorted(files) == sorted(
        ["main.k", "app0/before/base.k", "app0/main.k", "app0/sub/sub.k"]
    )


def test_list_dep_files_failed(app_tree):
    parser = DepParser(app_tree, Option())
    assert "package app0-failed/sub_not_found: no kcl file" in str(parser.error)


def test_ignore_import_error_keeps_parser_clean(app_tree):
    parser = DepParser(app_tree, Option(ignore_import_error=True))
    assert parser.error is None
    assert parser.get_dep_pkg_list("app0-failed") == ["app0-failed/sub_not_found"]


def test_new_dep_parser_import_builtin(tmp_path):
    _make_tree(
        tmp_path,
        {
            "kcl.mod": "",
            "entry/main.k": "import math\nimport sub\n\na = 1\n",
            "sub/main.k": "import json\n\nb = 1\n",
        },
    )
    parser = DepParser(tmp_path, Option(kcl_yaml="kcl.yaml", project_yaml="project.yaml"))
    assert parser.error is None
    assert len(parser.pkg_files_map) == 2
    assert parser.pkg_files_map["entry"] == ["entry/main.k"]
    assert parser.pkg_files_map["sub"] == ["sub/main.k"]


def test_exclude_external_package(tmp_path):
    _make_tree(
        tmp_path,
        {
            "kcl.mod": '[dependencies]\nk8s = "1.28"\n',
            "apps/web/main.k": "import k8s.api.core\n",
        },
    )
    failing = DepParser(tmp_path)
    assert "package k8s/api/core: no kcl file" in str(failing.error)

    parser = DepParser(tmp_path, Option(exclude_external_package=True))
    assert parser.error is None
    assert parser.get_dep_pkg_list("apps/web") == ["k8s/api/core"]


@pytest.fixture
def apps(tmp_path):
    return _make_tree(
        tmp_path,
        {
            "kcl.mod": "",
            "apps/a/main.k": "import base.lib\n",
            "apps/b/main.k": "x = 1\n",
            "base/lib/x.k": "y = 1\n",
        },
    )


def test_touched_apps(apps):
    parser = DepParser(apps)
    touched, untouched = parser.get_touched_apps("base/lib/x.k")
    assert touched == ["apps/a"]
    assert untouched == ["apps/b"]
    assert parser.get_touched_apps("base/lib/x.k") == (["apps/a"], ["apps/b"])


def test_touched_apps_direct_change(apps):
    parser = DepParser(apps)
    assert parser.get_touched_apps("apps/b/main.k") == (["apps/b"], ["apps/a"])


def test_touched_apps_project_yaml(apps):
    (apps / "apps" / "project.yaml").write_text("name: demo\n")
    parser = DepParser(apps)
    touched, untouched = parser.get_touched_apps("apps/readme.txt")
    assert touched == ["apps/a", "apps/b"]
    assert untouched == []


def test_touched_apps_without_files(apps):
    parser = DepParser(apps)
    assert parser.get_touched_apps() == ([], [])