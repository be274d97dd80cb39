"""Tests for :mod:`jsexports.analysis.resolver`."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from jsexports.analysis import ModuleReadError, ModuleResolutionError, read_source
from jsexports.analysis.resolver import NodeModuleResolver


def _touch(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def resolver() -> NodeModuleResolver:
    return NodeModuleResolver()


def test_relative_specifier_tries_extensions_in_order(
    tmp_path: Path, resolver: NodeModuleResolver
) -> None:
    _touch(tmp_path / "b.json", "{}")
    expected = _touch(tmp_path / "b.js")

    assert resolver("./b", tmp_path) == expected.resolve()


def test_exact_file_wins(tmp_path: Path, resolver: NodeModuleResolver) -> None:
    expected = _touch(tmp_path / "a.js")

    assert resolver("./a.js", tmp_path) == expected.resolve()


def test_parent_relative_specifier(tmp_path: Path, resolver: NodeModuleResolver) -> None:
    expected = _touch(tmp_path / "shared.js")
    (tmp_path / "nested").mkdir()

    assert resolver("../shared", tmp_path / "nested") == expected.resolve()


def test_directory_index(tmp_path: Path, resolver: NodeModuleResolver) -> None:
    expected = _touch(tmp_path / "dir" / "index.js")

    assert resolver("./dir", tmp_path) == expected.resolve()
    assert resolver("./dir/", tmp_path) == expected.resolve()


def test_package_json_main(tmp_path: Path, resolver: NodeModuleResolver) -> None:
    _touch(tmp_path / "pkg" / "package.json", json.dumps({"main": "lib/main"}))
    expected = _touch(tmp_path / "pkg" / "lib" / "main.js")
    _touch(tmp_path / "pkg" / "index.js")

    assert resolver("./pkg", tmp_path) == expected.resolve()


def test_invalid_package_json_falls_back_to_index(
    tmp_path: Path, resolver: NodeModuleResolver
) -> None:
    _touch(tmp_path / "pkg" / "package.json", "{ not json")
    expected = _touch(tmp_path / "pkg" / "index.js")

    assert resolver("./pkg", tmp_path) == expected.resolve()


def test_bare_specifier_searches_node_modules_upward(
    tmp_path: Path, resolver: NodeModuleResolver
) -> None:
    expected = _touch(tmp_path / "node_modules" / "pkg" / "index.js")
    deep = tmp_path / "src" / "deep"
    deep.mkdir(parents=True)

    assert resolver("pkg", deep) == expected.resolve()


def test_scoped_package(tmp_path: Path, resolver: NodeModuleResolver) -> None:
    expected = _touch(tmp_path / "node_modules" / "@scope" / "name" / "index.js")

    assert resolver("@scope/name", tmp_path) == expected.resolve()


def test_custom_extensions(tmp_path: Path) -> None:
    expected = _touch(tmp_path / "m.mjs")
    _touch(tmp_path / "m.js")

    resolver = NodeModuleResolver(extensions=(".mjs",))

    assert resolver("./m", tmp_path) == expected.resolve()


def test_missing_module_raises(tmp_path: Path, resolver: NodeModuleResolver) -> None:
    with pytest.raises(ModuleResolutionError) as exc:
        resolver("./absent", tmp_path)

    assert exc.value.kind == "reexport"
    assert exc.value.specifier == "./absent"
    assert exc.value.basedir == tmp_path.resolve()


def test_read_source_returns_text(tmp_path: Path) -> None:
    path = _touch(tmp_path / "mod.js", "exports.a = 1;\n")

    assert read_source(path) == "exports.a = 1;\n"


def test_read_source_wraps_os_errors(tmp_path: Path) -> None:
    with pytest.raises(ModuleReadError) as exc:
        read_source(tmp_path / "absent.js")

    assert exc.value.path == tmp_path / "absent.js"


def test_read_source_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "binary.js"
    path.write_bytes(b"\xff\xfe\x00")

    with pytest.raises(ModuleReadError):
        read_source(path)


def test_default_extensions_cover_module_and_typescript_files(
    tmp_path: Path, resolver: NodeModuleResolver
) -> None:
    mjs = _touch(tmp_path / "esm.mjs")
    ts = _touch(tmp_path / "typed.ts")
    index = _touch(tmp_path / "feature" / "index.tsx")

    assert resolver("./esm", tmp_path) == mjs.resolve()
    assert resolver("./typed", tmp_path) == ts.resolve()
    assert resolver("./feature", tmp_path) == index.resolve()


def test_javascript_extensions_win_over_typescript(
    tmp_path: Path, resolver: NodeModuleResolver
) -> None:
    _touch(tmp_path / "dual.ts")
    expected = _touch(tmp_path / "dual.js")

    assert resolver("./dual", tmp_path) == expected.resolve()
