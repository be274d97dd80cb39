"""Tests for :mod:`jsexports.analysis.service`."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from jsexports.analysis import (
    ExportAnalyzer,
    ExportParseError,
    ModuleExports,
    ModuleReadError,
    ModuleResolutionError,
    ReexportCycleError,
    analyze_file,
    find_exports,
)
from jsexports.core.config import AnalyzerSettings


# ----------------------------------------------------------------------
# JSON fast path
# ----------------------------------------------------------------------
def test_json_object_keys_are_named_exports() -> None:
    exports = find_exports('{"a": 1, "b": 2}', "/data/values.json")

    assert exports == ModuleExports(["a", "b"], True, None)


def test_json_non_object_has_only_default() -> None:
    exports = find_exports("[1, 2, 3]", "/data/list.json")

    assert exports == ModuleExports([], True, None)


def test_json_flag_overrides_suffix(analyzer: ExportAnalyzer) -> None:
    exports = analyzer.find_exports('{"key": true}', "/data/values.txt", True)

    assert exports.named_exports == ["key"]


def test_json_suffix_can_be_disabled(analyzer: ExportAnalyzer) -> None:
    exports = analyzer.find_exports("exports.a = 1;", "/data/values.json", False)

    assert exports.named_exports == ["a"]


def test_invalid_json_raises_parse_error() -> None:
    with pytest.raises(ExportParseError) as exc:
        find_exports('{\n  "a": 1,\n  oops\n}', "/data/broken.json")

    assert exc.value.location is not None
    assert exc.value.location.start_line == 3
    assert "Parsing file /data/broken.json" in str(exc.value)


def test_configured_json_suffixes() -> None:
    settings = AnalyzerSettings(json_suffixes=(".json", "jsonc"))

    exports = find_exports('{"x": 1}', "/data/tsconfig.jsonc", settings=settings)

    assert exports.named_exports == ["x"]


# ----------------------------------------------------------------------
# parse errors
# ----------------------------------------------------------------------
def test_syntax_error_reports_location() -> None:
    with pytest.raises(ExportParseError) as exc:
        find_exports("const ok = 1;\nconst = ;\n", "/src/broken.js")

    error = exc.value
    assert error.kind == "parse"
    assert error.path == Path("/src/broken.js")
    assert error.location is not None
    assert error.location.start_line <= 2 <= error.location.end_line
    assert str(error).startswith("Parsing file /src/broken.js. Occurred between")


# ----------------------------------------------------------------------
# re-exports
# ----------------------------------------------------------------------
def test_require_reexport_replaces_exports(write_module, analyzer) -> None:
    write_module(
        "lib/other.js",
        """
        exports.x = 1;
        exports.default = Y;
        class Y {}
        """,
    )
    main = write_module(
        "lib/main.js",
        """
        exports.dropped = 1;
        module.exports = require('./other');
        """,
    )

    exports = analyzer.analyze_file(main)

    assert exports == ModuleExports(["x"], True, "Y")


def test_json_reexport_takes_importer_name(write_module, analyzer) -> None:
    write_module("settings/data.json", '{"host": "localhost", "port": 80}')
    main = write_module(
        "settings/index.js", "module.exports = require('./data.json');"
    )

    exports = analyzer.analyze_file(main)

    assert exports == ModuleExports(["host", "port"], True, "settings")


def test_reexport_from_node_modules(write_module, analyzer) -> None:
    write_module("node_modules/pkg/package.json", json.dumps({"main": "lib/entry"}))
    write_module("node_modules/pkg/lib/entry.js", "export const fromPkg = 1;")
    main = write_module("src/main.js", "module.exports = require('pkg');")

    exports = analyzer.analyze_file(main)

    assert exports == ModuleExports(["fromPkg"], False, None)


def test_export_all_appends_named_exports(write_module, analyzer) -> None:
    write_module(
        "shared.js",
        """
        export const x = 1;
        export default 2;
        """,
    )
    main = write_module(
        "main.js",
        """
        export const own = 1;
        export * from './shared';
        """,
    )

    exports = analyzer.analyze_file(main)

    assert exports == ModuleExports(["own", "x"], False, None)


def test_missing_reexport_strict_raises(write_module, analyzer) -> None:
    main = write_module(
        "main.js",
        """
        exports.kept = 1;
        module.exports = require('./missing');
        """,
    )

    with pytest.raises(ModuleResolutionError) as exc:
        analyzer.analyze_file(main)

    assert exc.value.specifier == "./missing"


def test_missing_reexport_lenient_keeps_collected(
    write_module, lenient_analyzer
) -> None:
    main = write_module(
        "main.js",
        """
        exports.kept = 1;
        module.exports = require('./missing');
        """,
    )

    exports = lenient_analyzer.analyze_file(main)

    assert exports.named_exports == ["kept"]


def test_broken_reexport_target_propagates_parse_error(
    write_module, analyzer
) -> None:
    write_module("broken.js", "const = ;")
    main = write_module("main.js", "module.exports = require('./broken');")

    with pytest.raises(ExportParseError) as exc:
        analyzer.analyze_file(main)

    assert exc.value.path is not None
    assert exc.value.path.name == "broken.js"


def test_reexport_cycle_strict_raises(write_module, analyzer) -> None:
    a = write_module("a.js", "module.exports = require('./b');")
    write_module("b.js", "module.exports = require('./a');")

    with pytest.raises(ReexportCycleError) as exc:
        analyzer.analyze_file(a)

    assert [path.name for path in exc.value.chain] == ["a.js", "b.js", "a.js"]


def test_reexport_cycle_lenient_stops(write_module, lenient_analyzer) -> None:
    write_module("b.js", "module.exports = require('./a');")
    a = write_module("a.js", "module.exports = require('./b');")

    exports = lenient_analyzer.analyze_file(a)

    assert exports == ModuleExports([], False, None)


def test_custom_resolver_and_reader_are_used() -> None:
    calls: list[tuple[str, Path]] = []

    def resolver(specifier: str, basedir: Path) -> Path:
        calls.append((specifier, basedir))
        return Path("/virtual/target.js")

    def reader(path: Path) -> str:
        assert path == Path("/virtual/target.js")
        return "exports.virtual = true;"

    analyzer = ExportAnalyzer(resolver=resolver, reader=reader)
    exports = analyzer.find_exports(
        "module.exports = require('target');", "/virtual/main.js"
    )

    assert exports.named_exports == ["virtual"]
    assert calls == [("target", Path("/virtual").resolve())]


# ----------------------------------------------------------------------
# files and naming
# ----------------------------------------------------------------------
def test_analyze_file_reads_from_disk(write_module) -> None:
    path = write_module("widgets/index.js", "module.exports = function () {};")

    assert analyze_file(path) == ModuleExports([], True, "widgets")


def test_analyze_file_missing_raises_read_error(tmp_path: Path) -> None:
    with pytest.raises(ModuleReadError):
        analyze_file(tmp_path / "absent.js")


def test_guess_uses_configured_generic_names() -> None:
    analyzer = ExportAnalyzer(settings=AnalyzerSettings(generic_names=("main",)))

    assert analyzer.guess_default_export_name("/pkgs/tool/main.js") == "tool"
    assert analyzer.guess_default_export_name("/pkgs/tool/index.js") == "index"


def test_custom_interop_marker_is_filtered() -> None:
    settings = AnalyzerSettings(interop_marker="__internal")

    exports = find_exports(
        "exports.__internal = 1;\nexports.__esModule = true;",
        "/src/mod.js",
        settings=settings,
    )

    assert exports.named_exports == ["__esModule"]


def test_analysis_is_idempotent(write_module, analyzer) -> None:
    write_module("dep.js", "module.exports = { a, b };")
    main = write_module(
        "main.js",
        """
        module.exports = require('./dep');
        module.exports.extra = 1;
        """,
    )

    first = analyzer.analyze_file(main)
    second = analyzer.analyze_file(main)

    assert first == second == ModuleExports(["a", "b", "extra"], False, None)


def test_typescript_barrel_reexports_sibling_modules(write_module, analyzer) -> None:
    write_module("src/a.ts", "export const a = 1;")
    write_module("src/b.mts", "export function b(): void {}")
    index = write_module(
        "src/index.ts",
        """
        export * from './a';
        export * from './b';
        export const c = 2;
        """,
    )

    exports = analyzer.analyze_file(index)

    assert exports == ModuleExports(["a", "b", "c"], False, None)


def test_unresolvable_export_all_is_skipped_under_strict_policy(
    write_module, analyzer
) -> None:
    main = write_module(
        "main.js",
        """
        export * from 'missing-pkg';
        export const a = 1;
        """,
    )

    exports = analyzer.analyze_file(main)

    assert analyzer.settings.strict is True
    assert exports.named_exports == ["a"]


def test_broken_export_all_target_is_skipped(write_module, analyzer) -> None:
    write_module("broken.js", "const = ;")
    main = write_module(
        "main.js",
        """
        export * from './broken';
        export const kept = 1;
        """,
    )

    assert analyzer.analyze_file(main).named_exports == ["kept"]
