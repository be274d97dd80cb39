"""Shared pytest fixtures for export analysis tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from textwrap import dedent

import pytest

from jsexports.analysis import ExportAnalyzer
from jsexports.core.config import AnalyzerSettings, ReexportPolicy

WriteModule = Callable[[str, str], Path]


@pytest.fixture
def write_module(tmp_path: Path) -> WriteModule:
    """Write dedented ``source`` to ``relative`` under ``tmp_path``."""

    def _write(relative: str, source: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(source).lstrip(), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def analyzer() -> ExportAnalyzer:
    """Return an analyzer using the strict re-export policy."""

    return ExportAnalyzer(settings=AnalyzerSettings())


@pytest.fixture
def lenient_analyzer() -> ExportAnalyzer:
    """Return an analyzer that skips unresolvable re-exports."""

    return ExportAnalyzer(
        settings=AnalyzerSettings(reexport_policy=ReexportPolicy.LENIENT)
    )
