"""Typed error hierarchy for export analysis."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .models import SourceLocation

__all__ = [
    "ExportsError",
    "ExportParseError",
    "ReexportError",
    "ModuleResolutionError",
    "ModuleReadError",
    "ReexportCycleError",
]


@dataclass(slots=True, eq=False)
class ExportsError(RuntimeError):
    """Base error raised by the export analysis engine."""

    message: str
    kind: str = "exports"

    def __post_init__(self) -> None:
        RuntimeError.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True, eq=False)
class ExportParseError(ExportsError):
    """Raised when a source file cannot be turned into a usable tree."""

    kind: str = "parse"
    path: Path | None = None
    location: SourceLocation | None = None

    def __str__(self) -> str:
        parts = []
        if self.path is not None:
            parts.append(f"Parsing file {self.path}.")
        if self.location is not None:
            parts.append(f"Occurred {self.location.describe()}.")
        parts.append(self.message)
        return " ".join(parts)


@dataclass(slots=True, eq=False)
class ReexportError(ExportsError):
    """Base error for failures while following ``module.exports = require()``."""

    kind: str = "reexport"
    specifier: str | None = None
    basedir: Path | None = None


@dataclass(slots=True, eq=False)
class ModuleResolutionError(ReexportError):
    """Raised when a specifier does not resolve to a file."""


@dataclass(slots=True, eq=False)
class ModuleReadError(ReexportError):
    """Raised when a resolved module cannot be read as text."""

    path: Path | None = None


@dataclass(slots=True, eq=False)
class ReexportCycleError(ReexportError):
    """Raised when a re-export chain re-enters a module being analyzed."""

    chain: tuple[Path, ...] = ()
