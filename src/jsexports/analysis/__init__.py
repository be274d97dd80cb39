"""Static export analysis for JavaScript modules.

The engine reads a module's syntax tree and reports which names it exports,
whether it has a default export, and what that default export is called. Both
native ``export`` syntax and CommonJS ``module.exports``/``exports`` mutation
are recognized; nothing is executed.
"""

from __future__ import annotations

from .errors import (
    ExportParseError,
    ExportsError,
    ModuleReadError,
    ModuleResolutionError,
    ReexportCycleError,
    ReexportError,
)
from .models import ModuleExports, SourceLocation
from .naming import camel_case, guess_default_export_name
from .resolver import NodeModuleResolver, read_source
from .service import ExportAnalyzer, analyze_file, find_exports

__all__ = [
    "ExportAnalyzer",
    "ExportParseError",
    "ExportsError",
    "ModuleExports",
    "ModuleReadError",
    "ModuleResolutionError",
    "NodeModuleResolver",
    "ReexportCycleError",
    "ReexportError",
    "SourceLocation",
    "analyze_file",
    "camel_case",
    "find_exports",
    "guess_default_export_name",
    "read_source",
]
