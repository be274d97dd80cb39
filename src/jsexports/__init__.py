"""Top-level package for :mod:`jsexports`.

Statically determines the export surface of JavaScript modules.

Example:
    >>> from jsexports import find_exports
    >>> find_exports("export default class Foo {}", "/src/foo.js").default_export_name
    'Foo'
"""

from importlib import metadata

from jsexports.analysis import (
    ExportAnalyzer,
    ExportParseError,
    ExportsError,
    ModuleExports,
    find_exports,
    guess_default_export_name,
)

try:
    __version__ = metadata.version("jsexports")
except metadata.PackageNotFoundError:  # pragma: no cover - fallback for source checkouts
    __version__ = "0.0.0"

__all__ = [
    "ExportAnalyzer",
    "ExportParseError",
    "ExportsError",
    "ModuleExports",
    "__version__",
    "find_exports",
    "guess_default_export_name",
]
