"""Entry points for static export analysis.

The pipeline per module: locate the body, build the alias set and the
root-identifier table, collect exports over the body once, fill in a
path-derived default name when needed, and drop the interop marker.
"""

from __future__ import annotations

import json
from pathlib import Path

from jsexports.core.config import AnalyzerSettings
from jsexports.core.logging import Logger, get_logger

from .bindings import (
    find_module_body,
    find_module_exports_aliases,
    find_root_identifiers,
)
from .collector import ExportCollector
from .errors import ExportParseError, ExportsError, ReexportCycleError
from .models import ModuleExports, SourceLocation
from .naming import guess_default_export_name
from .resolver import (
    ModuleResolver,
    NodeModuleResolver,
    SourceReader,
    read_source,
)
from .syntax import first_error_node, iter_named, parse_source

__all__ = ["ExportAnalyzer", "analyze_file", "find_exports"]


class ExportAnalyzer:
    """Determine the export surface of JavaScript modules without running them.

    Args:
        settings: Analysis settings; defaults apply when omitted.
        resolver: Maps ``require()`` specifiers to files. Defaults to a
            :class:`NodeModuleResolver` using ``settings.resolve_extensions``.
        reader: Reads resolved modules as text.
        logger: Structured logger override.
    """

    def __init__(
        self,
        *,
        settings: AnalyzerSettings | None = None,
        resolver: ModuleResolver | None = None,
        reader: SourceReader = read_source,
        logger: Logger | None = None,
    ) -> None:
        self._settings = settings or AnalyzerSettings()
        self._resolver = resolver or NodeModuleResolver(
            extensions=self._settings.resolve_extensions
        )
        self._reader = reader
        self._logger = logger or get_logger(__name__, component="analyzer")

    @property
    def settings(self) -> AnalyzerSettings:
        return self._settings

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def find_exports(
        self,
        source_text: str,
        absolute_file_path: str | Path,
        is_json: bool | None = None,
    ) -> ModuleExports:
        """Return the exports declared by ``source_text``.

        Args:
            source_text: Module source code, or a JSON document.
            absolute_file_path: Location of the module; used to resolve
                re-exports and to guess default export names.
            is_json: Force (or disable) the JSON fast path. When ``None`` the
                file suffix decides.

        Raises:
            ExportParseError: If the source cannot be parsed.
            ReexportError: If a re-exported module cannot be analyzed and the
                re-export policy is strict.
        """

        path = Path(absolute_file_path)
        return self._analyze(source_text, path, is_json, chain=())

    def analyze_file(self, path: str | Path) -> ModuleExports:
        """Read ``path`` and return its exports."""

        resolved = Path(path).resolve(strict=False)
        return self.find_exports(self._reader(resolved), resolved)

    def guess_default_export_name(self, absolute_file_path: str | Path) -> str:
        """Return the path-derived default export name for a module."""

        return guess_default_export_name(
            absolute_file_path, self._settings.generic_names
        )

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------
    def _analyze(
        self,
        source_text: str,
        path: Path,
        is_json: bool | None,
        *,
        chain: tuple[Path, ...],
    ) -> ModuleExports:
        if is_json is None:
            is_json = self._settings.is_structured_data(path)
        if is_json:
            return self._json_exports(source_text, path)

        tree = parse_source(source_text, path)
        body = find_module_body(tree)
        if tree.root_node.has_error:
            broken = first_error_node(body) or first_error_node(
                iter_named(tree.root_node)
            )
            raise ExportParseError(
                "The source contains syntax errors.",
                path=path,
                location=(
                    SourceLocation.from_node(broken)
                    if broken is not None
                    else None
                ),
            )

        current = path.resolve(strict=False)
        collector = ExportCollector(
            aliases=find_module_exports_aliases(body),
            root_identifiers=find_root_identifiers(body),
            resolve_reexport=lambda specifier, location: self._reexport(
                specifier,
                location,
                importer=current,
                chain=(*chain, current),
            ),
            resolve_export_all=lambda specifier, location: self._reexport(
                specifier,
                location,
                importer=current,
                chain=(*chain, current),
                optional=True,
            ),
        )
        exports = collector.collect(body)

        if exports.has_default_export and not exports.default_export_name:
            exports.default_export_name = self.guess_default_export_name(path)

        marker = self._settings.interop_marker
        exports.named_exports = [
            name for name in exports.named_exports if name != marker
        ]

        self._logger.debug(
            "exports-collected",
            path=str(path),
            named=len(exports.named_exports),
            has_default=exports.has_default_export,
        )
        return exports

    @staticmethod
    def _json_exports(source_text: str, path: Path) -> ModuleExports:
        try:
            payload = json.loads(source_text)
        except json.JSONDecodeError as exc:
            raise ExportParseError(
                f"Invalid JSON document: {exc.msg}.",
                path=path,
                location=SourceLocation(exc.lineno, exc.lineno),
            ) from exc
        named = list(payload) if isinstance(payload, dict) else []
        return ModuleExports(named_exports=named, has_default_export=True)

    def _reexport(
        self,
        specifier: str,
        location: SourceLocation | None,
        *,
        importer: Path,
        chain: tuple[Path, ...],
        optional: bool = False,
    ) -> ModuleExports | None:
        """Analyze the module ``specifier`` names from ``importer``.

        Failures propagate under the strict policy unless ``optional`` is set,
        as it is for ``export * from`` targets; otherwise they are logged and
        ``None`` is returned.
        """

        log = self._logger.bind(
            importer=str(importer),
            specifier=specifier,
            line=location.start_line if location is not None else None,
        )
        try:
            target = self._resolver(specifier, importer.parent)
            if target in chain:
                raise ReexportCycleError(
                    f"Circular re-export of {target} from {importer}",
                    specifier=specifier,
                    basedir=importer.parent,
                    chain=(*chain, target),
                )
            source_text = self._reader(target)
            exports = self._analyze(source_text, target, None, chain=chain)
        except ExportsError as exc:
            if self._settings.strict and not optional:
                raise
            log.warning("reexport-skipped", kind=exc.kind, error=str(exc))
            return None

        log.debug("reexport-resolved", target=str(target))
        return exports


def find_exports(
    source_text: str,
    absolute_file_path: str | Path,
    is_json: bool | None = None,
    *,
    settings: AnalyzerSettings | None = None,
) -> ModuleExports:
    """Analyze ``source_text`` with a default :class:`ExportAnalyzer`.

    Example:
        >>> find_exports("exports.foo = 1", "/src/foo.js").named_exports
        ['foo']
    """

    return ExportAnalyzer(settings=settings).find_exports(
        source_text, absolute_file_path, is_json
    )


def analyze_file(
    path: str | Path,
    *,
    settings: AnalyzerSettings | None = None,
) -> ModuleExports:
    """Read ``path`` from disk and return its exports."""

    return ExportAnalyzer(settings=settings).analyze_file(path)
