"""Target discovery and report rendering for ``jsexports scan``."""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from jsexports.analysis import (
    ExportAnalyzer,
    ExportsError,
    ModuleExports,
    ModuleResolutionError,
    NodeModuleResolver,
)
from jsexports.core.logging import Logger

__all__ = [
    "IGNORED_PACKAGE_DIRS",
    "ScanOutcome",
    "iter_node_module_entries",
    "render_json",
    "render_outcome",
    "resolve_target",
    "scan_targets",
]

IGNORED_PACKAGE_DIRS = frozenset({".bin", "@types"})
_ENTRY_SUFFIXES = frozenset({".js", ".jsx", ".ts", ".tsx"})


@dataclass(slots=True)
class ScanOutcome:
    """Result of analyzing a single target."""

    path: Path
    exports: ModuleExports | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def resolve_target(
    target: str,
    *,
    resolver: NodeModuleResolver,
    cwd: Path,
) -> Path:
    """Resolve ``target`` as a package name first, then as a file path."""

    try:
        return resolver(target, cwd)
    except ModuleResolutionError:
        return (cwd / target).resolve(strict=False)


def _package_names(node_modules: Path) -> Iterator[str]:
    for entry in sorted(node_modules.iterdir()):
        if not entry.is_dir() or entry.name in IGNORED_PACKAGE_DIRS:
            continue
        if entry.name.startswith("@"):
            for scoped in sorted(entry.iterdir()):
                if scoped.is_dir():
                    yield f"{entry.name}/{scoped.name}"
        else:
            yield entry.name


def iter_node_module_entries(
    cwd: Path,
    *,
    resolver: NodeModuleResolver,
    logger: Logger,
) -> Iterator[Path]:
    """Yield the entry file of every package installed under ``cwd``."""

    node_modules = cwd / "node_modules"
    if not node_modules.is_dir():
        logger.warning("node-modules-missing", path=str(node_modules))
        return
    for name in _package_names(node_modules):
        try:
            entry = resolver(name, cwd)
        except ModuleResolutionError:
            logger.debug("package-entry-unresolved", package=name)
            continue
        if entry.suffix.lower() in _ENTRY_SUFFIXES:
            yield entry


def scan_targets(
    paths: Iterable[Path],
    *,
    analyzer: ExportAnalyzer,
    logger: Logger,
) -> list[ScanOutcome]:
    """Analyze each path, recording failures instead of aborting the scan."""

    outcomes: list[ScanOutcome] = []
    for path in paths:
        try:
            exports = analyzer.analyze_file(path)
        except ExportsError as exc:
            logger.error("scan-failed", path=str(path), kind=exc.kind, error=str(exc))
            outcomes.append(ScanOutcome(path=path, error=str(exc)))
            continue
        outcomes.append(ScanOutcome(path=path, exports=exports))
    return outcomes


def render_outcome(outcome: ScanOutcome) -> list[str]:
    """Return the human readable report lines for ``outcome``."""

    lines = [f"Results for {outcome.path}:"]
    if outcome.exports is None:
        lines.append(f"  error: {outcome.error}")
        return lines

    exports = outcome.exports
    named = ", ".join(exports.named_exports) if exports.named_exports else "(none)"
    lines.append(f"  named exports: {named}")
    if not exports.has_default_export:
        default = "no"
    elif exports.default_export_name:
        default = exports.default_export_name
    else:
        default = "yes (unnamed)"
    lines.append(f"  default export: {default}")
    return lines


def render_json(outcomes: Sequence[ScanOutcome]) -> str:
    """Serialize ``outcomes`` as a JSON document keyed by path."""

    payload = {}
    for outcome in outcomes:
        if outcome.exports is not None:
            payload[str(outcome.path)] = outcome.exports.as_dict()
        else:
            payload[str(outcome.path)] = {"error": outcome.error}
    return json.dumps(payload, indent=2)
