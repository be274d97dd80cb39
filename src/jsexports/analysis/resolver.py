"""Module resolution and file reading collaborators.

:class:`NodeModuleResolver` follows the Node.js lookup rules closely enough
for re-export resolution: relative and absolute specifiers are tried as a
file, with each configured extension, then as a package directory; bare
specifiers are searched in ``node_modules`` directories from the base
directory upward.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Iterator, Protocol, Sequence

from .errors import ModuleReadError, ModuleResolutionError

__all__ = [
    "DEFAULT_EXTENSIONS",
    "ModuleResolver",
    "NodeModuleResolver",
    "SourceReader",
    "read_source",
]

DEFAULT_EXTENSIONS: tuple[str, ...] = (
    ".js",
    ".jsx",
    ".json",
    ".node",
    ".mjs",
    ".cjs",
    ".ts",
    ".tsx",
    ".mts",
    ".cts",
)


class ModuleResolver(Protocol):
    """Map a specifier and a base directory to an absolute file path."""

    def __call__(self, specifier: str, basedir: Path) -> Path: ...


class SourceReader(Protocol):
    """Return the text content of a resolved module."""

    def __call__(self, path: Path) -> str: ...


def read_source(path: Path) -> str:
    """Read ``path`` as UTF-8 text.

    Raises:
        ModuleReadError: If the file is missing or not valid UTF-8.
    """

    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ModuleReadError(
            f"Failed to read module {path}: {exc}",
            path=path,
        ) from exc


def _is_path_specifier(specifier: str) -> bool:
    return specifier.startswith(("./", "../", "/")) or specifier in {".", ".."}


@dataclass(frozen=True, slots=True)
class NodeModuleResolver:
    """Resolve ``require()`` specifiers the way Node.js does."""

    extensions: Sequence[str] = DEFAULT_EXTENSIONS

    def __call__(self, specifier: str, basedir: Path) -> Path:
        """Return the absolute path ``specifier`` refers to from ``basedir``.

        Raises:
            ModuleResolutionError: If no candidate file exists.
        """

        basedir = Path(basedir).resolve(strict=False)
        if _is_path_specifier(specifier):
            candidate = basedir / specifier
            if specifier.endswith("/") or specifier in {".", ".."}:
                resolved = self._load_as_directory(candidate)
            else:
                resolved = self._load_as_file(
                    candidate
                ) or self._load_as_directory(candidate)
        else:
            resolved = self._load_node_modules(specifier, basedir)

        if resolved is None:
            raise ModuleResolutionError(
                f"Cannot find module {specifier!r} from {basedir}",
                specifier=specifier,
                basedir=basedir,
            )
        return resolved.resolve(strict=False)

    def _load_as_file(self, candidate: Path) -> Path | None:
        if candidate.is_file():
            return candidate
        for extension in self.extensions:
            with_extension = candidate.with_name(candidate.name + extension)
            if with_extension.is_file():
                return with_extension
        return None

    def _load_index(self, directory: Path) -> Path | None:
        for extension in self.extensions:
            index = directory / f"index{extension}"
            if index.is_file():
                return index
        return None

    def _package_main(self, directory: Path) -> str | None:
        manifest = directory / "package.json"
        if not manifest.is_file():
            return None
        try:
            payload = json.loads(manifest.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            # an unreadable manifest falls back to index lookup, as in Node
            return None
        main = payload.get("main") if isinstance(payload, dict) else None
        return main if isinstance(main, str) and main.strip() else None

    def _load_as_directory(self, directory: Path) -> Path | None:
        if not directory.is_dir():
            return None
        main = self._package_main(directory)
        if main is not None:
            target = directory / main
            resolved = self._load_as_file(target) or self._load_index(target)
            if resolved is not None:
                return resolved
        return self._load_index(directory)

    @staticmethod
    def _node_modules_dirs(basedir: Path) -> Iterator[Path]:
        for directory in (basedir, *basedir.parents):
            if directory.name == "node_modules":
                continue
            yield directory / "node_modules"

    def _load_node_modules(self, specifier: str, basedir: Path) -> Path | None:
        for modules_dir in self._node_modules_dirs(basedir):
            candidate = modules_dir / specifier
            resolved = self._load_as_file(candidate) or self._load_as_directory(
                candidate
            )
            if resolved is not None:
                return resolved
        return None
