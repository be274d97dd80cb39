"""Data structures produced and consumed by the export analysis engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

__all__ = [
    "AliasSet",
    "ModuleExports",
    "RootBinding",
    "RootIdentifierTable",
    "SourceLocation",
]

# A root binding is either the property names a local object carries or the
# canonical name of a local function/class.
RootBinding = tuple[str, ...] | str
RootIdentifierTable = Mapping[str, RootBinding]
AliasSet = frozenset[str]


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """One-based line span of a top-level statement."""

    start_line: int
    end_line: int

    @classmethod
    def from_node(cls, node: Any) -> "SourceLocation":
        """Build a location from a tree-sitter node."""

        return cls(
            start_line=node.start_point[0] + 1,
            end_line=node.end_point[0] + 1,
        )

    def describe(self) -> str:
        """Return a human readable span.

        Example:
            >>> SourceLocation(3, 5).describe()
            'between lines 3 and 5 in the source file'
        """

        return (
            f"between lines {self.start_line} and {self.end_line} "
            "in the source file"
        )


@dataclass(slots=True)
class ModuleExports:
    """Export surface of a single module.

    ``default_export_name`` is only meaningful when ``has_default_export`` is
    set; a default export may exist without a statically known name.
    """

    named_exports: list[str] = field(default_factory=list)
    has_default_export: bool = False
    default_export_name: str | None = None

    def replace_with(self, other: "ModuleExports") -> None:
        """Overwrite every field with the values carried by ``other``."""

        self.named_exports = list(other.named_exports)
        self.has_default_export = other.has_default_export
        self.default_export_name = other.default_export_name

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly mapping.

        Example:
            >>> ModuleExports(["a"], True, "Foo").as_dict()["default_export_name"]
            'Foo'
        """

        return {
            "named_exports": list(self.named_exports),
            "has_default_export": self.has_default_export,
            "default_export_name": self.default_export_name,
        }
