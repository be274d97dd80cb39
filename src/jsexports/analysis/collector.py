"""Statement-by-statement export collection.

:class:`ExportCollector` walks the top-level statements once, applying the
native ``export`` rules and the ``module.exports``/``exports`` mutation rules
to a single :class:`~jsexports.analysis.models.ModuleExports` accumulator.
Later statements may override what earlier ones recorded.
"""

from __future__ import annotations

from dataclasses import dataclass, field as dc_field
from typing import Callable, Sequence

from tree_sitter import Node

from .bindings import expression_of, iter_declarators
from .models import AliasSet, ModuleExports, RootIdentifierTable, SourceLocation
from .syntax import (
    declaration_names,
    export_target_name,
    expression_export_name,
    expression_in_set,
    field,
    identifier_name,
    is_identifier_named,
    is_member_accessing,
    iter_named,
    member_chain,
    string_value,
    text_of,
    unwrap,
)

__all__ = ["ExportCollector", "ReexportHook"]

# Receives a specifier and the location of the statement naming it; returns
# the target module's exports, or ``None`` when the target was skipped.
ReexportHook = Callable[[str, SourceLocation | None], ModuleExports | None]

_DEFINE_PROPERTY_OWNERS = ("Object", "Reflect")


@dataclass(slots=True)
class ExportCollector:
    """Collect the exports declared by a module body."""

    aliases: AliasSet
    root_identifiers: RootIdentifierTable
    resolve_reexport: ReexportHook
    resolve_export_all: ReexportHook | None = None
    exports: ModuleExports = dc_field(default_factory=ModuleExports)
    location: SourceLocation | None = None

    def collect(self, body: Sequence[Node]) -> ModuleExports:
        for statement in body:
            self.location = SourceLocation.from_node(statement)
            self._add_native_exports(statement)
            self._add_object_exports(statement)
        return self.exports

    # ------------------------------------------------------------------
    # export ... statements
    # ------------------------------------------------------------------
    def _add_native_exports(self, statement: Node) -> None:
        if statement.type != "export_statement":
            return
        if any(child.type == "default" for child in statement.children):
            self._add_default_export(statement)
            return

        for child in iter_named(statement):
            if child.type == "export_clause":
                self._add_export_clause(child)
            elif child.type == "namespace_export":
                # export * as ns from '...'
                for name_node in iter_named(child):
                    name = identifier_name(name_node) or string_value(name_node)
                    if name:
                        self.exports.named_exports.append(name)

        names = declaration_names(field(statement, "declaration"))
        if isinstance(names, list):
            self.exports.named_exports.extend(names)
        elif names:
            self.exports.named_exports.append(names)

        if self._is_export_all(statement):
            specifier = string_value(field(statement, "source"))
            if specifier is not None:
                resolve = self.resolve_export_all or self.resolve_reexport
                target = resolve(specifier, self.location)
                if target is not None:
                    self.exports.named_exports.extend(target.named_exports)

    def _add_export_clause(self, clause: Node) -> None:
        for specifier in iter_named(clause):
            if specifier.type != "export_specifier":
                continue
            local = self._specifier_name(field(specifier, "name"))
            alias = self._specifier_name(field(specifier, "alias"))
            exported = alias if alias is not None else local
            if exported == "default":
                # export { foo as default }
                self.exports.has_default_export = True
                self.exports.default_export_name = local
            elif exported:
                self.exports.named_exports.append(exported)

    @staticmethod
    def _specifier_name(node: Node | None) -> str | None:
        if node is None:
            return None
        value = string_value(node)
        return value if value is not None else text_of(node)

    @staticmethod
    def _is_export_all(statement: Node) -> bool:
        has_star = any(child.type == "*" for child in statement.children)
        has_namespace = any(
            child.type == "namespace_export" for child in statement.named_children
        )
        return has_star and not has_namespace

    def _add_default_export(self, statement: Node) -> None:
        self.exports.has_default_export = True
        target = field(statement, "declaration") or field(statement, "value")
        name = export_target_name(target)
        if isinstance(name, str) and name:
            self.exports.default_export_name = name

    # ------------------------------------------------------------------
    # module.exports / exports mutations
    # ------------------------------------------------------------------
    def _add_object_exports(self, statement: Node) -> None:
        expression = expression_of(statement)
        if expression is not None:
            if expression.type == "call_expression":
                self._add_defined_property(expression)
            elif expression.type == "assignment_expression":
                self._add_assignment(expression)
            return

        # const x = exports.foo = ...
        for _, value in iter_declarators(statement):
            if value is not None and value.type == "assignment_expression":
                self._add_assignment(value)

    def _add_defined_property(self, call: Node) -> None:
        """Handle ``Object.defineProperty(exports, 'name', ...)``."""

        callee = field(call, "function")
        if not any(
            is_member_accessing(callee, owner, "defineProperty")
            for owner in _DEFINE_PROPERTY_OWNERS
        ):
            return
        arguments = field(call, "arguments")
        args = list(iter_named(arguments)) if arguments is not None else []
        if len(args) < 2 or not expression_in_set(self.aliases, args[0]):
            return
        name = string_value(args[1])
        if name is not None:
            self.exports.named_exports.append(name)

    def _add_assignment(self, assignment: Node) -> None:
        right = unwrap(field(assignment, "right"))
        if right is not None and right.type == "assignment_expression":
            self._add_assignment(right)

        left = field(assignment, "left")
        if expression_in_set(self.aliases, left):
            self._add_exports_object(right)
        else:
            self._add_exports_property(left, right)

    def _add_exports_object(self, value: Node | None) -> None:
        """Handle ``module.exports = <value>`` and its aliases."""

        value = self._terminal(value)
        if value is None:
            return

        specifier = self._required_specifier(value)
        if specifier is not None:
            target = self.resolve_reexport(specifier, self.location)
            if target is not None:
                self.exports.replace_with(target)
            return

        name = text_of(value) if value.type == "identifier" else None
        if name is not None and name in self.root_identifiers:
            # module.exports = localName
            resolved = self.root_identifiers[name]
        else:
            resolved = expression_export_name(value)

        if isinstance(resolved, (list, tuple)):
            self.exports.named_exports = list(resolved)
            return
        self.exports.has_default_export = True
        if resolved:
            self.exports.default_export_name = resolved

    @staticmethod
    def _terminal(value: Node | None) -> Node | None:
        """Follow chained assignments, then the "then" branch of ternaries."""

        value = unwrap(value)
        while value is not None:
            if value.type == "assignment_expression":
                value = unwrap(field(value, "right"))
            elif value.type == "ternary_expression":
                value = unwrap(field(value, "consequence"))
            else:
                break
        return value

    @staticmethod
    def _required_specifier(value: Node) -> str | None:
        """Return ``'x'`` for ``require('x')``."""

        if value.type != "call_expression":
            return None
        if not is_identifier_named(field(value, "function"), "require"):
            return None
        arguments = field(value, "arguments")
        args = list(iter_named(arguments)) if arguments is not None else []
        if len(args) != 1:
            return None
        return string_value(args[0])

    def _add_exports_property(self, left: Node | None, right: Node | None) -> None:
        """Handle ``exports.name = ...`` and ``module.exports.a.b = ...``."""

        owner, properties = member_chain(left)
        if owner is None or not properties:
            return

        name: str | None = None
        first = properties[0]
        if (
            len(properties) >= 2
            and first is not None
            and f"{owner}.{first}" in self.aliases
        ):
            name = properties[1]
        elif owner in self.aliases:
            name = first

        if name is None:
            return
        if name != "default":
            self.exports.named_exports.append(name)
            return

        # module.exports.default = foo
        self.exports.has_default_export = True
        value = unwrap(right)
        if value is not None and value.type == "identifier":
            local = text_of(value)
            binding = self.root_identifiers.get(local)
            self.exports.default_export_name = (
                binding if isinstance(binding, str) else local
            )
