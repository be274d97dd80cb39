"""Top-level scans that run before export collection.

Three single passes over a module's top-level statements: locating the body
(unwrapping an immediately-invoked wrapper), collecting the local aliases of
the exports object, and recording what each root identifier would export if
it were itself assigned to ``module.exports``.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Sequence

from tree_sitter import Node, Tree

from .models import AliasSet, RootBinding, RootIdentifierTable
from .syntax import (
    CLASS_DECLARATIONS,
    FUNCTION_DECLARATIONS,
    VARIABLE_DECLARATIONS,
    field,
    identifier_name,
    is_block_function_expression,
    is_identifier_named,
    is_member_access,
    is_member_accessing,
    iter_named,
    member_chain,
    object_keys,
    text_of,
    unwrap,
)

__all__ = [
    "DEFAULT_ALIASES",
    "expression_of",
    "find_module_body",
    "find_module_exports_aliases",
    "find_root_identifiers",
    "iter_declarators",
]

DEFAULT_ALIASES: AliasSet = frozenset({"module.exports", "exports"})

_CLASS_EXPRESSIONS = {"class"}
_FUNCTION_EXPRESSIONS = {"function_expression", "function", "generator_function"}


def expression_of(statement: Node) -> Node | None:
    """Return the unwrapped expression of an ``expression_statement``."""

    if statement.type != "expression_statement":
        return None
    for child in iter_named(statement):
        return unwrap(child)
    return None


def iter_declarators(statement: Node) -> list[tuple[Node, Node | None]]:
    """Return ``(name, value)`` pairs of a ``var``/``let``/``const`` statement."""

    if statement.type not in VARIABLE_DECLARATIONS:
        return []
    pairs: list[tuple[Node, Node | None]] = []
    for declarator in iter_named(statement):
        if declarator.type != "variable_declarator":
            continue
        name = field(declarator, "name")
        if name is not None:
            pairs.append((name, unwrap(field(declarator, "value"))))
    return pairs


def _function_body(node: Node) -> list[Node]:
    body = field(unwrap(node), "body")
    return list(iter_named(body)) if body is not None else []


def find_module_body(tree: Tree) -> list[Node]:
    """Return the statements to analyze.

    When the whole program is one immediately-invoked function, either called
    directly or through ``.call``/``.apply``, the function's own body is
    analyzed instead. Only one level of wrapping is unwrapped.
    """

    body = list(iter_named(tree.root_node))
    if len(body) != 1:
        return body
    expression = expression_of(body[0])
    if expression is None or expression.type != "call_expression":
        return body

    callee = unwrap(field(expression, "function"))
    if is_member_access(callee):
        target = unwrap(field(callee, "object"))
        if is_block_function_expression(target):
            return _function_body(target)
    elif is_block_function_expression(callee):
        return _function_body(callee)
    return body


def find_module_exports_aliases(body: Sequence[Node]) -> AliasSet:
    """Collect top-level names bound to ``module.exports`` or ``exports``."""

    aliases = set(DEFAULT_ALIASES)
    for statement in body:
        for name, value in iter_declarators(statement):
            if name.type != "identifier" or value is None:
                continue
            if is_member_accessing(
                value, "module", "exports"
            ) or is_identifier_named(value, "exports"):
                aliases.add(text_of(name))
    return frozenset(aliases)


def find_root_identifiers(body: Sequence[Node]) -> RootIdentifierTable:
    """Record the export shape of every root-level binding.

    Handles ``let api = {a, b}; api.c = d; module.exports = api`` style
    indirection: object literals contribute their keys, property assignments
    append to the owner's list, and functions/classes map to their canonical
    name.
    """

    table: dict[str, list[str] | str] = {}
    for statement in body:
        expression = expression_of(statement)
        if (
            expression is not None
            and expression.type == "assignment_expression"
            and is_member_access(field(expression, "left"))
        ):
            owner, properties = member_chain(field(expression, "left"))
            prop = properties[0] if properties else None
            if owner is not None and prop is not None:
                names = table.get(owner)
                if names is None:
                    table[owner] = [prop]
                elif isinstance(names, list):
                    names.append(prop)

        for name_node, value in iter_declarators(statement):
            name = identifier_name(name_node)
            if name is None or value is None:
                continue
            if value.type == "object":
                table[name] = object_keys(value)
            elif value.type in _FUNCTION_EXPRESSIONS | _CLASS_EXPRESSIONS:
                own = field(value, "name")
                table[name] = text_of(own) if own is not None else name

        if statement.type in FUNCTION_DECLARATIONS | CLASS_DECLARATIONS:
            name = identifier_name(field(statement, "name"))
            if name is not None:
                table[name] = name

    frozen: dict[str, RootBinding] = {
        key: tuple(value) if isinstance(value, list) else value
        for key, value in table.items()
    }
    return MappingProxyType(frozen)
