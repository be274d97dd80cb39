"""Parser construction and tree-shape helpers over tree-sitter nodes.

Every helper here is a pure predicate or classifier. Parentheses are explicit
nodes in tree-sitter trees, so classifiers unwrap them before inspecting an
expression; comments are extras and are skipped whenever children are listed.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
import re
from typing import AbstractSet, Iterable, Iterator

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser, Tree

__all__ = [
    "CLASS_DECLARATIONS",
    "FUNCTION_DECLARATIONS",
    "VARIABLE_DECLARATIONS",
    "declaration_names",
    "expression_export_name",
    "expression_in_set",
    "export_target_name",
    "field",
    "first_error_node",
    "identifier_name",
    "is_block_function_expression",
    "is_function_expression",
    "is_identifier_named",
    "is_member_access",
    "is_member_accessing",
    "iter_named",
    "member_chain",
    "object_keys",
    "parse_source",
    "pattern_names",
    "string_value",
    "text_of",
    "unwrap",
]

_TYPESCRIPT_SUFFIXES = {".ts", ".mts", ".cts"}

_EXTRA_NODES = {"comment", "hash_bang_line", "html_comment"}

CLASS_DECLARATIONS = {"class_declaration", "abstract_class_declaration"}
FUNCTION_DECLARATIONS = {"function_declaration", "generator_function_declaration"}
VARIABLE_DECLARATIONS = {"lexical_declaration", "variable_declaration"}

_FUNCTION_EXPRESSIONS = {
    "function_expression",
    "function",
    "generator_function",
    "arrow_function",
}
_NAMED_FUNCTION_EXPRESSIONS = {
    "function_expression",
    "function",
    "generator_function",
}
_MEMBER_NODES = {"member_expression", "subscript_expression"}
_ESCAPE_RE = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|[0-7]{1,3}|\r\n|[\s\S])"
)
_SIMPLE_ESCAPES = {
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}
_LINE_CONTINUATIONS = {"\n", "\r", "\r\n", "\u2028", "\u2029"}
_IDENTIFIER_NODES = {
    "identifier",
    "property_identifier",
    "shorthand_property_identifier",
    "shorthand_property_identifier_pattern",
    "type_identifier",
    "private_property_identifier",
}


@lru_cache(maxsize=None)
def _parser_for(dialect: str) -> Parser:
    if dialect == "typescript":
        language = Language(tstypescript.language_typescript())
    else:
        language = Language(tstypescript.language_tsx())
    return Parser(language)


def parse_source(text: str, path: str | Path | None = None) -> Tree:
    """Parse ``text`` with the grammar matching ``path``'s suffix.

    TypeScript files use the TypeScript grammar; everything else (plain
    JavaScript, JSX, flow-annotated sources) uses the TSX grammar.
    """

    suffix = Path(path).suffix.lower() if path is not None else ""
    dialect = "typescript" if suffix in _TYPESCRIPT_SUFFIXES else "tsx"
    return _parser_for(dialect).parse(text.encode("utf-8"))


def first_error_node(nodes: Iterable[Node]) -> Node | None:
    """Return the first node that is, or contains, a syntax error."""

    for node in nodes:
        if node.type == "ERROR" or node.is_missing or node.has_error:
            return node
    return None


def text_of(node: Node) -> str:
    return node.text.decode("utf-8")


def iter_named(node: Node) -> Iterator[Node]:
    """Yield named children of ``node`` that are not comments."""

    for child in node.named_children:
        if child.type not in _EXTRA_NODES:
            yield child


def field(node: Node | None, name: str) -> Node | None:
    if node is None:
        return None
    return node.child_by_field_name(name)


def unwrap(node: Node | None) -> Node | None:
    """Strip any number of enclosing parentheses from ``node``."""

    while node is not None and node.type == "parenthesized_expression":
        inner = list(iter_named(node))
        if not inner:
            return None
        node = inner[0]
    return node


def identifier_name(node: Node | None) -> str | None:
    """Return the name of an identifier-like node, ``None`` otherwise."""

    node = unwrap(node)
    if node is not None and node.type in _IDENTIFIER_NODES:
        return text_of(node)
    return None


def _decode_escape(match: re.Match[str]) -> str:
    body = match.group(1)
    if body.startswith("u{"):
        return chr(int(body[2:-1], 16))
    if body[0] in "ux" and len(body) > 1:
        return chr(int(body[1:], 16))
    if body[0] in "01234567":
        return chr(int(body, 8))
    if body in _LINE_CONTINUATIONS:
        return ""
    return _SIMPLE_ESCAPES.get(body, body)


def _join_surrogates(value: str) -> str:
    # escaped UTF-16 pairs decode to two surrogates; join them
    if not any("\ud800" <= char <= "\udfff" for char in value):
        return value
    return value.encode("utf-16", "surrogatepass").decode("utf-16", "replace")


def string_value(node: Node | None) -> str | None:
    """Return the decoded value of a plain string literal.

    Escape sequences are decoded the way the JavaScript runtime reads them,
    so ``'a\\'b'`` yields ``a'b``.
    """

    node = unwrap(node)
    if node is None or node.type != "string":
        return None
    return _join_surrogates(_ESCAPE_RE.sub(_decode_escape, text_of(node)[1:-1]))


def is_function_expression(node: Node | None) -> bool:
    node = unwrap(node)
    return node is not None and node.type in _FUNCTION_EXPRESSIONS


def is_block_function_expression(node: Node | None) -> bool:
    """Return ``True`` for function/arrow expressions with a block body."""

    node = unwrap(node)
    if not is_function_expression(node):
        return False
    body = field(node, "body")
    return body is not None and body.type == "statement_block"


def is_identifier_named(node: Node | None, name: str) -> bool:
    node = unwrap(node)
    return (
        node is not None and node.type == "identifier" and text_of(node) == name
    )


def is_member_access(node: Node | None) -> bool:
    node = unwrap(node)
    return node is not None and node.type in _MEMBER_NODES


def _property_name(member: Node) -> str | None:
    """Return the accessed property of ``obj.prop`` or ``obj['prop']``."""

    if member.type == "member_expression":
        return identifier_name(field(member, "property"))
    return string_value(field(member, "index"))


def is_member_accessing(
    node: Node | None,
    object_name: str,
    property_name: str,
) -> bool:
    """Check for ``object_name.property_name`` or ``object_name['property_name']``."""

    node = unwrap(node)
    if not is_member_access(node):
        return False
    return is_identifier_named(
        field(node, "object"), object_name
    ) and _property_name(node) == property_name


def member_chain(node: Node | None) -> tuple[str | None, list[str | None]]:
    """Split ``root.a.b.c`` into ``("root", ["a", "b", "c"])``.

    The root is ``None`` when the innermost object is not an identifier;
    computed accesses contribute ``None`` entries.
    """

    properties: list[str | None] = []
    node = unwrap(node)
    while node is not None and node.type in _MEMBER_NODES:
        properties.append(_property_name(node))
        node = unwrap(field(node, "object"))
    properties.reverse()
    root = text_of(node) if node is not None and node.type == "identifier" else None
    return root, properties


def expression_in_set(names: AbstractSet[str], node: Node | None) -> bool:
    """Return ``True`` if ``node`` spells a name contained in ``names``.

    Identifiers match by name; ``obj.prop`` and ``obj['prop']`` match as
    ``"obj.prop"``.
    """

    node = unwrap(node)
    if node is None:
        return False
    if node.type == "identifier":
        return text_of(node) in names
    if node.type in _MEMBER_NODES:
        owner = unwrap(field(node, "object"))
        prop = _property_name(node)
        if owner is None or owner.type != "identifier" or prop is None:
            return False
        return f"{text_of(owner)}.{prop}" in names
    return False


def _key_name(key: Node | None) -> str | None:
    if key is None or key.type == "computed_property_name":
        return None
    if key.type == "string":
        return string_value(key)
    if key.type == "number":
        return text_of(key)
    return identifier_name(key)


def object_keys(node: Node) -> list[str]:
    """Return the own, non-computed property and method names of ``{...}``."""

    keys: list[str] = []
    for prop in iter_named(node):
        if prop.type == "shorthand_property_identifier":
            keys.append(text_of(prop))
            continue
        if prop.type == "pair":
            name = _key_name(field(prop, "key"))
        elif prop.type == "method_definition":
            name = _key_name(field(prop, "name"))
        else:
            # spread elements contribute nothing
            continue
        if name is not None:
            keys.append(name)
    return keys


def pattern_names(pattern: Node | None) -> list[str]:
    """Return the identifiers bound by a declarator's left-hand side."""

    if pattern is None:
        return []
    if pattern.type == "identifier":
        return [text_of(pattern)]
    if pattern.type == "shorthand_property_identifier_pattern":
        return [text_of(pattern)]
    if pattern.type in {"assignment_pattern", "object_assignment_pattern"}:
        return pattern_names(field(pattern, "left"))
    if pattern.type == "pair_pattern":
        return pattern_names(field(pattern, "value"))
    if pattern.type in {"array_pattern", "object_pattern", "rest_pattern"}:
        names: list[str] = []
        for child in iter_named(pattern):
            names.extend(pattern_names(child))
        return names
    return []


def _declared_name(node: Node) -> str | None:
    name = field(node, "name")
    return text_of(name) if name is not None else None


def declaration_names(node: Node | None) -> list[str] | str | None:
    """Return the name(s) a declaration would export.

    Functions and classes contribute their own identifier; variable
    declarations contribute every name bound by their declarators. ``None``
    means the node is not a recognized declaration.
    """

    if node is None:
        return None
    if node.type in CLASS_DECLARATIONS or node.type in FUNCTION_DECLARATIONS:
        return _declared_name(node)
    if node.type in VARIABLE_DECLARATIONS:
        names: list[str] = []
        for declarator in iter_named(node):
            if declarator.type == "variable_declarator":
                names.extend(pattern_names(field(declarator, "name")))
        return names
    return None


def expression_export_name(node: Node | None) -> list[str] | str | None:
    """Classify an exported expression.

    Object literals yield their keys; identifiers, named functions and
    classes, member accesses and simple assignments yield a single name.
    Anything else has no determinate name.
    """

    node = unwrap(node)
    if node is None:
        return None
    kind = node.type
    if kind == "identifier":
        return text_of(node)
    if kind == "object":
        return object_keys(node)
    if kind in _NAMED_FUNCTION_EXPRESSIONS or kind == "class":
        return _declared_name(node)
    if kind in _MEMBER_NODES:
        return _property_name(node)
    if kind == "assignment_expression":
        return identifier_name(field(node, "left"))
    return None


def export_target_name(node: Node | None) -> list[str] | str | None:
    """Dispatch on declarations first, then on expression kinds."""

    names = declaration_names(node)
    if names is not None:
        return names
    return expression_export_name(node)
