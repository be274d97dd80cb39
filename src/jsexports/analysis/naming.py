"""Path-based fallback names for default exports."""

from __future__ import annotations

import re
from pathlib import PurePath
from typing import Iterable

__all__ = ["GENERIC_NAMES", "camel_case", "guess_default_export_name"]

GENERIC_NAMES: tuple[str, ...] = ("dist", "bin", "lib", "src", "index")

_LEADING_SEPARATORS_RE = re.compile(r"^[_.\- ]+")
_SEPARATED_WORD_RE = re.compile(r"[_.\- ]+(\w|$)")
_LOWER_ALNUM_RE = re.compile(r"^[a-z\d]+$")
_INVALID_IDENTIFIER_RE = re.compile(r"[^\w$]")


def _preserve_camel_case(value: str) -> str:
    """Insert separators at case boundaries so they survive lowercasing.

    ``fooBar`` becomes ``foo-Bar`` and ``XMLHttp`` becomes ``XML-Http``.
    """

    chars = list(value)
    was_lower = was_upper = was_prev_upper = False
    index = 0
    while index < len(chars):
        char = chars[index]
        if was_lower and char.isalpha() and char.upper() == char:
            chars.insert(index, "-")
            was_lower = False
            was_prev_upper = was_upper
            was_upper = True
            index += 1
        elif (
            was_upper
            and was_prev_upper
            and char.isalpha()
            and char.lower() == char
        ):
            # the current character is revisited after the shift
            chars.insert(index - 1, "-")
            was_prev_upper = was_upper
            was_upper = False
            was_lower = True
        else:
            was_lower = char.lower() == char
            was_prev_upper = was_upper
            was_upper = char.upper() == char
        index += 1
    return "".join(chars)


def camel_case(value: str) -> str:
    """Convert dashed, dotted, spaced or snake names to camelCase.

    Example:
        >>> camel_case("left-pad")
        'leftPad'
        >>> camel_case("XMLHttpRequest")
        'xmlHttpRequest'
    """

    value = value.strip()
    if len(value) == 1:
        return value.lower()
    if _LOWER_ALNUM_RE.match(value):
        return value
    if value != value.lower():
        value = _preserve_camel_case(value)
    value = _LEADING_SEPARATORS_RE.sub("", value).lower()
    return _SEPARATED_WORD_RE.sub(lambda match: match.group(1).upper(), value)


def _identifier_safe(name: str) -> str:
    name = _INVALID_IDENTIFIER_RE.sub("", name)
    if name and name[0].isdigit():
        name = f"_{name}"
    return name


def guess_default_export_name(
    absolute_file_path: str | PurePath,
    generic_names: Iterable[str] = GENERIC_NAMES,
) -> str:
    """Derive a default export name from a module's location.

    Placeholder names such as ``index`` or ``lib`` are replaced by their
    parent directory's name until a meaningful one is found.

    Example:
        >>> guess_default_export_name("/pkgs/left-pad/lib/index.js")
        'leftPad'
    """

    placeholders = frozenset(name for name in generic_names if name)
    path = PurePath(absolute_file_path)
    name = path.stem
    while name in placeholders:
        path = path.parent
        name = path.stem
    return _identifier_safe(camel_case(name))
