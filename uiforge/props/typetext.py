"""Text-level helpers for reading TypeScript type expressions."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from .base import (
    ARRAY,
    BOOLEAN_LITERAL,
    FUNCTION,
    INTERSECTION,
    KEYWORD,
    NULLISH,
    NUMBER_LITERAL,
    OBJECT,
    OTHER,
    PropertySignature,
    REFERENCE,
    STRING_LITERAL,
    TypeShape,
    UNION,
)

KEYWORDS = {
    "string",
    "number",
    "boolean",
    "bigint",
    "symbol",
    "any",
    "unknown",
    "never",
    "object",
    "void",
}

_NUMBER_RE = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?$", re.I)
_REFERENCE_RE = re.compile(r"^([A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*)\s*(?:<(.*)>)?$", re.S)
_MEMBER_RE = re.compile(
    r"^(?:readonly\s+)?(?:(['\"])(?P<quoted>.+?)\1|(?P<name>[A-Za-z_$][\w$]*))"
    r"(?P<optional>\?)?\s*(?P<next>[(<:])",
    re.S,
)

_OPEN = "([{<"
_CLOSE = ")]}>"


def strip_comments(source: str) -> str:
    """Remove ``//`` and ``/* */`` comments, leaving strings and newlines intact."""
    output: List[str] = []
    index = 0
    length = len(source)
    while index < length:
        char = source[index]
        if char in "\"'`":
            end = _string_end(source, index)
            output.append(source[index:end])
            index = end
            continue
        if source.startswith("//", index):
            newline = source.find("\n", index)
            index = length if newline == -1 else newline
            continue
        if source.startswith("/*", index):
            end = source.find("*/", index + 2)
            comment = source[index : length if end == -1 else end + 2]
            output.append("\n" * comment.count("\n"))
            index = length if end == -1 else end + 2
            continue
        output.append(char)
        index += 1
    return "".join(output)


def _string_end(text: str, index: int) -> int:
    quote = text[index]
    position = index + 1
    while position < len(text):
        char = text[position]
        if char == "\\":
            position += 2
            continue
        if char == quote:
            return position + 1
        if char == "\n" and quote != "`":
            return position
        position += 1
    return len(text)


def _is_arrow(text: str, index: int) -> bool:
    return text[index] == ">" and index > 0 and text[index - 1] == "="


def iter_top_level(text: str, start: int = 0, end: Optional[int] = None):  # type: ignore[no-untyped-def]
    """Yield ``(index, char)`` for characters outside brackets, generics and strings."""
    end = len(text) if end is None else end
    depth = 0
    index = start
    while index < end:
        char = text[index]
        if char in "\"'`":
            index = _string_end(text, index)
            continue
        if char in _OPEN:
            if depth == 0:
                yield index, char
            depth += 1
        elif char in _CLOSE and not _is_arrow(text, index):
            depth = max(0, depth - 1)
            if depth == 0:
                yield index, char
        elif depth == 0:
            yield index, char
        index += 1


def split_top_level(text: str, separator: str) -> List[str]:
    parts: List[str] = []
    last = 0
    for index, char in iter_top_level(text):
        if char == separator:
            parts.append(text[last:index])
            last = index + 1
    parts.append(text[last:])
    return [part.strip() for part in parts if part.strip()]


def matching_close(text: str, open_index: int) -> int:
    """Index of the bracket closing the one at ``open_index`` (or ``len(text)``)."""
    depth = 0
    index = open_index
    while index < len(text):
        char = text[index]
        if char in "\"'`":
            index = _string_end(text, index)
            continue
        if char in _OPEN:
            depth += 1
        elif char in _CLOSE and not _is_arrow(text, index):
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return len(text)


def find_top_level(text: str, start: int, target: str) -> int:
    """First top-level ``target`` at or after ``start`` (``=`` skips ``=>`` and ``==``)."""
    for index, char in iter_top_level(text, start):
        if char != target:
            continue
        if target == "=" and text[index + 1 : index + 2] in ("=", ">"):
            continue
        return index
    return -1


def has_top_level_arrow(text: str) -> bool:
    for index, char in iter_top_level(text):
        if char == "=" and text[index + 1 : index + 2] == ">":
            return True
    return False


def parse_type_text(text: str) -> TypeShape:
    """Parse a type expression into a :class:`TypeShape` by bracket-aware splitting."""
    text = text.strip().rstrip(";").strip()
    while text[:1] in ("|", "&"):
        text = text[1:].strip()
    if not text:
        return TypeShape(OTHER, text)

    parts = split_top_level(text, "|")
    if len(parts) > 1:
        return TypeShape(UNION, text, members=tuple(parse_type_text(part) for part in parts))
    if has_top_level_arrow(text):
        return TypeShape(FUNCTION, text)
    parts = split_top_level(text, "&")
    if len(parts) > 1:
        return TypeShape(
            INTERSECTION, text, members=tuple(parse_type_text(part) for part in parts)
        )

    first = text[0]
    if first == "(" and matching_close(text, 0) == len(text) - 1:
        return parse_type_text(text[1:-1])
    if text.startswith("readonly "):
        return parse_type_text(text[len("readonly ") :])
    if text.endswith("[]"):
        return TypeShape(ARRAY, text, members=(parse_type_text(text[:-2]),))
    if first == "[":
        return TypeShape(ARRAY, text)
    if first == "{":
        return TypeShape(OBJECT, text, properties=parse_members(text[1 : matching_close(text, 0)]))
    if first in "\"'":
        return TypeShape(STRING_LITERAL, text, value=text[1:-1])
    if first == "`":
        return TypeShape(KEYWORD, text, value="string")
    if _NUMBER_RE.match(text):
        return TypeShape(NUMBER_LITERAL, text, value=text)
    if text in ("true", "false"):
        return TypeShape(BOOLEAN_LITERAL, text, value=text)
    if text in ("null", "undefined"):
        return TypeShape(NULLISH, text, value=text)
    if text in KEYWORDS:
        return TypeShape(KEYWORD, text, value=text)

    match = _REFERENCE_RE.match(text)
    if match:
        arguments: Tuple[TypeShape, ...] = ()
        if match.group(2) is not None:
            arguments = tuple(parse_type_text(arg) for arg in split_top_level(match.group(2), ","))
        return TypeShape(REFERENCE, text, value=match.group(1), arguments=arguments)
    return TypeShape(OTHER, text)


def split_members(body: str) -> List[str]:
    """Split an object type body on ``;``, ``,`` and statement-ending newlines."""
    members: List[str] = []
    last = 0
    for index, char in iter_top_level(body):
        if char in ";,":
            members.append(body[last:index])
            last = index + 1
        elif char == "\n" and _newline_ends_member(body, last, index):
            members.append(body[last:index])
            last = index + 1
    members.append(body[last:])
    return [member.strip() for member in members if member.strip()]


def _newline_ends_member(body: str, start: int, index: int) -> bool:
    collected = body[start:index].strip()
    if not collected or collected.endswith(("|", "&", ":", "=>", "(", "<", "?", "=")):
        return False
    rest = body[index:].lstrip()
    return not rest.startswith(("|", "&", "=>", "?", ":"))


def parse_members(body: str) -> Tuple[PropertySignature, ...]:
    properties: List[PropertySignature] = []
    for member in split_members(body):
        match = _MEMBER_RE.match(member)
        if not match:
            continue
        name = match.group("quoted") or match.group("name")
        optional = bool(match.group("optional"))
        if match.group("next") in "(<":
            shape = TypeShape(FUNCTION, member)
        else:
            shape = parse_type_text(member[match.end() :])
        properties.append(PropertySignature(name=name, shape=shape, optional=optional))
    return tuple(properties)


def read_type_expression(text: str, start: int) -> str:
    """Read a type alias right-hand side starting at ``start``."""
    for index, char in iter_top_level(text, start):
        if char == ";":
            return text[start:index]
        if char == "\n" and _newline_ends_member(text, start, index):
            return text[start:index]
    return text[start:]


__all__ = [
    "KEYWORDS",
    "find_top_level",
    "has_top_level_arrow",
    "iter_top_level",
    "matching_close",
    "parse_members",
    "parse_type_text",
    "read_type_expression",
    "split_members",
    "split_top_level",
    "strip_comments",
]
