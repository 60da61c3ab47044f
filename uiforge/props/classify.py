"""Mapping of resolved type shapes onto editable prop kinds."""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from .base import (
    ARRAY,
    BOOLEAN_LITERAL,
    FUNCTION,
    INTERSECTION,
    KEYWORD,
    NULLISH,
    NUMBER_LITERAL,
    OBJECT,
    REFERENCE,
    STRING_LITERAL,
    TypeShape,
    UNION,
    flatten,
)

ARRAY_NAMES = {"Array", "ReadonlyArray"}
FUNCTION_NAMES = {"Function", "VoidFunction", "EventHandler"}
NODE_NAMES = {
    "ReactNode",
    "ReactElement",
    "ReactChild",
    "ReactPortal",
    "ReactFragment",
    "Element",
    "JSXElementConstructor",
}
PASS_THROUGH_WRAPPERS = {"Readonly", "Required", "Partial", "NonNullable"}

_MAX_DEPTH = 8

Lookup = Callable[[str], Optional[TypeShape]]


def classify_shape(
    shape: TypeShape, lookup: Optional[Lookup] = None
) -> Tuple[str, Optional[Tuple[str, ...]]]:
    """Return ``(kind, options)`` for a prop's type shape.

    ``lookup`` resolves a reference name to the shape of a type alias so local
    unions such as ``type Size = 'sm' | 'md'`` classify as enums.
    """
    members = _expand(shape, lookup or _no_lookup, 0)
    members = [member for member in members if member.kind != NULLISH]
    if not members:
        return "string", None

    if all(_is_boolean(member) for member in members):
        return "boolean", None
    if len(members) == 1:
        return _classify_single(members[0])
    if all(member.kind == STRING_LITERAL for member in members):
        options: List[str] = []
        for member in members:
            if member.value is not None and member.value not in options:
                options.append(member.value)
        return "enum", tuple(options)
    if all(_is_number(member) for member in members):
        return "number", None
    return "string", None


def _no_lookup(_: str) -> Optional[TypeShape]:
    return None


def _expand(shape: TypeShape, lookup: Lookup, depth: int) -> List[TypeShape]:
    """Union members of ``shape`` with aliases and pass-through wrappers resolved."""
    if depth > _MAX_DEPTH:
        return [shape]
    expanded: List[TypeShape] = []
    for member in flatten(shape, UNION):
        if member.kind == REFERENCE:
            name = member.reference_name
            if name in PASS_THROUGH_WRAPPERS and member.arguments:
                expanded.extend(_expand(member.arguments[0], lookup, depth + 1))
                continue
            target = lookup(member.value or "")
            if target is not None:
                expanded.extend(_expand(target, lookup, depth + 1))
                continue
        expanded.append(member)
    return expanded


def _is_boolean(shape: TypeShape) -> bool:
    return shape.kind == BOOLEAN_LITERAL or (shape.kind == KEYWORD and shape.value == "boolean")


def _is_number(shape: TypeShape) -> bool:
    return shape.kind == NUMBER_LITERAL or (shape.kind == KEYWORD and shape.value == "number")


def _classify_single(shape: TypeShape) -> Tuple[str, Optional[Tuple[str, ...]]]:
    if _is_boolean(shape):
        return "boolean", None
    if _is_number(shape):
        return "number", None
    if shape.kind == STRING_LITERAL or (shape.kind == KEYWORD and shape.value == "string"):
        return "string", None
    if shape.kind == ARRAY:
        return "array", None
    if shape.kind == FUNCTION:
        return "function", None
    if shape.kind == REFERENCE:
        name = shape.reference_name
        if name in ARRAY_NAMES:
            return "array", None
        if name in FUNCTION_NAMES or name.endswith("Handler"):
            return "function", None
        if name in NODE_NAMES or name.endswith("Element"):
            return "reactnode", None
        return "object", None
    if shape.kind in (OBJECT, INTERSECTION):
        return "object", None
    if shape.kind == KEYWORD and shape.value == "object":
        return "object", None
    return "string", None


__all__ = ["classify_shape"]
