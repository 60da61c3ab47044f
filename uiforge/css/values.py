"""Classification of authored CSS values and property-name conversion."""

from __future__ import annotations

import re
from typing import Tuple

from ..models import CSSPropertyValue

_VAR_RE = re.compile(r"^var\(\s*(--[\w-]+)\s*(?:,\s*(.+))?\)$", re.S)
_VAR_REFERENCE_RE = re.compile(r"var\(\s*(--[\w-]+)")
_HEX_RE = re.compile(r"^#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_COLOR_FUNCTION_RE = re.compile(
    r"^(?:rgb|rgba|hsl|hsla|hwb|lab|lch|oklab|oklch|color|color-mix)\(", re.I
)
_LENGTH_RE = re.compile(
    r"^-?(?:\d+\.?\d*|\.\d+)(?:px|r?em|%|vh|vw|vmin|vmax|dvh|svh|lvh|ch|ex|pt|pc|cm|mm|in|q|fr)$",
    re.I,
)
_NUMBER_RE = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)$")
_KEYWORD_RE = re.compile(r"^-?[A-Za-z][\w-]*$")

_NAMED_COLORS = {
    "black",
    "white",
    "red",
    "green",
    "blue",
    "yellow",
    "orange",
    "purple",
    "pink",
    "gray",
    "grey",
    "silver",
    "maroon",
    "navy",
    "teal",
    "olive",
    "lime",
    "aqua",
    "cyan",
    "magenta",
    "fuchsia",
    "transparent",
    "currentcolor",
}


def parse_value(raw: str) -> CSSPropertyValue:
    """Describe an authored value: variable reference, category and referenced tokens."""
    value = raw.strip()
    references = tuple(_VAR_REFERENCE_RE.findall(value))
    match = _VAR_RE.match(value)
    if match:
        return CSSPropertyValue(
            raw=value,
            is_variable=True,
            variable_name=match.group(1),
            category="variable",
            references=references,
        )
    return CSSPropertyValue(raw=value, category=classify_value(value), references=references)


def classify_value(value: str) -> str:
    lowered = value.strip().lower()
    if _HEX_RE.match(lowered) or _COLOR_FUNCTION_RE.match(lowered) or lowered in _NAMED_COLORS:
        return "color"
    if _LENGTH_RE.match(lowered):
        return "length"
    if _NUMBER_RE.match(lowered):
        return "length" if float(lowered) == 0 else "number"
    if _KEYWORD_RE.match(lowered):
        return "keyword"
    return "other"


def to_camel_case(name: str) -> str:
    """``background-color`` -> ``backgroundColor``; ``-ms-x`` -> ``msX``; ``-webkit-x`` -> ``WebkitX``."""
    if name.startswith("--"):
        return name
    name = name.lower()
    if name.startswith("-ms-"):
        name = name[1:]
    return re.sub(r"-([a-z])", lambda match: match.group(1).upper(), name)


def split_selector_list(selector: str) -> Tuple[str, ...]:
    """Split a selector list on top-level commas."""
    parts = []
    depth = 0
    current = []
    quote = None
    for char in selector:
        if quote:
            current.append(char)
            if char == quote:
                quote = None
            continue
        if char in "\"'":
            quote = char
        elif char in "([":
            depth += 1
        elif char in ")]":
            depth = max(0, depth - 1)
        elif char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    parts.append("".join(current).strip())
    return tuple(part for part in parts if part)


__all__ = ["classify_value", "parse_value", "split_selector_list", "to_camel_case"]
