"""Default prop values recovered from a component's destructured parameter."""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

from .typetext import find_top_level, matching_close, split_top_level, strip_comments

_MISSING = object()

_INT_RE = re.compile(r"^-?\d+$")
_FLOAT_RE = re.compile(r"^-?(?:\d+\.\d*|\.\d+|\d+(?:\.\d*)?e[+-]?\d+)$", re.I)
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][\w$]*$")

_WRAP = r"(?:(?:React\s*\.\s*)?memo\s*\(\s*)?"
_GENERIC = r"(?:<[^(]*?>)?"


def _patterns(component_name: str):  # type: ignore[no-untyped-def]
    name = re.escape(component_name)
    return (
        # const Button = React.forwardRef<El, Props>(({ a = 1 }, ref) => ...)
        re.compile(
            rf"\b{name}\s*(?::[^=]+?)?=\s*{_WRAP}(?:React\s*\.\s*)?forwardRef\s*{_GENERIC}\s*\(\s*"
            r"(?:function\s*[\w$]*\s*)?\(\s*(\{)"
        ),
        # const Button: React.FC<Props> = ({ a = 1 }) => ...
        re.compile(rf"\b{name}\s*(?::[^=]+?)?=\s*{_WRAP}(?:async\s*)?\(\s*(\{{)"),
        # function Button({ a = 1 }: Props) { ... }
        re.compile(rf"\bfunction\s+{name}\s*{_GENERIC}\s*\(\s*(\{{)"),
    )


# export default forwardRef(({ a = 1 }, ref) => ...) names no binding to check against.
_DEFAULT_EXPORT_FORWARD_REF = re.compile(
    rf"\bexport\s+default\s+{_WRAP}(?:React\s*\.\s*)?forwardRef\s*{_GENERIC}\s*\(\s*"
    r"(?:function\s*[\w$]*\s*)?\(\s*(\{)"
)


def find_destructured_props(source: str, component_name: str) -> Optional[str]:
    """Inner text of the component's destructured props pattern, if any."""
    text = strip_comments(source)
    for pattern in _patterns(component_name):
        match = pattern.search(text)
        if match:
            return _block(text, match.start(1))
    match = _DEFAULT_EXPORT_FORWARD_REF.search(text)
    if match:
        return _block(text, match.start(1))
    return None


def _block(text: str, open_brace: int) -> str:
    return text[open_brace + 1 : matching_close(text, open_brace)]


def extract_defaults(source: str, component_name: str) -> Dict[str, Any]:
    """Map prop names to literal defaults declared in the destructuring pattern."""
    block = find_destructured_props(source, component_name)
    if block is None:
        return {}
    return parse_destructured_defaults(block)


def parse_destructured_defaults(block: str) -> Dict[str, Any]:
    defaults: Dict[str, Any] = {}
    for part in split_top_level(block, ","):
        if part.startswith("..."):
            continue
        equals = find_top_level(part, 0, "=")
        if equals == -1:
            continue
        name = part[:equals].split(":", 1)[0].strip()
        if not _IDENTIFIER_RE.match(name):
            continue
        value = coerce_literal(part[equals + 1 :])
        if value is not _MISSING:
            defaults[name] = value
    return defaults


def coerce_literal(expression: str) -> Any:
    """Coerce a literal default (boolean, integer, float or quoted string).

    Returns a sentinel for anything else; use :func:`is_literal` to test.
    """
    text = expression.strip()
    if text == "true":
        return True
    if text == "false":
        return False
    if _INT_RE.match(text):
        return int(text)
    if _FLOAT_RE.match(text):
        return float(text)
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"`":
        inner = text[1:-1]
        if text[0] == "`" and "${" in inner:
            return _MISSING
        return re.sub(r"\\(.)", r"\1", inner)
    return _MISSING


def is_literal(value: Any) -> bool:
    return value is not _MISSING


__all__ = [
    "coerce_literal",
    "extract_defaults",
    "find_destructured_props",
    "is_literal",
    "parse_destructured_defaults",
]
