"""Line-pattern prop extraction used when the resolver finds nothing."""

from __future__ import annotations

import re
from typing import List

from ..models import PropDef
from .defaults import extract_defaults
from .typetext import matching_close, strip_comments

SKIP_PROPS = frozenset(
    {
        "className",
        "style",
        "ref",
        "key",
        "id",
        "tabIndex",
        "role",
        "aria-label",
        "aria-labelledby",
        "aria-describedby",
        "aria-hidden",
        "data-testid",
    }
)

_LINE_RE = re.compile(r"^\s*(\w+)\??\s*:\s*([^;]+);", re.M)
_OPTION_RE = re.compile(r"^['\"]([\w\- ]+)['\"]$")


def fallback_prop_defs(source: str, component_name: str) -> List[PropDef]:
    """Read ``name?: type;`` lines from the component's props interface."""
    text = strip_comments(source)
    body = _interface_body(text, _props_interface_name(text, component_name))
    if body is None:
        return []

    defaults = extract_defaults(source, component_name)
    prop_defs: List[PropDef] = []
    for match in _LINE_RE.finditer(body):
        name = match.group(1)
        if name in SKIP_PROPS:
            continue
        type_text = _resolve_alias(text, match.group(2).strip())
        kind, options = _classify(type_text)
        prop_defs.append(
            PropDef(name=name, kind=kind, options=options, default_value=defaults.get(name))
        )
    return prop_defs


def _props_interface_name(text: str, component_name: str) -> str:
    name = f"{component_name}Props"
    if re.search(rf"\binterface\s+{re.escape(name)}\b", text):
        return name
    generic = re.search(
        rf"\b{re.escape(component_name)}\b[^=\n]*=\s*(?:React\.)?forwardRef\s*<([^>]+)>", text
    )
    if generic:
        parts = [part.strip() for part in generic.group(1).split(",")]
        if len(parts) > 1:
            return parts[1]
        if parts[0].endswith("Props"):
            return parts[0]
    return name


def _interface_body(text: str, name: str):  # type: ignore[no-untyped-def]
    match = re.search(rf"\binterface\s+{re.escape(name)}\b[^{{]*\{{", text)
    if not match:
        return None
    open_brace = match.end() - 1
    return text[open_brace + 1 : matching_close(text, open_brace)]


def _resolve_alias(text: str, type_text: str) -> str:
    if re.fullmatch(r"[A-Z]\w+", type_text):
        alias = re.search(rf"\btype\s+{type_text}\s*=\s*([^;]+);", text)
        if alias:
            return alias.group(1).strip()
    return type_text


def _classify(type_text: str):  # type: ignore[no-untyped-def]
    if type_text == "boolean":
        return "boolean", None
    if "|" in type_text and "=>" not in type_text:
        parts = [part.strip() for part in type_text.split("|") if part.strip()]
        parts = [part for part in parts if part not in ("undefined", "null")]
        if parts and all(part in ("true", "false", "boolean") for part in parts):
            return "boolean", None
        options = [_OPTION_RE.match(part) for part in parts]
        if parts and all(options):
            return "enum", tuple(option.group(1) for option in options if option)
        return "string", None
    if type_text == "number":
        return "number", None
    if type_text.endswith("[]") or type_text.startswith("Array<"):
        return "array", None
    if "=>" in type_text or type_text.startswith("("):
        return "function", None
    if "ReactNode" in type_text or "ReactElement" in type_text:
        return "reactnode", None
    return "string", None


__all__ = ["SKIP_PROPS", "fallback_prop_defs"]
