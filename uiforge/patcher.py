"""Non-destructive patching of stylesheets, theme files and the manifest.

All functions here are pure: they take file text and return a
:class:`PatchOutcome` holding the new text. Text outside the edited span is
returned byte-for-byte, and a failed patch always returns the input
unchanged.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple

from .css.structure import (
    CSSStructureError,
    MediaSpan,
    RuleSpan,
    StyleSheetMap,
    build_stylesheet_map,
    clean_prelude,
    map_stylesheet,
    normalize_property,
    scan_stylesheet,
)
from .logging import get_logger

_LOGGER = get_logger("patcher")

MANIFEST_INDENT = 2
DEFAULT_INDENT = "  "

_IMPORTANT_RE = re.compile(r"\s*!\s*important\s*$", re.I)


class PatchStatus(str, Enum):
    PATCHED = "patched"
    FALLBACK_PATCHED = "fallback_patched"
    FAILED = "failed"


@dataclass(frozen=True)
class PatchOutcome:
    """Result of a patch: the new text plus the value it replaced."""

    status: PatchStatus
    text: str
    previous_value: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status is not PatchStatus.FAILED


def _failed(text: str, error: str) -> PatchOutcome:
    _LOGGER.debug("Patch rejected: %s", error)
    return PatchOutcome(PatchStatus.FAILED, text, error=error)


# ----------------------------------------------------------------------
# CSS properties


def read_css_property(
    text: str, selector: str, prop: str, media_query: Optional[str] = None
) -> Optional[str]:
    """Return the authored value of ``prop`` in the rule an edit would target."""
    sheet, _ = build_stylesheet_map(text)
    return _read(sheet, selector, prop, media_query)


def patch_css_property(
    text: str,
    selector: str,
    prop: str,
    value: str,
    media_query: Optional[str] = None,
) -> PatchOutcome:
    """Set ``prop`` to ``value`` for ``selector`` (optionally inside a media block).

    The structural map is tried first; input that does not tokenize cleanly is
    patched from the lenient scan and reported as ``FALLBACK_PATCHED``. The
    result is re-read before it is returned, so success guarantees the value is
    in place.
    """
    problem = _validate_css_edit(selector, prop, value)
    if problem:
        return _failed(text, problem)

    selector = clean_prelude(selector)
    name = normalize_property(prop)
    core, important = _split_important(value.strip())
    media = media_query.strip() if media_query and media_query.strip() else None

    try:
        sheet = map_stylesheet(text)
        status = PatchStatus.PATCHED
    except CSSStructureError as exc:
        _LOGGER.warning("Stylesheet is not well-formed (%s); patching from text scan", exc)
        sheet = scan_stylesheet(text)
        status = PatchStatus.FALLBACK_PATCHED

    previous = _read(sheet, selector, name, media)
    new_text = _apply_css_edit(sheet, selector, name, core, important, media)

    try:
        check = map_stylesheet(new_text) if status is PatchStatus.PATCHED else scan_stylesheet(new_text)
    except CSSStructureError as exc:
        return _failed(text, f"Patched stylesheet no longer parses: {exc}")
    if _read(check, selector, name, media) != core:
        return _failed(text, f"Could not place {name} for {selector!r} without disturbing other rules")
    return PatchOutcome(status, new_text, previous_value=previous)


def _read(
    sheet: StyleSheetMap, selector: str, prop: str, media: Optional[str]
) -> Optional[str]:
    rule = sheet.find_rule(selector, media)
    if rule is None:
        # Edits to a list member get their own rule; the list still holds the authored value.
        rule = sheet.find_member_rule(selector, media)
    if rule is None:
        return None
    declaration = rule.declaration(prop)
    if declaration is None:
        return None
    return declaration.value(sheet.text)


def _validate_css_edit(selector: str, prop: str, value: str) -> Optional[str]:
    if not selector or not selector.strip():
        return "Selector must not be empty"
    if selector.strip().startswith("@") or _has_unquoted(selector, "{};"):
        return f"Invalid selector {selector!r}"
    if not prop or not re.fullmatch(r"--[\w-]+|-?[A-Za-z][\w-]*", prop.strip()):
        return f"Invalid property name {prop!r}"
    if value is None or not value.strip():
        return "Value must not be empty"
    if _has_unquoted(value, "{};", nested=";"):
        return f"Value {value!r} is not a single declaration value"
    return None


def _has_unquoted(text: str, characters: str, nested: str = "") -> bool:
    """True if ``text`` holds one of ``characters`` outside strings or is unbalanced.

    Characters in ``nested`` are allowed inside parentheses or brackets, as in
    ``url(data:image/png;base64,...)``.
    """
    quote = None
    escaped = False
    depth = 0
    for char in text:
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
        elif quote:
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char in "([":
            depth += 1
        elif char in ")]":
            if depth == 0:
                return True
            depth -= 1
        elif char in characters and not (depth and char in nested):
            return True
    return quote is not None or depth != 0


def _split_important(value: str) -> Tuple[str, bool]:
    match = _IMPORTANT_RE.search(value)
    if match:
        return value[: match.start()].rstrip(), True
    return value, False


def _apply_css_edit(
    sheet: StyleSheetMap,
    selector: str,
    prop: str,
    core: str,
    important: bool,
    media: Optional[str],
) -> str:
    text = sheet.text
    newline = "\r\n" if "\r\n" in text else "\n"
    unit = _indent_unit(sheet)
    written = f"{core} !important" if important else core

    rule = sheet.find_rule(selector, media)
    if rule is not None:
        declaration = rule.declaration(prop)
        if declaration is not None:
            suffix = " !important" if important and not declaration.important else ""
            return text[: declaration.value_start] + core + suffix + text[declaration.value_end :]
        return _append_declaration(sheet, rule, f"{prop}: {written};", unit, newline)

    declaration_text = f"{prop}: {written};"
    if media is None:
        return _append_block(text, f"{selector} {{", [declaration_text], unit, newline)
    block = sheet.find_media(media)
    if block is not None:
        return _insert_into_media(sheet, block, selector, declaration_text, unit, newline)
    condition = clean_prelude(re.sub(r"^@media\b", "", media, flags=re.I))
    return _append_block(
        text,
        f"@media {condition} {{",
        [f"{selector} {{", f"{unit}{declaration_text}", "}"],
        unit,
        newline,
    )


def _append_declaration(
    sheet: StyleSheetMap, rule: RuleSpan, declaration_text: str, unit: str, newline: str
) -> str:
    text = sheet.text
    inserts: List[Tuple[int, str]] = []
    if rule.declarations and not rule.declarations[-1].terminated:
        inserts.append((rule.declarations[-1].end, ";"))

    position = _rstrip_position(text, rule.open_brace + 1, rule.close_brace)
    if "\n" in text[rule.open_brace + 1 : rule.close_brace]:
        last = rule.declarations[-1] if rule.declarations else None
        if last is not None and _starts_line(text, last.start):
            indent = _line_indent(text, last.start)
        else:
            indent = _line_indent(text, rule.start) + unit
        inserts.append((position, f"{newline}{indent}{declaration_text}"))
    else:
        addition = f" {declaration_text}"
        if position == rule.close_brace:
            addition += " "
        inserts.append((position, addition))
    return _splice(text, inserts)


def _insert_into_media(
    sheet: StyleSheetMap,
    block: MediaSpan,
    selector: str,
    declaration_text: str,
    unit: str,
    newline: str,
) -> str:
    text = sheet.text
    inner = _line_indent(text, block.start) + unit
    position = _rstrip_position(text, block.open_brace + 1, block.close_brace)
    separator = newline if position == block.open_brace + 1 else newline * 2
    addition = (
        f"{separator}{inner}{selector} {{{newline}"
        f"{inner}{unit}{declaration_text}{newline}{inner}}}"
    )
    if "\n" not in text[position : block.close_brace]:
        addition += newline + _line_indent(text, block.start)
    return _splice(text, [(position, addition)])


def _append_block(text: str, opening: str, lines: List[str], unit: str, newline: str) -> str:
    prefix = ""
    if text and not text.endswith("\n"):
        prefix = newline
    if text.strip():
        prefix += newline
    body = "".join(f"{unit}{line}{newline}" for line in lines)
    return f"{text}{prefix}{opening}{newline}{body}}}{newline}"


def _splice(text: str, inserts: List[Tuple[int, str]]) -> str:
    # Equal offsets keep list order in the output.
    ordered = sorted(enumerate(inserts), key=lambda item: (item[1][0], item[0]), reverse=True)
    for _, (offset, addition) in ordered:
        text = text[:offset] + addition + text[offset:]
    return text


def _rstrip_position(text: str, start: int, end: int) -> int:
    while end > start and text[end - 1] in " \t\r\n\f":
        end -= 1
    return end


def _line_indent(text: str, offset: int) -> str:
    line_start = text.rfind("\n", 0, offset) + 1
    index = line_start
    while index < offset and text[index] in " \t":
        index += 1
    return text[line_start:index]


def _starts_line(text: str, offset: int) -> bool:
    line_start = text.rfind("\n", 0, offset) + 1
    return not text[line_start:offset].strip(" \t")


def _indent_unit(sheet: StyleSheetMap) -> str:
    """Indentation step used by the stylesheet, from its first indented declaration."""
    text = sheet.text
    for rule in sheet.rules:
        rule_indent = _line_indent(text, rule.start)
        for declaration in rule.declarations:
            indent = _line_indent(text, declaration.start)
            line_start = text.rfind("\n", 0, declaration.start) + 1
            if line_start + len(indent) != declaration.start:
                continue
            if indent.startswith(rule_indent) and len(indent) > len(rule_indent):
                return indent[len(rule_indent) :]
    return DEFAULT_INDENT


# ----------------------------------------------------------------------
# Design tokens


def patch_token_value(text: str, token_name: str, value: str) -> PatchOutcome:
    """Replace the value of the first ``--token`` declaration in a theme file."""
    name = token_name.strip()
    if not name.startswith("--"):
        name = f"--{name}"
    if not re.fullmatch(r"--[\w-]+", name):
        return _failed(text, f"Invalid token name {token_name!r}")
    if value is None or not value.strip():
        return _failed(text, "Value must not be empty")
    if _has_unquoted(value, "{};", nested=";"):
        return _failed(text, f"Value {value!r} is not a single declaration value")
    value = value.strip()

    try:
        sheet = map_stylesheet(text)
        status = PatchStatus.PATCHED
    except CSSStructureError as exc:
        _LOGGER.warning("Theme file is not well-formed (%s); patching from text scan", exc)
        sheet = scan_stylesheet(text)
        status = PatchStatus.FALLBACK_PATCHED

    found = next(sheet.declarations_named(name), None)
    if found is None:
        return _failed(text, f"Token {name} not found")
    _, declaration = found
    previous = declaration.value(text)
    new_text = text[: declaration.value_start] + value + text[declaration.value_end :]
    return PatchOutcome(status, new_text, previous_value=previous)


# ----------------------------------------------------------------------
# Manifest default props


def patch_prop_default(
    manifest_text: str, component_name: str, prop_name: str, value: Any
) -> PatchOutcome:
    """Set ``components[component].defaultProps[prop]`` in manifest JSON text.

    The manifest is re-serialized with fixed indentation; ``previous_value`` is
    the JSON form of the replaced default, or ``None`` when there was none.
    """
    try:
        data = json.loads(manifest_text)
    except json.JSONDecodeError as exc:
        return _failed(manifest_text, f"Manifest is not valid JSON: {exc}")

    components = data.get("components") if isinstance(data, dict) else None
    if not isinstance(components, dict):
        return _failed(manifest_text, "Manifest has no components object")
    entry = components.get(component_name)
    if not isinstance(entry, dict):
        return _failed(manifest_text, f"Component {component_name} not found in manifest")

    defaults = entry.get("defaultProps")
    if not isinstance(defaults, dict):
        defaults = {}
        entry["defaultProps"] = defaults
    previous = json.dumps(defaults[prop_name], ensure_ascii=False) if prop_name in defaults else None
    defaults[prop_name] = value

    try:
        new_text = json.dumps(data, indent=MANIFEST_INDENT, ensure_ascii=False) + "\n"
    except (TypeError, ValueError) as exc:
        return _failed(manifest_text, f"Default value is not JSON serializable: {exc}")
    return PatchOutcome(PatchStatus.PATCHED, new_text, previous_value=previous)


__all__ = [
    "MANIFEST_INDENT",
    "PatchOutcome",
    "PatchStatus",
    "patch_css_property",
    "patch_prop_default",
    "patch_token_value",
    "read_css_property",
]
