"""CSS module parsing into per-selector rule records."""

from __future__ import annotations

import re
from typing import Dict, List

from ..logging import get_logger
from ..models import CSSPropertyValue, ParsedCSSRule
from .structure import SCAN, build_stylesheet_map
from .values import parse_value, split_selector_list, to_camel_case

_LOGGER = get_logger("css.parser")

_KEYFRAMES_RE = re.compile(r"@(?:-[a-z]+-)?keyframes\b", re.I)
_CLASS_SELECTOR_RE = re.compile(r"(?<![\w\-\d.])\.(-?[A-Za-z_][\w-]*)")
_URL_RE = re.compile(r"url\([^)]*\)", re.I)


def parse_css_module(text: str) -> List[ParsedCSSRule]:
    """Parse stylesheet text into one :class:`ParsedCSSRule` per selector.

    Comma-separated selector lists are split, rules nested in ``@media`` carry
    their condition, and custom property declarations are left out of the
    property map.
    """
    sheet, error = build_stylesheet_map(text)
    if error is not None:
        _LOGGER.debug("Stylesheet did not tokenize cleanly (%s); using lenient scan", error)

    rules: List[ParsedCSSRule] = []
    for rule in sheet.rules:
        properties: Dict[str, CSSPropertyValue] = {}
        for declaration in rule.declarations:
            if declaration.name.startswith("--"):
                continue
            properties[to_camel_case(declaration.name)] = parse_value(declaration.value(text))
        start_line = sheet.line_of(rule.start)
        end_line = sheet.line_of(rule.close_brace)
        for selector in split_selector_list(rule.selector):
            rules.append(
                ParsedCSSRule(
                    selector=selector,
                    properties=dict(properties),
                    media_query=rule.media,
                    start_line=start_line,
                    end_line=end_line,
                )
            )
    if sheet.strategy == SCAN:
        _LOGGER.debug("Parsed %d rule(s) with the lenient scan", len(rules))
    return rules


def namespace_css_module(text: str, component_name: str) -> str:
    """Rewrite class selectors ``.x`` as ``.<Component>_x`` for a shared document.

    Keyframe blocks, numbers such as ``.5s`` and ``url()`` arguments are left
    alone.
    """
    output: List[str] = []
    position = 0
    for match in _KEYFRAMES_RE.finditer(text):
        if match.start() < position:
            continue
        output.append(_namespace_segment(text[position : match.start()], component_name))
        open_brace = text.find("{", match.end())
        if open_brace == -1:
            position = match.start()
            break
        close = _matching_brace(text, open_brace)
        output.append(text[match.start() : close])
        position = close
    output.append(_namespace_segment(text[position:], component_name))
    return "".join(output)


def _namespace_segment(segment: str, component_name: str) -> str:
    pieces: List[str] = []
    position = 0
    for url in _URL_RE.finditer(segment):
        pieces.append(_prefix_classes(segment[position : url.start()], component_name))
        pieces.append(url.group(0))
        position = url.end()
    pieces.append(_prefix_classes(segment[position:], component_name))
    return "".join(pieces)


def _prefix_classes(segment: str, component_name: str) -> str:
    return _CLASS_SELECTOR_RE.sub(
        lambda match: f".{component_name}_{match.group(1)}", segment
    )


def _matching_brace(text: str, open_brace: int) -> int:
    depth = 0
    for index in range(open_brace, len(text)):
        if text[index] == "{":
            depth += 1
        elif text[index] == "}":
            depth -= 1
            if depth == 0:
                return index + 1
    return len(text)


__all__ = ["namespace_css_module", "parse_css_module"]
