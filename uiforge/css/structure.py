"""Source-offset maps of stylesheet rule blocks and declarations.

Two builders produce the same :class:`StyleSheetMap`:

* :func:`map_stylesheet` walks ``tinycss2`` component values and rejects input
  that does not tokenize cleanly (parse errors, unbalanced brackets,
  unterminated comments or strings).
* :func:`scan_stylesheet` is a lenient brace-depth scan that only understands
  comments and strings. It accepts anything and is used when the structural
  map cannot be built.

Every offset points into the original text, so edits can be spliced in
without re-serializing the stylesheet.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import tinycss2

from .values import split_selector_list

STRUCTURAL = "structural"
SCAN = "scan"

# Grouping at-rules whose blocks hold ordinary style rules.
_TRANSPARENT_AT_RULES = {"supports", "layer", "container", "document", "-moz-document"}

_WHITESPACE = " \t\n\r\f"
_WS_RE = re.compile(r"[ \t\n\r\f]+")
_COMMENT_RE = re.compile(r"/\*.*?(?:\*/|\Z)", re.S)
_IDENT_RE = re.compile(r"--[\w-]*|-?[A-Za-z_][\w-]*")
_AT_RULE_RE = re.compile(r"@([-\w]+)(.*)\Z", re.S)
_IMPORTANT_RE = re.compile(r"!\s*important\s*\Z", re.I)
_CLOSERS = {"{": "}", "(": ")", "[": "]"}


class CSSStructureError(ValueError):
    """Raised when a stylesheet cannot be mapped structurally."""


@dataclass(frozen=True)
class DeclarationSpan:
    """Offsets of one ``name: value`` declaration.

    ``value_start``/``value_end`` cover the value text only: leading
    whitespace, trailing comments and ``!important`` are outside the span.
    ``end`` is just past the terminating semicolon, or past the last value
    token when the declaration is unterminated.
    """

    name: str
    start: int
    value_start: int
    value_end: int
    end: int
    terminated: bool
    important: bool = False

    @property
    def key(self) -> str:
        return normalize_property(self.name)

    def value(self, text: str) -> str:
        return text[self.value_start : self.value_end]


@dataclass(frozen=True)
class RuleSpan:
    """A style rule: selector prelude, braces and declarations."""

    selector: str
    start: int
    open_brace: int
    close_brace: int
    media: Optional[str]
    declarations: Tuple[DeclarationSpan, ...] = ()

    def declaration(self, name: str) -> Optional[DeclarationSpan]:
        """Return the last declaration of ``name`` (the one that wins)."""
        key = normalize_property(name)
        found = None
        for declaration in self.declarations:
            if declaration.key == key:
                found = declaration
        return found


@dataclass(frozen=True)
class MediaSpan:
    condition: str
    start: int
    open_brace: int
    close_brace: int


@dataclass(frozen=True)
class StyleSheetMap:
    """Rules and media blocks of a stylesheet, in document order."""

    text: str
    rules: Tuple[RuleSpan, ...]
    media_blocks: Tuple[MediaSpan, ...]
    strategy: str

    def find_rule(self, selector: str, media: Optional[str] = None) -> Optional[RuleSpan]:
        """Return the last rule whose selector and media context match exactly."""
        target = normalize_selector(selector)
        context = normalize_media(media) if media else None
        found = None
        for rule in self.rules:
            if rule.media == context and normalize_selector(rule.selector) == target:
                found = rule
        return found

    def find_member_rule(self, selector: str, media: Optional[str] = None) -> Optional[RuleSpan]:
        """Return the last selector-list rule that has ``selector`` as one of its members."""
        target = normalize_selector(selector)
        context = normalize_media(media) if media else None
        found = None
        for rule in self.rules:
            if rule.media != context:
                continue
            members = [normalize_selector(member) for member in split_selector_list(rule.selector)]
            if len(members) > 1 and target in members:
                found = rule
        return found

    def find_media(self, media: str) -> Optional[MediaSpan]:
        condition = normalize_media(media)
        found = None
        for block in self.media_blocks:
            if block.condition == condition:
                found = block
        return found

    def declarations_named(self, name: str) -> Iterator[Tuple[RuleSpan, DeclarationSpan]]:
        key = normalize_property(name)
        for rule in self.rules:
            for declaration in rule.declarations:
                if declaration.key == key:
                    yield rule, declaration

    def line_of(self, offset: int) -> int:
        return self.text.count("\n", 0, offset) + 1


def normalize_selector(selector: str) -> str:
    cleaned = _WS_RE.sub(" ", _COMMENT_RE.sub(" ", selector)).strip()
    return re.sub(r"\s*,\s*", ", ", cleaned)


def normalize_media(query: Optional[str]) -> str:
    """Canonical form of a media condition, with or without a leading ``@media``."""
    text = _COMMENT_RE.sub(" ", query or "").strip()
    if text[:6].lower() == "@media":
        text = text[6:]
    text = _WS_RE.sub(" ", text).strip()
    text = re.sub(r"\(\s*", "(", text)
    text = re.sub(r"\s*\)", ")", text)
    text = re.sub(r"\s*:\s*", ": ", text)
    return text.lower()


def normalize_property(name: str) -> str:
    """Map a camelCase or kebab-case property name to lowercase CSS form."""
    name = name.strip()
    if name.startswith("--"):
        return name
    if "-" not in name and name != name.lower():
        kebab = re.sub(r"[A-Z]", lambda match: "-" + match.group(0).lower(), name)
        if name.startswith("ms"):
            kebab = "-" + kebab
        return kebab
    return name.lower()


def clean_prelude(text: str) -> str:
    return _WS_RE.sub(" ", _COMMENT_RE.sub(" ", text)).strip()


# ----------------------------------------------------------------------
# Character-level helpers shared by both builders


def _skip_comment(text: str, index: int) -> Tuple[int, bool]:
    end = text.find("*/", index + 2)
    if end == -1:
        return len(text), False
    return end + 2, True


def _skip_string(text: str, index: int) -> Tuple[int, bool]:
    quote = text[index]
    position = index + 1
    while position < len(text):
        char = text[position]
        if char == "\\":
            position += 2
            continue
        if char == quote:
            return position + 1, True
        if char in "\n\r\f":
            return position, False
        position += 1
    return len(text), False


def _skip_ws_comments(text: str, index: int, end: int) -> int:
    while index < end:
        if text[index] in _WHITESPACE:
            index += 1
        elif text.startswith("/*", index):
            index = min(_skip_comment(text, index)[0], end)
        else:
            break
    return index


def _rstrip_ws_comments(text: str, start: int, end: int) -> int:
    while end > start:
        if text[end - 1] in _WHITESPACE:
            end -= 1
            continue
        if end - start >= 4 and text.startswith("*/", end - 2):
            opening = text.rfind("/*", start, end - 2)
            if opening != -1:
                end = opening
                continue
        break
    return end


def _find_block_end(text: str, open_brace: int, limit: int) -> int:
    """Index of the brace closing ``open_brace``, or ``limit`` when unclosed."""
    depth = 0
    index = open_brace
    while index < limit:
        char = text[index]
        if text.startswith("/*", index):
            index = _skip_comment(text, index)[0]
            continue
        if char in "\"'":
            index = _skip_string(text, index)[0]
            continue
        if char == "\\":
            index += 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return limit


def check_balance(text: str) -> None:
    """Raise :class:`CSSStructureError` unless brackets, comments and strings close."""
    stack: List[Tuple[str, int]] = []
    index = 0
    while index < len(text):
        char = text[index]
        if text.startswith("/*", index):
            index, closed = _skip_comment(text, index)
            if not closed:
                raise CSSStructureError(f"unterminated comment at line {_line(text, index)}")
            continue
        if char in "\"'":
            start = index
            index, closed = _skip_string(text, index)
            if not closed:
                raise CSSStructureError(f"unterminated string at line {_line(text, start)}")
            continue
        if char == "\\":
            index += 2
            continue
        if char in _CLOSERS:
            stack.append((char, index))
        elif char in "})]":
            if not stack or _CLOSERS[stack[-1][0]] != char:
                raise CSSStructureError(f"unexpected '{char}' at line {_line(text, index)}")
            stack.pop()
        index += 1
    if stack:
        opener, position = stack[-1]
        raise CSSStructureError(f"unclosed '{opener}' opened at line {_line(text, position)}")


def _line(text: str, offset: int) -> int:
    return text.count("\n", 0, offset) + 1


# ----------------------------------------------------------------------
# Structural builder (tinycss2)


class _SourceIndex:
    """Maps tinycss2 line/column positions back to offsets in the original text.

    tinycss2 normalizes ``\\r\\n``, ``\\r`` and ``\\f`` to ``\\n`` before
    tokenizing, so positions are computed on the normalized text and then
    translated.
    """

    def __init__(self, text: str) -> None:
        mapping: Optional[List[int]] = None
        normalized = text
        if "\r" in text or "\f" in text:
            chars: List[str] = []
            mapping = []
            index = 0
            while index < len(text):
                char = text[index]
                mapping.append(index)
                if char == "\r":
                    chars.append("\n")
                    index += 2 if text.startswith("\r\n", index) else 1
                    continue
                chars.append("\n" if char == "\f" else char)
                index += 1
            mapping.append(len(text))
            normalized = "".join(chars)
        self._mapping = mapping
        self._line_starts = [0]
        self._line_starts.extend(match.end() for match in re.finditer("\n", normalized))

    def offset(self, node) -> int:  # type: ignore[no-untyped-def]
        position = self._line_starts[node.source_line - 1] + node.source_column - 1
        if self._mapping is None:
            return position
        return self._mapping[position]


def _first_error(nodes: Sequence) -> Optional[object]:  # type: ignore[type-arg]
    for node in nodes:
        if node.type == "error":
            return node
        children = getattr(node, "content", None)
        if children is None:
            children = getattr(node, "arguments", None)
        if isinstance(children, list):
            found = _first_error(children)
            if found is not None:
                return found
    return None


class _StructuralBuilder:
    def __init__(self, text: str) -> None:
        self.text = text
        self.index = _SourceIndex(text)
        self.rules: List[RuleSpan] = []
        self.media_blocks: List[MediaSpan] = []

    def _end(self, nodes: Sequence, position: int, container_end: int) -> int:  # type: ignore[type-arg]
        if position + 1 < len(nodes):
            return self.index.offset(nodes[position + 1])
        return container_end

    def walk(self, nodes: Sequence, container_end: int, media: Optional[str]) -> None:  # type: ignore[type-arg]
        prelude: List[Tuple[object, int]] = []
        for position, node in enumerate(nodes):
            start = self.index.offset(node)
            if node.type == "{} block":
                close = self._end(nodes, position, container_end) - 1
                if close < 0 or self.text[close] != "}":
                    raise CSSStructureError(f"unclosed block at line {node.source_line}")
                if prelude:
                    self._block(prelude, start, close, node, media)
                prelude = []
                continue
            if node.type in ("whitespace", "comment") and not prelude:
                continue
            if node.type == "literal" and node.value == ";":
                prelude = []
                continue
            prelude.append((node, start))

    def _block(self, prelude, open_brace: int, close: int, block, media: Optional[str]) -> None:  # type: ignore[no-untyped-def]
        first, first_start = prelude[0]
        if first.type == "at-keyword":
            rest_start = prelude[1][1] if len(prelude) > 1 else open_brace
            condition = clean_prelude(self.text[rest_start:open_brace])
            name = first.lower_value
            if name == "media":
                condition = normalize_media(condition)
                self.media_blocks.append(MediaSpan(condition, first_start, open_brace, close))
                self.walk(block.content, close, condition)
            elif name in _TRANSPARENT_AT_RULES:
                self.walk(block.content, close, media)
            return

        selector = clean_prelude(self.text[first_start:open_brace])
        if not selector:
            return
        declarations = self._declarations(block.content, close)
        self.rules.append(
            RuleSpan(selector, first_start, open_brace, close, media, tuple(declarations))
        )

    def _declarations(self, content: Sequence, close: int) -> List[DeclarationSpan]:  # type: ignore[type-arg]
        declarations: List[DeclarationSpan] = []
        segment: List[Tuple[object, int, int]] = []
        for position, node in enumerate(content):
            start = self.index.offset(node)
            end = self._end(content, position, close)
            if node.type == "{} block":
                segment = []
                continue
            if node.type == "literal" and node.value == ";":
                declaration = self._declaration(segment, end)
                if declaration is not None:
                    declarations.append(declaration)
                segment = []
                continue
            segment.append((node, start, end))
        if segment:
            declaration = self._declaration(segment, None)
            if declaration is not None:
                declarations.append(declaration)
        return declarations

    @staticmethod
    def _declaration(segment, terminator_end: Optional[int]) -> Optional[DeclarationSpan]:  # type: ignore[no-untyped-def]
        meaningful = [item for item in segment if item[0].type not in ("whitespace", "comment")]
        if len(meaningful) < 2:
            return None
        name_node, name_start, _ = meaningful[0]
        colon, _, colon_end = meaningful[1]
        if name_node.type != "ident" or colon.type != "literal" or colon.value != ":":
            return None

        values = meaningful[2:]
        important = (
            len(values) >= 2
            and values[-2][0].type == "literal"
            and values[-2][0].value == "!"
            and values[-1][0].type == "ident"
            and values[-1][0].lower_value == "important"
        )
        core = values[:-2] if important else values
        value_start = values[0][1] if values else colon_end
        value_end = core[-1][2] if core else value_start
        tail = values[-1][2] if values else colon_end
        return DeclarationSpan(
            name=name_node.value,
            start=name_start,
            value_start=value_start,
            value_end=value_end,
            end=terminator_end if terminator_end is not None else tail,
            terminated=terminator_end is not None,
            important=important,
        )


def map_stylesheet(text: str) -> StyleSheetMap:
    """Build a map from a cleanly tokenizing stylesheet.

    Raises :class:`CSSStructureError` for malformed input.
    """
    check_balance(text)
    nodes = tinycss2.parse_component_value_list(text, skip_comments=False)
    error = _first_error(nodes)
    if error is not None:
        raise CSSStructureError(f"{error.message} at line {error.source_line}")  # type: ignore[attr-defined]
    builder = _StructuralBuilder(text)
    builder.walk(nodes, len(text), None)
    return StyleSheetMap(text, tuple(builder.rules), tuple(builder.media_blocks), STRUCTURAL)


# ----------------------------------------------------------------------
# Lenient scan builder


class _ScanBuilder:
    def __init__(self, text: str) -> None:
        self.text = text
        self.rules: List[RuleSpan] = []
        self.media_blocks: List[MediaSpan] = []

    def walk(self, start: int, end: int, media: Optional[str]) -> None:
        text = self.text
        index = start
        prelude_start: Optional[int] = None
        while index < end:
            char = text[index]
            if text.startswith("/*", index):
                index = min(_skip_comment(text, index)[0], end)
                continue
            if char in "\"'":
                if prelude_start is None:
                    prelude_start = index
                index = min(_skip_string(text, index)[0], end)
                continue
            if char in ";}":
                prelude_start = None
                index += 1
                continue
            if char == "{":
                close = _find_block_end(text, index, end)
                if prelude_start is not None:
                    self._block(prelude_start, index, close, media)
                prelude_start = None
                index = close + 1
                continue
            if prelude_start is None and char not in _WHITESPACE:
                prelude_start = index
            index += 1

    def _block(self, start: int, open_brace: int, close: int, media: Optional[str]) -> None:
        prelude = clean_prelude(self.text[start:open_brace])
        if not prelude:
            return
        at_rule = _AT_RULE_RE.match(prelude)
        if at_rule:
            name = at_rule.group(1).lower()
            if name == "media":
                condition = normalize_media(at_rule.group(2))
                self.media_blocks.append(MediaSpan(condition, start, open_brace, close))
                self.walk(open_brace + 1, close, condition)
            elif name in _TRANSPARENT_AT_RULES:
                self.walk(open_brace + 1, close, media)
            return
        declarations = self._declarations(open_brace + 1, close)
        self.rules.append(RuleSpan(prelude, start, open_brace, close, media, tuple(declarations)))

    def _declarations(self, start: int, end: int) -> List[DeclarationSpan]:
        text = self.text
        declarations: List[DeclarationSpan] = []
        segment_start = start
        depth = 0
        index = start
        while index < end:
            char = text[index]
            if text.startswith("/*", index):
                index = min(_skip_comment(text, index)[0], end)
                continue
            if char in "\"'":
                index = min(_skip_string(text, index)[0], end)
                continue
            if char == "\\":
                index += 2
                continue
            if char in "([":
                depth += 1
            elif char in ")]":
                depth = max(0, depth - 1)
            elif char == "{":
                index = _find_block_end(text, index, end) + 1
                segment_start = index
                continue
            elif char == ";" and depth == 0:
                declaration = self._declaration(segment_start, index, True)
                if declaration is not None:
                    declarations.append(declaration)
                segment_start = index + 1
            index += 1
        if segment_start < end:
            declaration = self._declaration(segment_start, end, False)
            if declaration is not None:
                declarations.append(declaration)
        return declarations

    def _declaration(self, start: int, end: int, terminated: bool) -> Optional[DeclarationSpan]:
        text = self.text
        name_start = _skip_ws_comments(text, start, end)
        match = _IDENT_RE.match(text, name_start, end)
        if not match:
            return None
        colon = _skip_ws_comments(text, match.end(), end)
        if colon >= end or text[colon] != ":":
            return None

        value_start = _skip_ws_comments(text, colon + 1, end)
        if value_start >= end:
            value_start = colon + 1
            tail = colon + 1
        else:
            tail = _rstrip_ws_comments(text, value_start, end)
        value_end = tail
        important = _IMPORTANT_RE.search(text, value_start, tail)
        if important:
            value_end = _rstrip_ws_comments(text, value_start, important.start())
        return DeclarationSpan(
            name=match.group(0),
            start=name_start,
            value_start=value_start,
            value_end=value_end,
            end=end + 1 if terminated else tail,
            terminated=terminated,
            important=important is not None,
        )


def scan_stylesheet(text: str) -> StyleSheetMap:
    """Build a map with the lenient brace-depth scan. Never raises."""
    builder = _ScanBuilder(text)
    builder.walk(0, len(text), None)
    return StyleSheetMap(text, tuple(builder.rules), tuple(builder.media_blocks), SCAN)


def build_stylesheet_map(text: str) -> Tuple[StyleSheetMap, Optional[CSSStructureError]]:
    """Structural map when possible, else the scan map plus the structural error."""
    try:
        return map_stylesheet(text), None
    except CSSStructureError as exc:
        return scan_stylesheet(text), exc


__all__ = [
    "CSSStructureError",
    "DeclarationSpan",
    "MediaSpan",
    "RuleSpan",
    "SCAN",
    "STRUCTURAL",
    "StyleSheetMap",
    "build_stylesheet_map",
    "check_balance",
    "clean_prelude",
    "map_stylesheet",
    "normalize_media",
    "normalize_property",
    "normalize_selector",
    "scan_stylesheet",
]
