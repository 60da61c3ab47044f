"""Design token discovery from theme stylesheets and JSON token files."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .config import TokenConfig
from .css.structure import build_stylesheet_map
from .logging import get_logger
from .models import Manifest, TOKEN_TYPES, Token

_LOGGER = get_logger("tokens")

_SKIPPED_FRAGMENTS = ("duration", "ease", "z-", "opacity")
_LENGTH_RE = re.compile(r"^-?[\d.]+(?:px|rem|em)$|^\d+$")


def infer_token_type(name: str, value: str) -> str:
    """Guess a token's type from its name, then from the shape of its value."""
    lowered = name.lower().lstrip("-")
    value = value.strip()
    if "radius" in lowered or "rounded" in lowered:
        return "radius"
    if (
        "font" in lowered
        or "line-height" in lowered
        or "letter-spacing" in lowered
        or ("size" in lowered and "space" not in lowered)
    ):
        return "typography"
    if any(fragment in lowered for fragment in ("space", "gap", "margin", "padding")):
        return "spacing"
    if (
        "color" in lowered
        or "bg-" in lowered
        or "-bg" in lowered
        or "shadow" in lowered
        or "border" in lowered
        or value.startswith("#")
        or "rgb" in value
        or "hsl" in value
    ):
        return "color"
    if _LENGTH_RE.match(value):
        return "spacing"
    return "color"


def css_custom_properties(text: str) -> List[Tuple[str, str]]:
    """``(name, value)`` for every custom property declaration, in document order."""
    sheet, _ = build_stylesheet_map(text)
    found: List[Tuple[str, str]] = []
    for rule in sheet.rules:
        for declaration in rule.declarations:
            if declaration.name.startswith("--"):
                found.append((declaration.name[2:], declaration.value(text).strip()))
    return found


def flatten_json_tokens(data: Mapping[str, Any], prefix: str = "") -> List[Tuple[str, str]]:
    """Flatten nested token objects into ``(dashed-name, value)`` pairs.

    Objects carrying a ``value`` or ``$value`` key are leaves.
    """
    found: List[Tuple[str, str]] = []
    for key, item in data.items():
        name = f"{prefix}-{key}" if prefix else str(key)
        if isinstance(item, Mapping):
            leaf = item.get("$value", item.get("value"))
            if isinstance(leaf, (str, int, float)) and not isinstance(leaf, bool):
                found.append((name, str(leaf)))
            else:
                found.extend(flatten_json_tokens(item, name))
        elif isinstance(item, (str, int, float)) and not isinstance(item, bool):
            found.append((name, str(item)))
    return found


class TokenCollector:
    """Collects design tokens and the combined theme stylesheet of a repository."""

    def __init__(self, root: Path, config: Optional[TokenConfig] = None) -> None:
        self.root = root
        self.config = config or TokenConfig()

    def collect(self, manifest: Optional[Manifest] = None) -> Tuple[List[Token], str]:
        """Return ``(tokens, theme_source)``; manifest sources take precedence."""
        if manifest is not None and (manifest.tokens.css or manifest.tokens.json):
            css_files = list(manifest.tokens.css)
            json_files = list(manifest.tokens.json)
            categories: Mapping[str, str] = manifest.tokens.categories
        else:
            css_files = list(self.config.theme_files)
            json_files = list(self.config.json_files)
            categories = {}

        tokens: Dict[str, Token] = {}
        theme_parts: List[str] = []
        for rel_path in css_files:
            text = self._read(rel_path)
            if text is None:
                continue
            theme_parts.append(f"\n/* {rel_path} */\n{text}\n")
            for name, value in css_custom_properties(text):
                self._add(tokens, name, value, rel_path, categories)

        for rel_path in json_files:
            text = self._read(rel_path)
            if text is None:
                continue
            try:
                data = json.loads(text)
            except json.JSONDecodeError as exc:
                _LOGGER.warning("Skipping token file %s: %s", rel_path, exc)
                continue
            if not isinstance(data, dict):
                continue
            for name, value in flatten_json_tokens(data):
                self._add(tokens, name, value, rel_path, categories)

        _LOGGER.debug("Collected %d token(s) from %s", len(tokens), self.root)
        return list(tokens.values()), "".join(theme_parts)

    def _read(self, rel_path: str) -> Optional[str]:
        path = self.root / rel_path
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            _LOGGER.warning("Could not load token file %s: %s", rel_path, exc)
            return None

    @staticmethod
    def _add(
        tokens: Dict[str, Token],
        name: str,
        value: str,
        source: str,
        categories: Mapping[str, str],
    ) -> None:
        if name in tokens or any(fragment in name for fragment in _SKIPPED_FRAGMENTS):
            return
        tokens[name] = Token(
            name=name,
            value=value,
            type=_category_type(name, categories) or infer_token_type(name, value),
            source_path=source,
        )


def _category_type(name: str, categories: Mapping[str, str]) -> Optional[str]:
    for category, prefix in categories.items():
        if category in TOKEN_TYPES and name.startswith(prefix.lstrip("-")):
            return category
    return None


__all__ = [
    "TokenCollector",
    "css_custom_properties",
    "flatten_json_tokens",
    "infer_token_type",
]
