"""Story variants read from a component's adjacent stories file."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from .logging import get_logger
from .models import StoryVariant
from .props.defaults import coerce_literal, is_literal
from .props.typetext import find_top_level, matching_close, split_top_level, strip_comments

_LOGGER = get_logger("stories")

_STORY_RE = re.compile(r"export\s+const\s+(\w+)\s*(?::\s*[\w.<>\[\], ]+)?=\s*\{")
_ARGS_RE = re.compile(r"\bargs\s*:\s*\{")
_RENDER_RE = re.compile(r"\brender\s*[:(]")
_SKIPPED = {"meta", "default"}


def stories_path_for(component_path: Path) -> Optional[Path]:
    for suffix in (".stories.tsx", ".stories.jsx", ".stories.ts"):
        candidate = component_path.with_name(component_path.name.split(".", 1)[0] + suffix)
        if candidate.is_file():
            return candidate
    return None


def load_story_variants(component_path: Path) -> List[StoryVariant]:
    """Story variants next to ``component_path``; empty when there is no stories file."""
    path = stories_path_for(component_path)
    if path is None:
        return []
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _LOGGER.debug("Cannot read stories file %s: %s", path, exc)
        return []
    return parse_story_variants(source)


def parse_story_variants(source: str) -> List[StoryVariant]:
    text = strip_comments(source)
    variants: List[StoryVariant] = []
    for match in _STORY_RE.finditer(text):
        name = match.group(1)
        if name in _SKIPPED:
            continue
        open_brace = match.end() - 1
        body = text[open_brace + 1 : matching_close(text, open_brace)]
        variants.append(
            StoryVariant(name=name, args=_story_args(body), has_render=bool(_RENDER_RE.search(body)))
        )
    return variants


def _story_args(body: str) -> Dict[str, Any]:
    match = _ARGS_RE.search(body)
    if not match:
        return {}
    open_brace = match.end() - 1
    block = body[open_brace + 1 : matching_close(body, open_brace)]
    args: Dict[str, Any] = {}
    for part in split_top_level(block, ","):
        colon = find_top_level(part, 0, ":")
        if colon == -1:
            continue
        key = part[:colon].strip().strip("'\"")
        if not re.fullmatch(r"[\w$-]+", key):
            continue
        value = coerce_literal(part[colon + 1 :])
        if is_literal(value):
            args[key] = value
    return args


__all__ = ["load_story_variants", "parse_story_variants", "stories_path_for"]
