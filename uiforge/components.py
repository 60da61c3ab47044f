"""Text-level facts about component source files."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

from .models import Variant

_FORWARD_REF_EXPORT = re.compile(
    r"export\s+const\s+([A-Z][A-Za-z0-9]*)\s*(?::[^=]+)?=\s*(?:React\.)?forwardRef\b"
)
_NAMED_EXPORT = re.compile(r"export\s+(?:const|function)\s+([A-Z][A-Za-z0-9]*)")
_DEFAULT_EXPORT = re.compile(r"export\s+default\s+(?:function\s+)?([A-Z][A-Za-z0-9]*)")

_STYLESHEET_IMPORT = re.compile(
    r"import\s+(?:\w+|\*\s+as\s+\w+)\s+from\s+['\"]([^'\"]+\.module\.(?:css|scss))['\"]"
)
_PLAIN_STYLESHEET_IMPORT = re.compile(r"import\s+['\"]([^'\"]+\.css)['\"]")
_NAMED_IMPORT = re.compile(r"import\s+(?:type\s+)?\{([^}]+)\}\s+from\s+['\"]([^'\"]+)['\"]")
_INTERNAL_PREFIXES = ("./", "../", "@/", "@repo/")

VARIANT_CLASSES = (
    "primary",
    "secondary",
    "ghost",
    "danger",
    "success",
    "warning",
    "outline",
    "outlined",
    "filled",
    "default",
    "elevated",
)
SIZE_CLASSES = ("sm", "md", "lg", "xl")


def extract_component_name(source: str, file_name: str) -> Optional[str]:
    """Name of the component a file exports, or None for non-component files."""
    for pattern in (_FORWARD_REF_EXPORT, _NAMED_EXPORT, _DEFAULT_EXPORT):
        match = pattern.search(source)
        if match:
            return match.group(1)
    base = Path(file_name).name.split(".", 1)[0]
    if base[:1].isupper():
        return base
    return None


def find_stylesheet_import(source: str) -> Optional[str]:
    """Specifier of the stylesheet a component imports (CSS modules first)."""
    match = _STYLESHEET_IMPORT.search(source) or _PLAIN_STYLESHEET_IMPORT.search(source)
    return match.group(1) if match else None


def extract_dependencies(source: str) -> List[str]:
    """Components imported from inside the repository, in first-seen order."""
    dependencies: List[str] = []
    for match in _NAMED_IMPORT.finditer(source):
        if not match.group(2).startswith(_INTERNAL_PREFIXES):
            continue
        for item in match.group(1).split(","):
            name = re.sub(r"\s+as\s+\w+", "", item).replace("type ", "").strip()
            if name[:1].isupper() and name not in dependencies:
                dependencies.append(name)
    return dependencies


def variants_from_css(css: str) -> List[Variant]:
    """Guess variants from conventional class names defined in a stylesheet."""
    variants: List[Variant] = []
    for name in VARIANT_CLASSES:
        if _defines_class(css, name):
            variants.append(Variant(name=name, type="variant", css_class=name))
    for name in SIZE_CLASSES:
        if _defines_class(css, name):
            variants.append(Variant(name=f"size-{name}", type="size", css_class=name))
    return variants


def _defines_class(css: str, name: str) -> bool:
    return re.search(rf"\.{re.escape(name)}\s*\{{", css) is not None


__all__ = [
    "SIZE_CLASSES",
    "VARIANT_CLASSES",
    "extract_component_name",
    "extract_dependencies",
    "find_stylesheet_import",
    "variants_from_css",
]
