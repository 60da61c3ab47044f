"""Repository manifest loading and manifest-over-extraction precedence."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .logging import get_logger
from .models import (
    Component,
    Manifest,
    ManifestComponent,
    ManifestTokens,
    PropDef,
    VARIANT_TYPES,
    Variant,
)

_LOGGER = get_logger("manifest")

_KIND_ALIASES = {"reactelement": "reactnode", "node": "reactnode", "select": "enum", "bool": "boolean"}


class ManifestError(ValueError):
    """Raised when a manifest file is not a usable component manifest."""


def load_manifest(root: Path, filename: str) -> Tuple[Optional[Manifest], List[str]]:
    """Read ``root/filename``; return the manifest (or None) and any warnings.

    A missing file is not an error. Invalid JSON or a document without a
    ``components`` object yields ``None`` plus a warning so callers can fall
    back to heuristic discovery.
    """
    path = root / filename
    if not path.is_file():
        return None, []
    try:
        text = path.read_text(encoding="utf-8")
        return parse_manifest(text, path=filename), []
    except (OSError, UnicodeDecodeError) as exc:
        message = f"Cannot read manifest {filename}: {exc}"
    except ManifestError as exc:
        message = f"Ignoring manifest {filename}: {exc}"
    _LOGGER.warning(message)
    return None, [message]


def parse_manifest(text: str, path: Optional[str] = None) -> Manifest:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    if not isinstance(data, dict):
        raise ManifestError("root must be a JSON object")
    raw_components = data.get("components")
    if not isinstance(raw_components, dict):
        raise ManifestError("missing 'components' object")

    components: Dict[str, ManifestComponent] = {}
    for name, entry in raw_components.items():
        if not isinstance(entry, dict) or not isinstance(entry.get("entry"), str):
            _LOGGER.warning("Manifest component %s has no 'entry'; skipping", name)
            continue
        components[name] = _component_entry(name, entry)

    version = data.get("version")
    return Manifest(
        name=str(data.get("name") or ""),
        components=components,
        version=str(version) if version is not None else None,
        tokens=_tokens_entry(data),
        path=path,
    )


def _component_entry(name: str, entry: Dict[str, Any]) -> ManifestComponent:
    styles = entry.get("styles")
    if isinstance(styles, str):
        style_paths: Tuple[str, ...] = (styles,)
    elif isinstance(styles, list):
        style_paths = tuple(item for item in styles if isinstance(item, str))
    else:
        style_paths = ()

    default_props = entry.get("defaultProps")
    return ManifestComponent(
        name=name,
        entry=entry["entry"],
        styles=style_paths,
        prop_defs=_prop_defs(entry.get("propDefs")),
        variants=_variants(entry.get("variants")),
        default_props=dict(default_props) if isinstance(default_props, dict) else None,
    )


def _prop_defs(raw: Any) -> Optional[Tuple[PropDef, ...]]:
    if not isinstance(raw, list):
        return None
    prop_defs: List[PropDef] = []
    for item in raw:
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            continue
        kind = str(item.get("type") or item.get("kind") or "string").lower()
        kind = _KIND_ALIASES.get(kind, kind)
        options = item.get("options")
        prop_defs.append(
            PropDef(
                name=item["name"],
                kind=kind,
                options=tuple(str(option) for option in options) if isinstance(options, list) else None,
                default_value=item.get("defaultValue", item.get("default")),
            )
        )
    return tuple(prop_defs)


def _variants(raw: Any) -> Optional[Tuple[Variant, ...]]:
    if not isinstance(raw, list):
        return None
    variants: List[Variant] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        if isinstance(item.get("values"), list):
            # {prop, values, default}: one variant per value
            prop = str(item.get("prop") or "variant")
            variant_type = "size" if prop == "size" else "variant"
            default = item.get("default")
            for value in item["values"]:
                value = str(value)
                variants.append(
                    Variant(
                        name=value[:1].upper() + value[1:],
                        type=variant_type,
                        css_class=value,
                        is_default=value == default,
                    )
                )
        elif isinstance(item.get("name"), str):
            variant_type = item.get("type")
            is_default = item.get("isDefault")
            variants.append(
                Variant(
                    name=item["name"],
                    type=variant_type if variant_type in VARIANT_TYPES else "variant",
                    css_class=str(item.get("cssClass") or item["name"]),
                    is_default=is_default if isinstance(is_default, bool) else None,
                )
            )
    return tuple(variants)


def _tokens_entry(data: Dict[str, Any]) -> ManifestTokens:
    tokens = data.get("tokens") if isinstance(data.get("tokens"), dict) else {}
    runtime = data.get("runtime") if isinstance(data.get("runtime"), dict) else {}
    css = _str_list(tokens.get("css")) or _str_list(runtime.get("globalCss"))
    categories = tokens.get("categories")
    return ManifestTokens(
        css=tuple(css),
        json=tuple(_str_list(tokens.get("json"))),
        categories={
            str(key): str(value) for key, value in categories.items() if isinstance(value, str)
        }
        if isinstance(categories, dict)
        else {},
    )


def _str_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return []


class ManifestResolver:
    """Applies manifest overrides on top of extracted component data.

    Each non-empty manifest field replaces the extracted field wholesale; the
    two sources are never merged.
    """

    def __init__(self, manifest: Optional[Manifest]) -> None:
        self.manifest = manifest

    def entry_for(self, component_name: str) -> Optional[ManifestComponent]:
        if self.manifest is None:
            return None
        return self.manifest.components.get(component_name)

    def resolve(self, component: Component) -> Component:
        entry = self.entry_for(component.name)
        if entry is None:
            return component
        changes: Dict[str, Any] = {}
        if entry.prop_defs:
            changes["prop_defs"] = entry.prop_defs
        if entry.variants:
            changes["variants"] = entry.variants
        if entry.default_props:
            changes["default_props"] = dict(entry.default_props)
        return replace(component, **changes) if changes else component


__all__ = ["ManifestError", "ManifestResolver", "load_manifest", "parse_manifest"]
