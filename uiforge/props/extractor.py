"""Prop schema extraction for React components."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..logging import get_logger
from ..models import PropDef
from ..stores.type_cache import ResolutionContext, TypeResolutionCache
from .base import (
    INTERSECTION,
    OBJECT,
    REFERENCE,
    STRING_LITERAL,
    UNION,
    ModuleShapes,
    PropertySignature,
    TypeDeclaration,
    TypeShape,
    TypeShapeResolver,
    flatten,
)
from .classify import PASS_THROUGH_WRAPPERS, classify_shape
from .defaults import extract_defaults
from .fallback import SKIP_PROPS
from .heuristic import HeuristicResolver
from .tree_sitter import TreeSitterResolver

_LOGGER = get_logger("props.extractor")

_EVENT_HANDLER_RE = re.compile(r"^on[A-Z]")
_MAX_DEPTH = 6

# (signature, declaring module, declared on the component's own props type)
_Member = Tuple[PropertySignature, ModuleShapes, bool]


def select_resolver(structural: bool = True) -> TypeShapeResolver:
    """Pick the structural resolver when tree-sitter is installed, else the heuristic one."""
    if structural:
        resolver = TreeSitterResolver()
        if resolver.available:
            return resolver
    return HeuristicResolver()


class PropSchemaExtractor:
    """Turns a component's props type into :class:`PropDef` records."""

    def __init__(
        self,
        resolver: Optional[TypeShapeResolver] = None,
        cache: Optional[TypeResolutionCache] = None,
    ) -> None:
        self._resolver = resolver if resolver is not None else select_resolver()
        self._cache = cache if cache is not None else TypeResolutionCache()

    @property
    def resolver(self) -> TypeShapeResolver:
        return self._resolver

    @property
    def cache(self) -> TypeResolutionCache:
        return self._cache

    def extract(
        self,
        path: Union[str, Path],
        component_name: str,
        repo_root: Union[str, Path],
        source: Optional[str] = None,
    ) -> List[PropDef]:
        """Return the component's editable props; never raises.

        Internal failures are logged and produce an empty list, which callers
        treat as "use the fallback extractor".
        """
        try:
            return self._extract(Path(path), component_name, Path(repo_root), source)
        except Exception as exc:  # pragma: no cover - defensive guard
            _LOGGER.warning("Prop extraction failed for %s (%s): %s", component_name, path, exc)
            return []

    def _extract(
        self, path: Path, component_name: str, repo_root: Path, source: Optional[str]
    ) -> List[PropDef]:
        if source is None:
            source = path.read_text(encoding="utf-8")
        context = self._cache.context_for(repo_root, self._resolver)
        module = context.module(path, source)
        if module is None:
            return []

        members = self._locate_members(context, module, component_name)
        if not members:
            return []

        defaults = extract_defaults(source, component_name)
        prop_defs: List[PropDef] = []
        for signature, owner, _ in members:
            kind, options = classify_shape(
                signature.shape, lambda name, owner=owner: _alias_value(context, owner, name)
            )
            prop_defs.append(
                PropDef(
                    name=signature.name,
                    kind=kind,
                    options=options,
                    default_value=defaults.get(signature.name),
                )
            )
        return prop_defs

    def _locate_members(
        self, context: ResolutionContext, module: ModuleShapes, component_name: str
    ) -> List[_Member]:
        found = context.find_declaration(module, f"{component_name}Props")
        if found is not None:
            owner, declaration = found
            raw = _declaration_members(context, owner, declaration, True, 0)
        else:
            shape = module.component_props.get(component_name)
            if shape is None:
                return []
            raw = _shape_members(context, module, shape, True, 0)
        return _select(raw)


def _select(raw: List[_Member]) -> List[_Member]:
    """Deduplicate by name (own declarations win) and apply the exclusion rules."""
    collected: Dict[str, _Member] = {}
    for member in raw:
        name = member[0].name
        existing = collected.get(name)
        if existing is None or (member[2] and not existing[2]):
            collected[name] = member
    selected: List[_Member] = []
    for signature, owner, own in collected.values():
        if signature.name in SKIP_PROPS:
            continue
        if not own and _EVENT_HANDLER_RE.match(signature.name):
            continue
        selected.append((signature, owner, own))
    return selected


def _declaration_members(
    context: ResolutionContext,
    owner: ModuleShapes,
    declaration: TypeDeclaration,
    own: bool,
    depth: int,
) -> List[_Member]:
    members: List[_Member] = [(prop, owner, own) for prop in declaration.properties]
    if declaration.kind == "interface":
        for base in declaration.bases:
            members.extend(_shape_members(context, owner, base, False, depth + 1))
    elif declaration.value is not None and declaration.value.kind != OBJECT:
        members.extend(_shape_members(context, owner, declaration.value, own, depth + 1))
    return members


def _shape_members(
    context: ResolutionContext,
    owner: ModuleShapes,
    shape: TypeShape,
    own: bool,
    depth: int,
) -> List[_Member]:
    if depth > _MAX_DEPTH:
        return []
    if shape.kind == OBJECT:
        return [(prop, owner, own) for prop in shape.properties]
    if shape.kind in (INTERSECTION, UNION):
        members: List[_Member] = []
        for part in flatten(shape, shape.kind):
            part_own = own if part.kind == OBJECT else False
            members.extend(_shape_members(context, owner, part, part_own, depth + 1))
        return members
    if shape.kind != REFERENCE:
        return []

    name = shape.reference_name
    if name in ("Omit", "Pick") and len(shape.arguments) == 2:
        keys = {
            key.value for key in flatten(shape.arguments[1], UNION) if key.kind == STRING_LITERAL
        }
        inner = _shape_members(context, owner, shape.arguments[0], own, depth + 1)
        if name == "Omit":
            return [member for member in inner if member[0].name not in keys]
        return [member for member in inner if member[0].name in keys]
    if name in PASS_THROUGH_WRAPPERS and shape.arguments:
        return _shape_members(context, owner, shape.arguments[0], own, depth + 1)

    found = context.find_declaration(owner, shape.value or "")
    if found is None:
        # Declared outside the repository (framework attributes and the like).
        return []
    declaring_module, declaration = found
    return _declaration_members(context, declaring_module, declaration, own, depth + 1)


def _alias_value(context: ResolutionContext, owner: ModuleShapes, name: str) -> Optional[TypeShape]:
    found = context.find_declaration(owner, name)
    if found is None:
        return None
    _, declaration = found
    return declaration.value if declaration.kind == "alias" else None


__all__ = ["PropSchemaExtractor", "select_resolver"]
