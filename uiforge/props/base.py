"""Shared type-shape model and the resolver contract for prop extraction."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

# TypeShape kinds
UNION = "union"
INTERSECTION = "intersection"
STRING_LITERAL = "string_literal"
NUMBER_LITERAL = "number_literal"
BOOLEAN_LITERAL = "boolean_literal"
NULLISH = "nullish"
KEYWORD = "keyword"
REFERENCE = "reference"
ARRAY = "array"
FUNCTION = "function"
OBJECT = "object"
OTHER = "other"


@dataclass(frozen=True)
class PropertySignature:
    name: str
    shape: "TypeShape"
    optional: bool = False


@dataclass(frozen=True)
class TypeShape:
    """Language-neutral outline of a TypeScript type annotation.

    ``value`` holds the literal text for literal kinds, the keyword for
    ``keyword`` and the (possibly dotted) name for ``reference``.
    """

    kind: str
    text: str = ""
    value: Optional[str] = None
    members: Tuple["TypeShape", ...] = ()
    arguments: Tuple["TypeShape", ...] = ()
    properties: Tuple[PropertySignature, ...] = ()

    @property
    def reference_name(self) -> str:
        """Last segment of a reference name (``React.ReactNode`` -> ``ReactNode``)."""
        return (self.value or "").rsplit(".", 1)[-1]


@dataclass(frozen=True)
class TypeDeclaration:
    """An ``interface`` or ``type`` alias declared at module level."""

    name: str
    kind: str
    properties: Tuple[PropertySignature, ...] = ()
    bases: Tuple[TypeShape, ...] = ()
    value: Optional[TypeShape] = None


@dataclass(frozen=True)
class ImportBinding:
    source: str
    imported: str


@dataclass
class ModuleShapes:
    """Everything prop extraction needs from one source module."""

    path: str
    declarations: Dict[str, TypeDeclaration] = field(default_factory=dict)
    imports: Dict[str, ImportBinding] = field(default_factory=dict)
    component_props: Dict[str, TypeShape] = field(default_factory=dict)


class TypeShapeResolver(ABC):
    """Contract for turning component source text into :class:`ModuleShapes`."""

    name = "resolver"

    @property
    @abstractmethod
    def available(self) -> bool:
        """Return True when the resolver can run in this environment."""

    @abstractmethod
    def parse_module(self, path: str, source: str) -> ModuleShapes:
        """Extract type declarations, imports and component prop annotations."""


def flatten(shape: TypeShape, kind: str) -> List[TypeShape]:
    """Flatten nested unions (or intersections) into one member list."""
    if shape.kind != kind:
        return [shape]
    members: List[TypeShape] = []
    for member in shape.members:
        members.extend(flatten(member, kind))
    return members


__all__ = [
    "ARRAY",
    "BOOLEAN_LITERAL",
    "FUNCTION",
    "INTERSECTION",
    "ImportBinding",
    "KEYWORD",
    "ModuleShapes",
    "NULLISH",
    "NUMBER_LITERAL",
    "OBJECT",
    "OTHER",
    "PropertySignature",
    "REFERENCE",
    "STRING_LITERAL",
    "TypeDeclaration",
    "TypeShape",
    "TypeShapeResolver",
    "UNION",
    "flatten",
]
