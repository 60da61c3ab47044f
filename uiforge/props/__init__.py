"""Prop schema extraction: type shape resolvers and kind classification."""

from .base import ModuleShapes, TypeShape, TypeShapeResolver
from .classify import classify_shape
from .fallback import SKIP_PROPS, fallback_prop_defs
from .heuristic import HeuristicResolver
from .tree_sitter import TREE_SITTER_AVAILABLE, TreeSitterResolver

__all__ = [
    "HeuristicResolver",
    "ModuleShapes",
    "SKIP_PROPS",
    "TREE_SITTER_AVAILABLE",
    "TreeSitterResolver",
    "TypeShape",
    "TypeShapeResolver",
    "classify_shape",
    "fallback_prop_defs",
]
