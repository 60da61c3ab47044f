"""In-memory cache of parsed module shapes, keyed by repository root."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..logging import get_logger
from ..props.base import ModuleShapes, TypeDeclaration, TypeShapeResolver

_LOGGER = get_logger("stores.type_cache")

_MODULE_SUFFIXES = (".tsx", ".ts", ".d.ts", ".jsx", ".js")
_ALIAS_PREFIXES = ("@/", "~/")
_MAX_IMPORT_HOPS = 4

PathLike = Union[str, Path]


def _root_key(repo_root: PathLike) -> str:
    return str(Path(repo_root).expanduser().resolve())


class ResolutionContext:
    """Parsed modules of one repository, shared by every component extracted from it.

    Entries are never re-validated against the file system; the owning
    :class:`TypeResolutionCache` must be invalidated when files change.
    """

    def __init__(self, root: Path, resolver: TypeShapeResolver) -> None:
        self.root = root
        self.resolver = resolver
        self._modules: Dict[str, ModuleShapes] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._modules)

    def module(self, path: Path, source: Optional[str] = None) -> Optional[ModuleShapes]:
        key = str(path.resolve())
        with self._lock:
            cached = self._modules.get(key)
        if cached is not None:
            return cached
        if source is None:
            try:
                source = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                _LOGGER.debug("Cannot read %s for type resolution: %s", path, exc)
                return None
        shapes = self.resolver.parse_module(key, source)
        with self._lock:
            return self._modules.setdefault(key, shapes)

    def resolve_import(self, from_path: Path, specifier: str) -> Optional[Path]:
        """Locate a relative or ``@/`` aliased module inside the repository."""
        if specifier.startswith("."):
            base = from_path.parent / specifier
        elif specifier.startswith(_ALIAS_PREFIXES):
            base = self.root / "src" / specifier[2:]
        else:
            return None
        candidates = [base]
        candidates.extend(base.with_name(base.name + suffix) for suffix in _MODULE_SUFFIXES)
        candidates.extend(base / f"index{suffix}" for suffix in _MODULE_SUFFIXES)
        for candidate in candidates:
            if candidate.is_file() and candidate.suffix in (".tsx", ".ts", ".jsx", ".js"):
                return candidate
        return None

    def find_declaration(
        self, module: ModuleShapes, name: str, _hops: int = 0
    ) -> Optional[Tuple[ModuleShapes, TypeDeclaration]]:
        """Find ``name`` declared in ``module`` or in a module it imports from."""
        if "." in name:
            return None
        declaration = module.declarations.get(name)
        if declaration is not None:
            return module, declaration
        binding = module.imports.get(name)
        if binding is None or _hops >= _MAX_IMPORT_HOPS:
            return None
        target = self.resolve_import(Path(module.path), binding.source)
        if target is None:
            return None
        imported = self.module(target)
        if imported is None:
            return None
        return self.find_declaration(imported, binding.imported, _hops + 1)


class TypeResolutionCache:
    """Process-wide store of :class:`ResolutionContext` objects per repository root."""

    def __init__(self) -> None:
        self._contexts: Dict[str, ResolutionContext] = {}
        self._lock = threading.Lock()

    def context_for(self, repo_root: PathLike, resolver: TypeShapeResolver) -> ResolutionContext:
        key = _root_key(repo_root)
        with self._lock:
            context = self._contexts.get(key)
            if context is None or context.resolver.name != resolver.name:
                context = ResolutionContext(Path(key), resolver)
                self._contexts[key] = context
            return context

    def invalidate(self, repo_root: PathLike) -> bool:
        """Drop everything cached for ``repo_root``; return True if anything was cached."""
        with self._lock:
            removed = self._contexts.pop(_root_key(repo_root), None)
        if removed is not None:
            _LOGGER.debug("Invalidated type cache for %s (%d module(s))", repo_root, len(removed))
        return removed is not None

    def clear(self) -> None:
        with self._lock:
            self._contexts.clear()

    def roots(self) -> List[str]:
        with self._lock:
            return list(self._contexts)

    def __contains__(self, repo_root: object) -> bool:
        if not isinstance(repo_root, (str, Path)):
            return False
        with self._lock:
            return _root_key(repo_root) in self._contexts


__all__ = ["ResolutionContext", "TypeResolutionCache"]
