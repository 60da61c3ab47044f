"""Caches shared across parses."""

from .type_cache import ResolutionContext, TypeResolutionCache

__all__ = ["ResolutionContext", "TypeResolutionCache"]
