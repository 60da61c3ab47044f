"""Public operations consumed by editor front-ends."""

from __future__ import annotations

from .models import RepositoryModel, to_payload
from .parser import RepositoryParser, parse_repository
from .stores.type_cache import TypeResolutionCache
from .writeback import (
    SourceWriter,
    WriteResult,
    write_css_change,
    write_prop_default,
    write_token_value,
)

__all__ = [
    "RepositoryModel",
    "RepositoryParser",
    "SourceWriter",
    "TypeResolutionCache",
    "WriteResult",
    "parse_repository",
    "to_payload",
    "write_css_change",
    "write_prop_default",
    "write_token_value",
]
