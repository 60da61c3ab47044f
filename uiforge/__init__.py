"""Component library analysis and non-destructive style writeback."""

from .api import (
    RepositoryModel,
    WriteResult,
    parse_repository,
    to_payload,
    write_css_change,
    write_prop_default,
    write_token_value,
)

__version__ = "0.1.0"

__all__ = [
    "RepositoryModel",
    "WriteResult",
    "__version__",
    "parse_repository",
    "to_payload",
    "write_css_change",
    "write_prop_default",
    "write_token_value",
]
