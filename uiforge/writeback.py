"""File-level writeback of editor changes through the patch engine."""

from __future__ import annotations

import os
import stat
import tempfile
import threading
import weakref
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from .logging import get_logger
from .patcher import (
    PatchOutcome,
    PatchStatus,
    patch_css_property,
    patch_prop_default,
    patch_token_value,
)

_LOGGER = get_logger("writeback")


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a single edit applied to a file on disk."""

    success: bool
    new_content: Optional[str] = None
    previous_value: Optional[str] = None
    error: Optional[str] = None
    strategy: Optional[str] = None

    @property
    def not_found(self) -> bool:
        return not self.success and bool(self.error) and "not found" in (self.error or "")


def _read_text(path: Path) -> str:
    with open(path, "r", encoding="utf-8", newline="") as handle:
        return handle.read()


def _write_atomic(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` via a temporary file in the same directory."""
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        os.chmod(tmp_name, stat.S_IMODE(path.stat().st_mode))
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


class SourceWriter:
    """Applies patches to files, serializing edits to the same path."""

    def __init__(self) -> None:
        # Entries vanish once no edit holds or waits on the lock.
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()
        self._registry_lock = threading.Lock()

    def _lock_for(self, path: Path) -> threading.Lock:
        key = str(path.resolve())
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def apply(self, file_path: str | Path, patch: Callable[[str], PatchOutcome]) -> WriteResult:
        """Read ``file_path``, run ``patch`` on its text and write the result back.

        Nothing is written when the patch fails or leaves the text unchanged.
        """
        path = Path(file_path).expanduser()
        with self._lock_for(path):
            try:
                original = _read_text(path)
            except (OSError, UnicodeDecodeError) as exc:
                _LOGGER.warning("Cannot read %s: %s", path, exc)
                return WriteResult(success=False, error=str(exc))

            outcome = patch(original)
            if not outcome.success:
                _LOGGER.warning("Edit to %s failed: %s", path, outcome.error)
                return WriteResult(
                    success=False,
                    error=outcome.error,
                    strategy=outcome.status.value,
                )

            if outcome.text != original:
                try:
                    _write_atomic(path, outcome.text)
                except OSError as exc:
                    _LOGGER.warning("Cannot write %s: %s", path, exc)
                    return WriteResult(success=False, error=str(exc))
            if outcome.status is PatchStatus.FALLBACK_PATCHED:
                _LOGGER.info("Patched %s using the text-scan fallback", path)
            return WriteResult(
                success=True,
                new_content=outcome.text,
                previous_value=outcome.previous_value,
                strategy=outcome.status.value,
            )

    def write_css_change(
        self,
        file_path: str | Path,
        selector: str,
        prop: str,
        value: str,
        media_query: Optional[str] = None,
    ) -> WriteResult:
        return self.apply(
            file_path, lambda text: patch_css_property(text, selector, prop, value, media_query)
        )

    def write_prop_default(
        self, manifest_path: str | Path, component_name: str, prop_name: str, value: Any
    ) -> WriteResult:
        return self.apply(
            manifest_path, lambda text: patch_prop_default(text, component_name, prop_name, value)
        )

    def write_token_value(
        self, theme_file_path: str | Path, token_name: str, new_value: str
    ) -> WriteResult:
        return self.apply(
            theme_file_path, lambda text: patch_token_value(text, token_name, new_value)
        )


_DEFAULT_WRITER = SourceWriter()


def write_css_change(
    file_path: str | Path,
    selector: str,
    prop: str,
    value: str,
    media_query: Optional[str] = None,
) -> WriteResult:
    """Set ``prop: value`` for ``selector`` in a stylesheet on disk."""
    return _DEFAULT_WRITER.write_css_change(file_path, selector, prop, value, media_query)


def write_prop_default(
    manifest_path: str | Path, component_name: str, prop_name: str, value: Any
) -> WriteResult:
    """Persist a default prop value into the repository manifest."""
    return _DEFAULT_WRITER.write_prop_default(manifest_path, component_name, prop_name, value)


def write_token_value(theme_file_path: str | Path, token_name: str, new_value: str) -> WriteResult:
    """Change the value of a design token in a theme stylesheet."""
    return _DEFAULT_WRITER.write_token_value(theme_file_path, token_name, new_value)


__all__ = [
    "SourceWriter",
    "WriteResult",
    "write_css_change",
    "write_prop_default",
    "write_token_value",
]
