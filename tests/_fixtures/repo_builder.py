"""Helper utilities for constructing temporary component libraries in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from uiforge.models import RepositoryModel
from uiforge.parser import RepositoryParser
from uiforge.repo_scanner import RepoScanner, ScanResult


class RepoBuilder:
    """Utility for writing files into a throwaway repository and re-parsing it."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "repo"
        self.root.mkdir()
        self._scanner = RepoScanner()
        self._parser = RepositoryParser()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the repository."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def read(self, relative: str) -> str:
        return (self.root / relative).read_text(encoding="utf-8")

    def scan(self) -> ScanResult:
        """Return a fresh scan of the repository contents."""
        return self._scanner.scan(str(self.root))

    def parse(self) -> RepositoryModel:
        """Return a fresh model of the repository."""
        return self._parser.parse(self.root)

    def path(self) -> Path:
        """Return the repository root path."""
        return self.root


__all__ = ["RepoBuilder"]
