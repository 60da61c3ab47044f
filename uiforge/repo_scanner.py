"""Repository scanning: file inventory, manifest detection and component candidates."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

from .components import find_stylesheet_import
from .config import CONFIG_FILENAME, ConfigError, UIForgeConfig, load_config
from .logging import get_logger, record_warning
from .manifest import load_manifest
from .models import Manifest, ManifestComponent

_LOGGER = get_logger("repo_scanner")

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "dist",
    "build",
    "out",
    ".next",
    "coverage",
    "storybook-static",
    ".turbo",
    ".cache",
    ".idea",
    ".vscode",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

_LANGUAGE_BY_SUFFIX = {
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
    ".mts": "TypeScript",
    ".cts": "TypeScript",
    ".js": "JavaScript",
    ".jsx": "JavaScript",
    ".mjs": "JavaScript",
    ".cjs": "JavaScript",
    ".css": "CSS",
    ".scss": "SCSS",
    ".json": "JSON",
    ".yaml": "YAML",
    ".yml": "YAML",
    ".md": "Markdown",
    ".mdx": "MDX",
}

_NON_COMPONENT_MARKERS = (".test.", ".spec.", ".stories.", ".story.", ".types.", ".d.")
_CONFIG_MARKERS = (".config.", "tsconfig", "package.json", ".eslintrc", ".prettierrc")


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .uiforge.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        target = rel_path
        if self.anchored or self.has_slash:
            if fnmatchcase(target, self.pattern):
                return True
            if self.directory_only and target.startswith(f"{self.pattern}/"):
                return True
            return False

        for part in target.split("/"):
            if fnmatchcase(part, self.pattern):
                return True
        return False


@dataclass(frozen=True)
class FileMeta:
    path: str
    size: int
    language: Optional[str]
    role: str


@dataclass(frozen=True)
class ComponentCandidate:
    """A source file expected to define one component."""

    source_path: str
    stylesheet_path: Optional[str] = None
    manifest_entry: Optional[ManifestComponent] = None
    name_hint: Optional[str] = None


@dataclass
class ScanResult:
    root: str
    manifest: Optional[Manifest] = None
    manifest_path: Optional[str] = None
    candidates: List[ComponentCandidate] = field(default_factory=list)
    files: List[FileMeta] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    has_slash = "/" in pattern
    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash=has_slash,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = _build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _load_ignore_rules(root: Path, exclude_paths: Sequence[str]) -> List[IgnoreRule]:
    rules = _parse_gitignore(root / ".gitignore")
    for pattern in exclude_paths:
        rule = _build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _iter_files(root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        filtered_dirs = []
        for name in sorted(dirnames):
            if name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if _should_ignore(rel_path, True, rules):
                continue
            filtered_dirs.append(name)
        dirnames[:] = filtered_dirs

        for filename in sorted(filenames):
            if filename in _EXCLUDED_FILES:
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _should_ignore(rel_path, False, rules):
                continue
            yield current_dir / filename


def _detect_language(path: Path) -> str | None:
    return _LANGUAGE_BY_SUFFIX.get(path.suffix.lower())


def is_component_file(rel_path: str, extensions: Sequence[str]) -> bool:
    """True for ``.tsx``/``.jsx`` files named like a component (not tests, stories or barrels)."""
    name = rel_path.rsplit("/", 1)[-1]
    suffix = os.path.splitext(name)[1].lower()
    if suffix not in extensions:
        return False
    if any(marker in name for marker in _NON_COMPONENT_MARKERS):
        return False
    if name.split(".", 1)[0] == "index":
        return False
    return name[:1].isupper()


def _detect_role(rel_path: str, extensions: Sequence[str], manifest_name: str) -> str:
    name = rel_path.rsplit("/", 1)[-1]
    if rel_path == manifest_name:
        return "manifest"
    if ".stories." in name or ".story." in name:
        return "story"
    if ".test." in name or ".spec." in name or "/__tests__/" in f"/{rel_path}":
        return "test"
    if name.endswith((".css", ".scss")):
        return "stylesheet"
    if name == CONFIG_FILENAME or any(marker in name for marker in _CONFIG_MARKERS):
        return "config"
    if is_component_file(rel_path, extensions):
        return "component"
    return "other"


def _adjacent_stylesheet(root: Path, rel_source: str) -> Optional[str]:
    source = root / rel_source
    base = source.name.split(".", 1)[0]
    for candidate in (f"{base}.module.css", f"{base}.module.scss", f"{base}.css"):
        path = source.with_name(candidate)
        if path.is_file():
            return path.relative_to(root).as_posix()
    return None


def _imported_stylesheet(root: Path, rel_source: str) -> Optional[str]:
    source = root / rel_source
    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    specifier = find_stylesheet_import(text)
    if specifier is None:
        return None
    if specifier.startswith(("@/", "~/")):
        target = root / "src" / specifier[2:]
    else:
        target = source.parent / specifier
    target = Path(os.path.normpath(target))
    if target.is_file() and _within(root, target):
        return target.relative_to(root).as_posix()
    return None


def _within(root: Path, path: Path) -> bool:
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


class RepoScanner:
    """Walks a component library to find components, stylesheets and the manifest.

    The scanner is read-only: nothing is written into the scanned repository.
    """

    def __init__(self, config: Optional[UIForgeConfig] = None) -> None:
        self._config = config

    def scan(self, root: str) -> ScanResult:
        """Return the file inventory and component candidates of ``root``."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Repository path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Repository path is not a directory: {root}")

        config, warnings = self._resolve_config(root_path)
        manifest, manifest_warnings = load_manifest(root_path, config.manifest)
        warnings.extend(manifest_warnings)

        rules = _load_ignore_rules(root_path, config.scan.exclude_paths)
        extensions = config.scan.extensions
        files: List[FileMeta] = []
        for path in _iter_files(root_path, rules):
            rel_path = path.relative_to(root_path).as_posix()
            files.append(
                FileMeta(
                    path=rel_path,
                    size=path.stat().st_size,
                    language=_detect_language(path),
                    role=_detect_role(rel_path, extensions, config.manifest),
                )
            )

        result = ScanResult(
            root=str(root_path),
            manifest=manifest,
            manifest_path=config.manifest if manifest is not None else None,
            files=files,
            warnings=warnings,
        )
        if manifest is not None:
            _LOGGER.info(
                "Using manifest %s (%d component(s))", config.manifest, len(manifest.components)
            )
            result.candidates = self._manifest_candidates(root_path, manifest, warnings)
        else:
            result.candidates = self._heuristic_candidates(root_path, files)
        return result

    def _resolve_config(self, root: Path) -> Tuple[UIForgeConfig, List[str]]:
        if self._config is not None:
            return self._config, []
        try:
            return load_config(root), []
        except ConfigError as exc:
            message = f"Ignoring {CONFIG_FILENAME}: {exc}"
            _LOGGER.warning(message)
            return UIForgeConfig(root=root), [message]

    def _manifest_candidates(
        self, root: Path, manifest: Manifest, warnings: List[str]
    ) -> List[ComponentCandidate]:
        candidates: List[ComponentCandidate] = []
        for name, entry in manifest.components.items():
            source = Path(os.path.normpath(root / entry.entry))
            if not source.is_file() or not _within(root, source):
                message = f"Manifest entry for {name} not found: {entry.entry}"
                record_warning(_LOGGER, warnings, message)
                continue
            rel_source = source.relative_to(root).as_posix()
            stylesheet: Optional[str] = None
            if entry.styles:
                style_path = Path(os.path.normpath(root / entry.styles[0]))
                if style_path.is_file() and _within(root, style_path):
                    stylesheet = style_path.relative_to(root).as_posix()
                else:
                    message = f"Stylesheet for {name} not found: {entry.styles[0]}"
                    record_warning(_LOGGER, warnings, message)
            candidates.append(
                ComponentCandidate(
                    source_path=rel_source,
                    stylesheet_path=stylesheet,
                    manifest_entry=entry,
                    name_hint=name,
                )
            )
        return candidates

    def _heuristic_candidates(self, root: Path, files: Sequence[FileMeta]) -> List[ComponentCandidate]:
        candidates: List[ComponentCandidate] = []
        for meta in files:
            if meta.role != "component":
                continue
            stylesheet = _imported_stylesheet(root, meta.path) or _adjacent_stylesheet(root, meta.path)
            candidates.append(ComponentCandidate(source_path=meta.path, stylesheet_path=stylesheet))
        return candidates


__all__ = [
    "ComponentCandidate",
    "FileMeta",
    "IgnoreRule",
    "RepoScanner",
    "ScanResult",
    "is_component_file",
]
