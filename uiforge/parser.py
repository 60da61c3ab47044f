"""Repository parsing pipeline: scan, extract, merge manifest overrides."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from .components import extract_component_name, extract_dependencies, variants_from_css
from .config import CONFIG_FILENAME, ConfigError, UIForgeConfig, load_config
from .css.parser import namespace_css_module, parse_css_module
from .logging import get_logger, record_warning
from .manifest import ManifestResolver
from .models import Component, RepositoryModel
from .props.extractor import PropSchemaExtractor, select_resolver
from .props.fallback import fallback_prop_defs
from .repo_scanner import ComponentCandidate, RepoScanner
from .stores.type_cache import TypeResolutionCache
from .stories import load_story_variants
from .tokens import TokenCollector


class RepositoryParser:
    """Builds a :class:`RepositoryModel` from a component library checkout.

    One parser owns one :class:`TypeResolutionCache`. The cache entry for a
    repository is dropped at the start of every parse, and the entry of the
    previously parsed repository is dropped when switching roots.
    """

    def __init__(
        self,
        config: Optional[UIForgeConfig] = None,
        cache: Optional[TypeResolutionCache] = None,
    ) -> None:
        self._config = config
        self.cache = cache if cache is not None else TypeResolutionCache()
        self.logger = get_logger("parser")
        self._last_root: Optional[str] = None
        self._lock = threading.Lock()

    def parse(self, repo_path: str | Path) -> RepositoryModel:
        root = Path(repo_path).expanduser().resolve()
        if not root.exists():
            raise FileNotFoundError(f"Repository path not found: {repo_path}")
        if not root.is_dir():
            raise NotADirectoryError(f"Repository path is not a directory: {repo_path}")

        self._reset_cache(str(root))
        config, warnings = self._load_config(root)
        scan = RepoScanner(config).scan(str(root))
        warnings.extend(scan.warnings)

        extractor = PropSchemaExtractor(select_resolver(config.extractor.structural), self.cache)
        self.logger.debug("Extracting props with the %s resolver", extractor.resolver.name)

        resolver = ManifestResolver(scan.manifest)
        components: List[Component] = []
        seen: Set[str] = set()
        for candidate in scan.candidates:
            try:
                component = self._parse_candidate(root, candidate, extractor)
            except Exception as exc:  # component failures never abort the parse
                message = f"Failed to parse component {candidate.source_path}: {exc}"
                record_warning(self.logger, warnings, message)
                continue
            if component is None:
                continue
            if component.name in seen:
                message = (
                    f"Duplicate component name {component.name} in {candidate.source_path}; skipped"
                )
                record_warning(self.logger, warnings, message)
                continue
            seen.add(component.name)
            components.append(resolver.resolve(component))

        tokens, theme_source = TokenCollector(root, config.tokens).collect(scan.manifest)
        self.logger.info(
            "Parsed %d component(s) and %d token(s) from %s", len(components), len(tokens), root
        )
        return RepositoryModel(
            root=str(root),
            components=tuple(components),
            tokens=tuple(tokens),
            theme_source=theme_source,
            manifest=scan.manifest,
            warnings=tuple(warnings),
        )

    def _reset_cache(self, root: str) -> None:
        with self._lock:
            if self._last_root is not None and self._last_root != root:
                self.cache.invalidate(self._last_root)
            self.cache.invalidate(root)
            self._last_root = root

    def _load_config(self, root: Path) -> Tuple[UIForgeConfig, List[str]]:
        if self._config is not None:
            return self._config, []
        try:
            return load_config(root), []
        except ConfigError as exc:
            message = f"Ignoring {CONFIG_FILENAME}: {exc}"
            self.logger.warning(message)
            return UIForgeConfig(root=root), [message]

    def _parse_candidate(
        self, root: Path, candidate: ComponentCandidate, extractor: PropSchemaExtractor
    ) -> Optional[Component]:
        source_path = root / candidate.source_path
        source = source_path.read_text(encoding="utf-8")
        name = candidate.name_hint or extract_component_name(source, source_path.name)
        if not name:
            self.logger.debug("No component export found in %s", candidate.source_path)
            return None

        prop_defs = extractor.extract(source_path, name, root, source)
        if not prop_defs:
            prop_defs = fallback_prop_defs(source, name)
            if prop_defs:
                self.logger.info("Used line-pattern prop extraction for %s", name)
        default_props: Dict[str, object] = {
            prop.name: prop.default_value for prop in prop_defs if prop.default_value is not None
        }

        raw_css: Optional[str] = None
        scoped_css: Optional[str] = None
        css_rules = ()
        variants = ()
        if candidate.stylesheet_path:
            raw_css = (root / candidate.stylesheet_path).read_text(encoding="utf-8")
            css_rules = tuple(parse_css_module(raw_css))
            scoped_css = namespace_css_module(raw_css, name)
            variants = tuple(variants_from_css(raw_css))

        module_path = candidate.source_path.rsplit(".", 1)[0]
        return Component(
            id=module_path,
            name=name,
            source_file_path=candidate.source_path,
            source_code=source,
            prop_defs=tuple(prop_defs),
            variants=variants,
            css_module_path=candidate.stylesheet_path,
            raw_css=raw_css,
            story_variants=tuple(load_story_variants(source_path)),
            default_props=default_props,
            css_rules=css_rules,
            scoped_css=scoped_css,
            dependencies=tuple(dep for dep in extract_dependencies(source) if dep != name),
            import_path=f"@repo/{module_path}",
        )


def parse_repository(
    repo_path: str | Path,
    *,
    config: Optional[UIForgeConfig] = None,
    cache: Optional[TypeResolutionCache] = None,
) -> RepositoryModel:
    """Parse ``repo_path`` into a :class:`RepositoryModel`."""
    return RepositoryParser(config=config, cache=cache).parse(repo_path)


__all__ = ["RepositoryParser", "parse_repository"]
