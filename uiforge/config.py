"""Configuration loading for uiforge (.uiforge.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".uiforge.yml"
DEFAULT_MANIFEST = "forgecore.json"

DEFAULT_EXTENSIONS = [".tsx", ".jsx"]

DEFAULT_THEME_FILES = [
    "src/styles/globals.css",
    "src/styles/index.css",
    "src/styles/theme.css",
    "src/styles/tokens.css",
    "src/styles/variables.css",
    "src/styles/themes/light.css",
    "src/styles/themes/dark.css",
    "styles/globals.css",
    "src/index.css",
    "src/globals.css",
    "app/globals.css",
]

DEFAULT_TOKEN_JSON_FILES = ["tokens.json", "design-tokens.json", "src/tokens.json"]


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ScanConfig:
    """Component discovery settings."""

    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude_paths: List[str] = field(default_factory=list)


@dataclass
class TokenConfig:
    """Where design tokens are looked up when no manifest declares them."""

    theme_files: List[str] = field(default_factory=lambda: list(DEFAULT_THEME_FILES))
    json_files: List[str] = field(default_factory=lambda: list(DEFAULT_TOKEN_JSON_FILES))


@dataclass
class ExtractorConfig:
    """Prop schema extraction settings."""

    structural: bool = True


@dataclass
class UIForgeConfig:
    """Represents the settings defined in .uiforge.yml."""

    root: Path
    manifest: str = DEFAULT_MANIFEST
    scan: ScanConfig = field(default_factory=ScanConfig)
    tokens: TokenConfig = field(default_factory=TokenConfig)
    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)


def load_config(config_path: Path) -> UIForgeConfig:
    """Load configuration from disk, returning defaults when no file exists."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return UIForgeConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = UIForgeConfig(root=root)
    manifest = _as_str(data.get("manifest"))
    if manifest:
        config.manifest = manifest

    scan_data = _as_dict(data.get("scan"))
    if scan_data:
        extensions = _as_str_list(scan_data.get("extensions"))
        if extensions:
            config.scan.extensions = [_normalise_extension(ext) for ext in extensions]
        config.scan.exclude_paths = _as_str_list(scan_data.get("exclude_paths"))

    token_data = _as_dict(data.get("tokens"))
    if token_data:
        if "theme_files" in token_data:
            config.tokens.theme_files = _as_str_list(token_data.get("theme_files"))
        if "json_files" in token_data:
            config.tokens.json_files = _as_str_list(token_data.get("json_files"))

    extractor_data = _as_dict(data.get("extractor"))
    if extractor_data:
        structural = _as_bool(extractor_data.get("structural"))
        if structural is not None:
            config.extractor.structural = structural

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _normalise_extension(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_MANIFEST",
    "ExtractorConfig",
    "ScanConfig",
    "TokenConfig",
    "UIForgeConfig",
    "load_config",
]
