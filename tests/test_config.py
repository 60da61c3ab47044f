"""Tests for uiforge.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from uiforge.config import (
    DEFAULT_MANIFEST,
    ConfigError,
    UIForgeConfig,
    load_config,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, UIForgeConfig)
    assert config.root == tmp_path.resolve()
    assert config.manifest == DEFAULT_MANIFEST
    assert config.scan.extensions == [".tsx", ".jsx"]
    assert config.scan.exclude_paths == []
    assert "src/styles/globals.css" in config.tokens.theme_files
    assert "tokens.json" in config.tokens.json_files
    assert config.extractor.structural is True


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".uiforge.yml"
    config_file.write_text(
        """
manifest: "ui.manifest.json"
scan:
  extensions: [tsx, ".JSX"]
  exclude_paths:
    - "legacy/"
    - "*.generated.tsx"
tokens:
  theme_files:
    - "theme/base.css"
  json_files: []
extractor:
  structural: "no"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.root == tmp_path.resolve()
    assert config.manifest == "ui.manifest.json"
    assert config.scan.extensions == [".tsx", ".jsx"]
    assert config.scan.exclude_paths == ["legacy/", "*.generated.tsx"]
    assert config.tokens.theme_files == ["theme/base.css"]
    assert config.tokens.json_files == []
    assert config.extractor.structural is False


def test_load_config_accepts_sibling_path(tmp_path: Path) -> None:
    (tmp_path / ".uiforge.yml").write_text("manifest: lib.json\n", encoding="utf-8")

    config = load_config(tmp_path / "package.json")

    assert config.manifest == "lib.json"


def test_load_config_treats_empty_file_as_defaults(tmp_path: Path) -> None:
    (tmp_path / ".uiforge.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.manifest == DEFAULT_MANIFEST


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".uiforge.yml").write_text("scan: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".uiforge.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(tmp_path)
