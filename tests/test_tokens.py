"""Tests for design token collection."""

from __future__ import annotations

import json

import pytest

from uiforge.config import TokenConfig
from uiforge.manifest import parse_manifest
from uiforge.tokens import (
    TokenCollector,
    css_custom_properties,
    flatten_json_tokens,
    infer_token_type,
)
from tests._fixtures.repo_builder import RepoBuilder


@pytest.mark.parametrize(
    "name, value, expected",
    [
        ("radius-md", "6px", "radius"),
        ("rounded-lg", "12px", "radius"),
        ("font-size-base", "16px", "typography"),
        ("line-height-tight", "1.2", "typography"),
        ("space-4", "16px", "spacing"),
        ("gap-sm", "4px", "spacing"),
        ("color-primary", "blue", "color"),
        ("bg-surface", "white", "color"),
        ("brand", "#ff0000", "color"),
        ("brand-accent", "rgb(0, 0, 0)", "color"),
        ("step-2", "1.5rem", "spacing"),
        ("mystery", "auto", "color"),
    ],
)
def test_infer_token_type(name: str, value: str, expected: str) -> None:
    assert infer_token_type(name, value) == expected


def test_css_custom_properties_in_document_order() -> None:
    text = ":root { --a: 1px; color: red; --b:  #fff ; }\n.dark { --a: 2px; }\n"

    assert css_custom_properties(text) == [("a", "1px"), ("b", "#fff"), ("a", "2px")]


def test_flatten_json_tokens_handles_nested_and_leaf_objects() -> None:
    data = {
        "color": {"primary": {"value": "#0af"}, "text": "#111"},
        "space": {"2": {"$value": "8px"}},
        "flag": True,
    }

    assert flatten_json_tokens(data) == [
        ("color-primary", "#0af"),
        ("color-text", "#111"),
        ("space-2", "8px"),
    ]


def test_collect_from_default_theme_files(component_library: RepoBuilder) -> None:
    tokens, theme_source = TokenCollector(component_library.path()).collect()

    by_name = {token.name: token for token in tokens}
    assert list(by_name) == [
        "color-primary",
        "color-text",
        "space-2",
        "radius-md",
        "font-size-base",
        "bg-surface",
    ]
    assert by_name["color-primary"].value == "#0af"
    assert by_name["color-primary"].source_path == "src/styles/globals.css"
    assert by_name["space-2"].type == "spacing"
    assert by_name["radius-md"].type == "radius"
    assert by_name["font-size-base"].type == "typography"
    assert by_name["bg-surface"].type == "color"
    assert "/* src/styles/globals.css */" in theme_source
    assert "/* src/styles/themes/dark.css */" in theme_source
    assert theme_source.index("globals.css") < theme_source.index("dark.css")


def test_collect_prefers_manifest_sources(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/styles/globals.css": ":root { --ignored: 1px; }\n",
            "theme/base.css": ":root { --brand-main: #123456; --gap-x: 2px; }\n",
            "tokens/extra.json": json.dumps({"brand": {"alt": "#654321"}}),
        }
    )
    manifest = parse_manifest(
        json.dumps(
            {
                "components": {},
                "tokens": {
                    "css": ["theme/base.css"],
                    "json": "tokens/extra.json",
                    "categories": {"radius": "--gap-"},
                },
            }
        )
    )

    tokens, theme_source = TokenCollector(repo_builder.path()).collect(manifest)

    by_name = {token.name: token for token in tokens}
    assert set(by_name) == {"brand-main", "gap-x", "brand-alt"}
    assert by_name["gap-x"].type == "radius"
    assert by_name["brand-alt"].source_path == "tokens/extra.json"
    assert "--ignored" not in theme_source


def test_collect_skips_invalid_json_files(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"tokens.json": "{ broken", "design-tokens.json": '{"radius": {"sm": "2px"}}'})

    tokens, theme_source = TokenCollector(repo_builder.path()).collect()

    assert [(token.name, token.type) for token in tokens] == [("radius-sm", "radius")]
    assert theme_source == ""


def test_collect_uses_configured_files(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"custom.css": ":root { --color-ink: black; --z-top: 10; }\n"})
    config = TokenConfig(theme_files=["custom.css"], json_files=[])

    tokens, _ = TokenCollector(repo_builder.path(), config).collect()

    assert [token.name for token in tokens] == ["color-ink"]
