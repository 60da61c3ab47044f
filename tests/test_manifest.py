"""Tests for manifest parsing and manifest precedence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from uiforge.manifest import ManifestError, ManifestResolver, load_manifest, parse_manifest
from uiforge.models import Component, PropDef, Variant

MANIFEST = {
    "name": "acme-ui",
    "version": 3,
    "components": {
        "Button": {
            "entry": "src/Button.tsx",
            "styles": "src/Button.module.css",
            "propDefs": [
                {"name": "variant", "type": "select", "options": ["primary", "ghost"]},
                {"name": "icon", "type": "ReactElement"},
                {"name": "label", "kind": "string", "default": "Go"},
            ],
            "variants": [{"prop": "variant", "values": ["primary", "ghost"], "default": "primary"}],
            "defaultProps": {"variant": "primary", "disabled": False},
        },
        "Card": {
            "entry": "src/Card.tsx",
            "styles": ["src/Card.module.css", "src/card-extra.css"],
            "variants": [{"name": "Elevated", "type": "state", "cssClass": "elevated", "isDefault": True}],
        },
        "Broken": {"styles": "src/Broken.css"},
    },
    "tokens": {"css": "src/theme.css", "json": ["tokens.json"], "categories": {"color": "--color-"}},
}


def test_parse_manifest_reads_components_and_tokens() -> None:
    manifest = parse_manifest(json.dumps(MANIFEST), path="forgecore.json")

    assert manifest.name == "acme-ui"
    assert manifest.version == "3"
    assert manifest.path == "forgecore.json"
    assert list(manifest.components) == ["Button", "Card"]
    assert manifest.tokens.css == ("src/theme.css",)
    assert manifest.tokens.json == ("tokens.json",)
    assert manifest.tokens.categories == {"color": "--color-"}

    button = manifest.components["Button"]
    assert button.styles == ("src/Button.module.css",)
    assert [prop.kind for prop in button.prop_defs] == ["enum", "reactnode", "string"]
    assert button.prop_defs[0].options == ("primary", "ghost")
    assert button.prop_defs[2].default_value == "Go"
    assert button.variants == (
        Variant(name="Primary", type="variant", css_class="primary", is_default=True),
        Variant(name="Ghost", type="variant", css_class="ghost", is_default=False),
    )
    assert button.default_props == {"variant": "primary", "disabled": False}


def test_parse_manifest_accepts_explicit_variant_entries() -> None:
    card = parse_manifest(json.dumps(MANIFEST)).components["Card"]

    assert card.styles == ("src/Card.module.css", "src/card-extra.css")
    assert card.prop_defs is None
    assert card.variants == (Variant(name="Elevated", type="state", css_class="elevated", is_default=True),)


def test_parse_manifest_uses_runtime_global_css() -> None:
    manifest = parse_manifest(json.dumps({"components": {}, "runtime": {"globalCss": ["a.css", "b.css"]}}))

    assert manifest.tokens.css == ("a.css", "b.css")


@pytest.mark.parametrize(
    "text, message",
    [
        ("{not json", "invalid JSON"),
        ("[1, 2]", "JSON object"),
        ('{"name": "x"}', "components"),
    ],
)
def test_parse_manifest_rejects_unusable_documents(text: str, message: str) -> None:
    with pytest.raises(ManifestError, match=message):
        parse_manifest(text)


def test_load_manifest_missing_file_is_silent(tmp_path: Path) -> None:
    assert load_manifest(tmp_path, "forgecore.json") == (None, [])


def test_load_manifest_reports_invalid_file(tmp_path: Path) -> None:
    (tmp_path / "forgecore.json").write_text("{", encoding="utf-8")

    manifest, warnings = load_manifest(tmp_path, "forgecore.json")

    assert manifest is None
    assert len(warnings) == 1
    assert "forgecore.json" in warnings[0]


def _component(**overrides) -> Component:
    fields = dict(
        id="src/Button",
        name="Button",
        source_file_path="src/Button.tsx",
        source_code="",
        prop_defs=(PropDef(name="size", kind="number", default_value=2),),
        variants=(Variant(name="primary", type="variant", css_class="primary"),),
        default_props={"size": 2},
    )
    fields.update(overrides)
    return Component(**fields)


def test_resolver_replaces_extracted_fields_wholesale() -> None:
    manifest = parse_manifest(json.dumps(MANIFEST))
    resolved = ManifestResolver(manifest).resolve(_component())

    assert [prop.name for prop in resolved.prop_defs] == ["variant", "icon", "label"]
    assert [variant.name for variant in resolved.variants] == ["Primary", "Ghost"]
    assert resolved.default_props == {"variant": "primary", "disabled": False}


def test_resolver_keeps_extracted_fields_the_manifest_omits() -> None:
    manifest = parse_manifest(json.dumps(MANIFEST))
    component = _component(name="Card")

    resolved = ManifestResolver(manifest).resolve(component)

    assert resolved.prop_defs == component.prop_defs
    assert resolved.default_props == {"size": 2}
    assert resolved.variants[0].css_class == "elevated"


def test_resolver_without_manifest_is_identity() -> None:
    component = _component()

    assert ManifestResolver(None).resolve(component) is component
    assert ManifestResolver(None).entry_for("Button") is None
