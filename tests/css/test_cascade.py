from __future__ import annotations

import pytest

from uiforge.css.cascade import (
    active_rules,
    categorize_rules,
    find_writeback_selector,
    merge_rules,
    merged_view,
)
from uiforge.css.parser import parse_css_module
from uiforge.css.values import parse_value
from uiforge.models import ParsedCSSRule, Variant

BUTTON_CSS = """
.button { padding: 8px; color: black; }
.button:hover { color: gray; }
.primary { color: white; background: blue; }
.primary:hover { background: navy; }
.sm { padding: 4px; }
.sm .icon { width: 12px; }
.icon { width: 16px; }
.fullWidth { width: 100%; }
@media (max-width: 600px) { .button { padding: 2px; } }
"""

VARIANTS = (
    Variant(name="primary", type="variant", css_class="primary"),
    Variant(name="size-sm", type="size", css_class="sm"),
)


def _rule(selector: str, **properties: str) -> ParsedCSSRule:
    return ParsedCSSRule(
        selector=selector,
        properties={name: parse_value(value) for name, value in properties.items()},
    )


@pytest.fixture
def view():
    return categorize_rules(parse_css_module(BUTTON_CSS), "Button", VARIANTS)


def _values(merged) -> dict[str, tuple[str, str]]:
    return {item.property: (item.value.raw, item.selector) for item in merged}


def test_merge_keeps_first_position_and_last_value() -> None:
    merged = merge_rules(
        [
            _rule(".a", color="red", margin="0"),
            _rule(".b", margin="4px", color="blue", padding="1px"),
        ]
    )

    assert [item.property for item in merged] == ["color", "margin", "padding"]
    assert _values(merged) == {
        "color": ("blue", ".b"),
        "margin": ("4px", ".b"),
        "padding": ("1px", ".b"),
    }
    assert not any(item.computed_only for item in merged)


def test_merge_appends_non_trivial_computed_styles() -> None:
    merged = merge_rules(
        [_rule(".button", color="red")],
        computed_styles={"color": "rgb(1, 2, 3)", "font-size": "14px", "margin": "0", "display": "block"},
    )

    assert [(item.property, item.computed_only) for item in merged] == [
        ("color", False),
        ("fontSize", True),
        ("display", True),
    ]
    assert merged[1].selector == ".button"
    assert merged[1].value.category == "length"


def test_merge_of_nothing_is_empty() -> None:
    assert merge_rules([]) == []


def test_categorize_groups_rules(view) -> None:
    categories = {item.selector: item.category for item in view.rules if item.rule.media_query is None}

    assert categories == {
        ".button": "base",
        ".button:hover": "state",
        ".primary": "variant",
        ".primary:hover": "variant",
        ".sm": "size",
        ".sm .icon": "sub-element",
        ".icon": "sub-element",
        ".fullWidth": "modifier",
    }
    assert [item.selector for item in view.base] == [".button", ".button:hover", ".button"]
    assert [item.selector for item in view.sub_elements["icon"]] == [".sm .icon", ".icon"]
    assert [item.selector for item in view.variants["primary"]] == [".primary", ".primary:hover"]
    assert view.variants["primary"][1].pseudo_states == ("hover",)


def test_categorize_understands_namespaced_classes() -> None:
    rules = [_rule(".Button_button"), _rule(".Button_primary:focus-visible")]

    view = categorize_rules(rules, "Button", VARIANTS)

    assert [(item.category, item.variant_name) for item in view.rules] == [
        ("base", None),
        ("variant", "primary"),
    ]
    assert view.rules[1].pseudo_states == ("focus-visible",)


def test_active_rules_orders_base_variant_size(view) -> None:
    rules = active_rules(view, variant="primary", size="sm")

    assert [rule.selector for rule in rules] == [".button", ".primary", ".sm"]
    assert _values(merge_rules(rules)) == {
        "padding": ("4px", ".sm"),
        "color": ("white", ".primary"),
        "background": ("blue", ".primary"),
    }


def test_active_rules_appends_state_overrides(view) -> None:
    rules = active_rules(view, variant="primary", state="hover")

    assert [rule.selector for rule in rules] == [".button", ".primary", ".button:hover", ".primary:hover"]
    assert active_rules(view, state="default") == active_rules(view)


def test_media_rules_apply_only_when_selected(view) -> None:
    plain = _values(merged_view(view))
    responsive = _values(merged_view(view, media="@media (max-width:600px)"))

    assert plain["padding"] == ("8px", ".button")
    assert responsive["padding"] == ("2px", ".button")


def test_merged_view_reports_computed_only_against_base_selector(view) -> None:
    merged = merged_view(view, variant="primary", computed_styles={"border-radius": "4px"})

    assert merged[-1].property == "borderRadius"
    assert merged[-1].computed_only is True
    assert merged[-1].selector == ".button"


@pytest.mark.parametrize(
    "kwargs, expected",
    [
        ({"prop": "background", "variant": "primary"}, ".primary"),
        ({"prop": "padding", "variant": "primary", "size": "sm"}, ".sm"),
        ({"prop": "padding", "variant": "primary"}, ".button"),
        ({"prop": "margin", "variant": "primary"}, ".primary"),
        ({"prop": "margin", "variant": "primary", "state": "hover"}, ".primary:hover"),
        ({"prop": "font-size"}, ".button"),
        ({"prop": "width", "sub_element": "icon"}, ".icon"),
    ],
)
def test_find_writeback_selector(view, kwargs, expected) -> None:
    assert find_writeback_selector(view, **kwargs) == expected
