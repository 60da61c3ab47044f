from __future__ import annotations

import pytest

from uiforge.css.values import classify_value, parse_value, split_selector_list, to_camel_case


def test_parse_value_whole_variable_reference() -> None:
    value = parse_value("  var(--color-primary) ")

    assert value.raw == "var(--color-primary)"
    assert value.is_variable is True
    assert value.variable_name == "--color-primary"
    assert value.category == "variable"
    assert value.references == ("--color-primary",)


def test_parse_value_variable_with_fallback() -> None:
    value = parse_value("var(--surface, #fff)")

    assert value.is_variable is True
    assert value.variable_name == "--surface"


def test_parse_value_embedded_references_are_not_variables() -> None:
    value = parse_value("1px solid var(--border-color)")

    assert value.is_variable is False
    assert value.variable_name is None
    assert value.category == "other"
    assert value.references == ("--border-color",)

    computed = parse_value("calc(var(--space-2) * 2)")
    assert computed.is_variable is False
    assert computed.references == ("--space-2",)


@pytest.mark.parametrize(
    "raw, category",
    [
        ("#fff", "color"),
        ("#00aaff80", "color"),
        ("rgba(0, 0, 0, .5)", "color"),
        ("Blue", "color"),
        ("transparent", "color"),
        ("16px", "length"),
        ("1.5rem", "length"),
        ("50%", "length"),
        ("0", "length"),
        ("1.5", "number"),
        ("bold", "keyword"),
        ("1px solid red", "other"),
    ],
)
def test_classify_value(raw: str, category: str) -> None:
    assert classify_value(raw) == category


@pytest.mark.parametrize(
    "name, expected",
    [
        ("background-color", "backgroundColor"),
        ("COLOR", "color"),
        ("-webkit-transition", "WebkitTransition"),
        ("-ms-flex", "msFlex"),
        ("--brand-main", "--brand-main"),
    ],
)
def test_to_camel_case(name: str, expected: str) -> None:
    assert to_camel_case(name) == expected


def test_split_selector_list_respects_nesting_and_quotes() -> None:
    selector = ".a, .b:not(.c, .d), [data-x='1,2'],"

    assert split_selector_list(selector) == (".a", ".b:not(.c, .d)", "[data-x='1,2']")
