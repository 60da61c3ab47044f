from __future__ import annotations

from uiforge.css.parser import namespace_css_module, parse_css_module

MODULE_CSS = (
    ".button {\n"
    "  color: red;\n"
    "  --local: 1px;\n"
    "  background-color: var(--color-primary);\n"
    "}\n"
    "\n"
    ".a, .b:hover {\n"
    "  margin: 0;\n"
    "}\n"
    "\n"
    "@media (max-width: 600px) {\n"
    "  .button {\n"
    "    padding: 4px;\n"
    "  }\n"
    "}\n"
)


def test_parse_css_module_records_rules_in_order() -> None:
    rules = parse_css_module(MODULE_CSS)

    assert [(rule.selector, rule.media_query) for rule in rules] == [
        (".button", None),
        (".a", None),
        (".b:hover", None),
        (".button", "(max-width: 600px)"),
    ]


def test_parse_css_module_properties_and_lines() -> None:
    button, first, second, responsive = parse_css_module(MODULE_CSS)

    assert list(button.properties) == ["color", "backgroundColor"]
    assert button.properties["backgroundColor"].is_variable is True
    assert button.properties["backgroundColor"].variable_name == "--color-primary"
    assert (button.start_line, button.end_line) == (1, 5)
    assert first.properties == second.properties
    assert (first.start_line, first.end_line) == (7, 9)
    assert responsive.properties["padding"].raw == "4px"
    assert (responsive.start_line, responsive.end_line) == (12, 14)


def test_parse_css_module_keeps_first_slot_and_last_value() -> None:
    (rule,) = parse_css_module(".x { color: red; margin: 0; color: blue; }")

    assert list(rule.properties) == ["color", "margin"]
    assert rule.properties["color"].raw == "blue"


def test_parse_css_module_tolerates_malformed_input() -> None:
    rules = parse_css_module(".ok { color: red; }\n.broken { color: blue;\n")

    assert [rule.selector for rule in rules] == [".ok", ".broken"]
    assert rules[1].properties["color"].raw == "blue"


def test_parse_css_module_skips_at_rules_without_style_rules() -> None:
    text = "@import url(base.css);\n@font-face { font-family: X; }\n.a { color: red; }\n"

    assert [rule.selector for rule in parse_css_module(text)] == [".a"]


def test_namespace_css_module_prefixes_class_selectors() -> None:
    text = (
        ".button { color: red; }\n"
        ".button:hover .icon { opacity: .5; background: url(./a.b.png); }\n"
        "@keyframes spin { from { opacity: 0.5; } }\n"
    )

    assert namespace_css_module(text, "Button") == (
        ".Button_button { color: red; }\n"
        ".Button_button:hover .Button_icon { opacity: .5; background: url(./a.b.png); }\n"
        "@keyframes spin { from { opacity: 0.5; } }\n"
    )
