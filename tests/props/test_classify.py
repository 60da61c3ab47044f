from __future__ import annotations

from typing import Optional

import pytest

from uiforge.props.base import TypeShape
from uiforge.props.classify import classify_shape
from uiforge.props.typetext import parse_type_text


@pytest.mark.parametrize(
    "type_text, expected",
    [
        ("string", ("string", None)),
        ("number", ("number", None)),
        ("boolean", ("boolean", None)),
        ("true | false", ("boolean", None)),
        ("boolean | undefined", ("boolean", None)),
        ("'a' | 'b' | 'a'", ("enum", ("a", "b"))),
        ("'solo'", ("string", None)),
        ("1 | 2 | number", ("number", None)),
        ("'a' | number", ("string", None)),
        ("string[]", ("array", None)),
        ("Array<string>", ("array", None)),
        ("() => void", ("function", None)),
        ("MouseEventHandler<HTMLButtonElement>", ("function", None)),
        ("React.ReactNode", ("reactnode", None)),
        ("JSX.Element", ("reactnode", None)),
        ("{ a: string }", ("object", None)),
        ("CSSProperties", ("object", None)),
        ("object", ("object", None)),
        ("null", ("string", None)),
        ("any", ("string", None)),
    ],
)
def test_classify_shape(type_text: str, expected) -> None:
    assert classify_shape(parse_type_text(type_text)) == expected


def test_classify_shape_resolves_aliases_through_lookup() -> None:
    aliases = {
        "Size": parse_type_text("'sm' | 'md' | 'lg'"),
        "Tone": parse_type_text("Size | 'xl'"),
    }

    def lookup(name: str) -> Optional[TypeShape]:
        return aliases.get(name)

    assert classify_shape(parse_type_text("Size"), lookup) == ("enum", ("sm", "md", "lg"))
    assert classify_shape(parse_type_text("Tone | undefined"), lookup) == (
        "enum",
        ("sm", "md", "lg", "xl"),
    )
    assert classify_shape(parse_type_text("Required<Size>"), lookup) == ("enum", ("sm", "md", "lg"))
    assert classify_shape(parse_type_text("Unknown"), lookup) == ("object", None)


def test_classify_shape_survives_self_referencing_alias() -> None:
    aliases = {"Loop": parse_type_text("Loop | 'a'")}

    kind, _ = classify_shape(parse_type_text("Loop"), aliases.get)

    assert kind == "string"
