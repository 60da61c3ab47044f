"""Brace-matching text resolver for component type declarations."""

from __future__ import annotations

import re
from typing import Optional

from .base import (
    REFERENCE,
    ImportBinding,
    ModuleShapes,
    OBJECT,
    TypeDeclaration,
    TypeShape,
    TypeShapeResolver,
)
from .typetext import (
    find_top_level,
    matching_close,
    parse_members,
    parse_type_text,
    read_type_expression,
    split_top_level,
    strip_comments,
)

# Component annotations whose first type argument is the props type.
COMPONENT_TYPE_NAMES = {"FC", "FunctionComponent", "VFC", "VoidFunctionComponent"}

_INTERFACE_RE = re.compile(r"\binterface\s+([A-Za-z_$][\w$]*)")
_TYPE_ALIAS_RE = re.compile(r"(?<![\w$.])type\s+([A-Za-z_$][\w$]*)\s*")
_IMPORT_RE = re.compile(
    r"\bimport\s+(?:type\s+)?(?:[\w$]+\s*,\s*)?\{([^}]*)\}\s*from\s*['\"]([^'\"]+)['\"]"
)
_CONST_COMPONENT_RE = re.compile(r"\b(?:const|let|var)\s+([A-Z][\w$]*)\s*")
_FUNCTION_COMPONENT_RE = re.compile(r"\bfunction\s+([A-Z][\w$]*)\s*")
_WRAPPER_RE = re.compile(r"(?:React\s*\.\s*)?(forwardRef|memo)\s*")
_FUNCTION_EXPRESSION_RE = re.compile(r"(?:async\s+)?(?:function\s*[\w$]*\s*)?")


class HeuristicResolver(TypeShapeResolver):
    """Reads declarations with bracket-aware text scanning; always available."""

    name = "heuristic"

    @property
    def available(self) -> bool:
        return True

    def parse_module(self, path: str, source: str) -> ModuleShapes:
        text = strip_comments(source)
        module = ModuleShapes(path=path)
        self._collect_interfaces(text, module)
        self._collect_aliases(text, module)
        self._collect_imports(text, module)
        self._collect_components(text, module)
        return module

    @staticmethod
    def _collect_interfaces(text: str, module: ModuleShapes) -> None:
        for match in _INTERFACE_RE.finditer(text):
            position = match.end()
            while position < len(text) and text[position].isspace():
                position += 1
            if text.startswith("<", position):
                position = matching_close(text, position) + 1
            brace = find_top_level(text, position, "{")
            if brace == -1:
                continue
            header = text[position:brace].strip()
            bases = ()
            if header.startswith("extends"):
                bases = tuple(
                    parse_type_text(base) for base in split_top_level(header[len("extends") :], ",")
                )
            close = matching_close(text, brace)
            module.declarations.setdefault(
                match.group(1),
                TypeDeclaration(
                    name=match.group(1),
                    kind="interface",
                    properties=parse_members(text[brace + 1 : close]),
                    bases=bases,
                ),
            )

    @staticmethod
    def _collect_aliases(text: str, module: ModuleShapes) -> None:
        for match in _TYPE_ALIAS_RE.finditer(text):
            position = match.end()
            if text.startswith("<", position):
                position = matching_close(text, position) + 1
                while position < len(text) and text[position].isspace():
                    position += 1
            if not text.startswith("=", position) or text.startswith("==", position):
                continue
            shape = parse_type_text(read_type_expression(text, position + 1))
            module.declarations.setdefault(
                match.group(1),
                TypeDeclaration(
                    name=match.group(1),
                    kind="alias",
                    properties=shape.properties if shape.kind == OBJECT else (),
                    value=shape,
                ),
            )

    @staticmethod
    def _collect_imports(text: str, module: ModuleShapes) -> None:
        for match in _IMPORT_RE.finditer(text):
            source = match.group(2)
            for specifier in match.group(1).split(","):
                specifier = re.sub(r"^\s*type\s+", "", specifier).strip()
                if not specifier:
                    continue
                imported, _, local = specifier.partition(" as ")
                local = (local or imported).strip()
                module.imports[local] = ImportBinding(source=source, imported=imported.strip())

    def _collect_components(self, text: str, module: ModuleShapes) -> None:
        for match in _CONST_COMPONENT_RE.finditer(text):
            position = match.end()
            annotation: Optional[TypeShape] = None
            if text.startswith(":", position):
                equals = find_top_level(text, position + 1, "=")
                if equals == -1:
                    continue
                annotation = parse_type_text(text[position + 1 : equals])
                position = equals
            if not text.startswith("=", position):
                continue
            shape = _props_from_annotation(annotation)
            if shape is None:
                shape = self._props_from_initializer(text, position + 1)
            if shape is not None:
                module.component_props.setdefault(match.group(1), shape)

        for match in _FUNCTION_COMPONENT_RE.finditer(text):
            position = match.end()
            if text.startswith("<", position):
                position = matching_close(text, position) + 1
                while position < len(text) and text[position].isspace():
                    position += 1
            if not text.startswith("(", position):
                continue
            shape = _first_parameter_type(text, position)
            if shape is not None:
                module.component_props.setdefault(match.group(1), shape)

    def _props_from_initializer(self, text: str, position: int) -> Optional[TypeShape]:
        while True:
            while position < len(text) and text[position].isspace():
                position += 1
            wrapper = _WRAPPER_RE.match(text, position)
            if not wrapper:
                break
            position = wrapper.end()
            if text.startswith("<", position):
                close = matching_close(text, position)
                arguments = split_top_level(text[position + 1 : close], ",")
                if wrapper.group(1) == "forwardRef" and len(arguments) >= 2:
                    return parse_type_text(arguments[1])
                if wrapper.group(1) == "memo" and arguments:
                    return parse_type_text(arguments[0])
                position = close + 1
            while position < len(text) and text[position].isspace():
                position += 1
            if not text.startswith("(", position):
                return None
            position += 1

        expression = _FUNCTION_EXPRESSION_RE.match(text, position)
        position = expression.end() if expression else position
        if text.startswith("<", position):
            position = matching_close(text, position) + 1
        while position < len(text) and text[position].isspace():
            position += 1
        if not text.startswith("(", position):
            return None
        return _first_parameter_type(text, position)


def _props_from_annotation(annotation: Optional[TypeShape]) -> Optional[TypeShape]:
    if annotation is None or annotation.kind != REFERENCE:
        return None
    if annotation.reference_name in COMPONENT_TYPE_NAMES and annotation.arguments:
        return annotation.arguments[0]
    return None


def _first_parameter_type(text: str, open_paren: int) -> Optional[TypeShape]:
    close = matching_close(text, open_paren)
    parameters = split_top_level(text[open_paren + 1 : close], ",")
    if not parameters:
        return None
    first = parameters[0]
    colon = find_top_level(first, 0, ":")
    if colon == -1:
        return None
    annotation = first[colon + 1 :]
    default = find_top_level(annotation, 0, "=")
    if default != -1:
        annotation = annotation[:default]
    return parse_type_text(annotation)


__all__ = ["COMPONENT_TYPE_NAMES", "HeuristicResolver"]
