"""Tree-sitter powered resolver for component type declarations."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .base import (
    ARRAY,
    BOOLEAN_LITERAL,
    FUNCTION,
    INTERSECTION,
    KEYWORD,
    NULLISH,
    NUMBER_LITERAL,
    OBJECT,
    REFERENCE,
    STRING_LITERAL,
    UNION,
    ImportBinding,
    ModuleShapes,
    PropertySignature,
    TypeDeclaration,
    TypeShape,
    TypeShapeResolver,
)
from .heuristic import COMPONENT_TYPE_NAMES
from .typetext import parse_type_text

try:  # pragma: no cover - optional dependency
    import tree_sitter_typescript
    from tree_sitter import Language, Parser

    TREE_SITTER_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    tree_sitter_typescript = None  # type: ignore[assignment]
    Language = None  # type: ignore[assignment]
    Parser = None  # type: ignore[assignment]
    TREE_SITTER_AVAILABLE = False


_WRAPPERS = {"forwardRef", "memo"}


class TreeSitterResolver(TypeShapeResolver):
    """Extracts type declarations from the TypeScript/TSX syntax tree."""

    name = "tree_sitter"

    def __init__(self, enabled: Optional[bool] = None) -> None:
        self._enabled = TREE_SITTER_AVAILABLE if enabled is None else enabled
        self._parsers: Dict[str, Parser] = {}

    @property
    def available(self) -> bool:
        return self._enabled and TREE_SITTER_AVAILABLE

    def parse_module(self, path: str, source: str) -> ModuleShapes:
        module = ModuleShapes(path=path)
        parser = self._get_parser(_dialect_for(path))
        if parser is None:
            return module
        source_bytes = source.encode("utf-8")
        tree = parser.parse(source_bytes)
        _ModuleWalker(source_bytes, module).visit(tree.root_node)
        return module

    def _get_parser(self, dialect: str) -> Optional[Parser]:
        parser = self._parsers.get(dialect)
        if parser is not None:
            return parser
        if not self.available:
            return None
        if dialect == "tsx":
            language = Language(tree_sitter_typescript.language_tsx())
        else:
            language = Language(tree_sitter_typescript.language_typescript())
        parser = Parser(language)
        self._parsers[dialect] = parser
        return parser


def _dialect_for(path: str) -> str:
    return "typescript" if path.lower().endswith((".ts", ".mts", ".cts")) else "tsx"


class _ModuleWalker:
    def __init__(self, source_bytes: bytes, module: ModuleShapes) -> None:
        self._source = source_bytes
        self._module = module

    def _text(self, node) -> str:  # type: ignore[no-untyped-def]
        return self._source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")

    def visit(self, node) -> None:  # type: ignore[no-untyped-def]
        for child in node.named_children:
            kind = child.type
            if kind == "export_statement":
                self.visit(child)
            elif kind == "interface_declaration":
                self._interface(child)
            elif kind == "type_alias_declaration":
                self._alias(child)
            elif kind == "import_statement":
                self._import(child)
            elif kind in ("lexical_declaration", "variable_declaration"):
                for declarator in child.named_children:
                    if declarator.type == "variable_declarator":
                        self._declarator(declarator)
            elif kind == "function_declaration":
                self._function(child)

    # Declarations -----------------------------------------------------

    def _interface(self, node) -> None:  # type: ignore[no-untyped-def]
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        bases: List[TypeShape] = []
        for child in node.named_children:
            if child.type == "extends_type_clause":
                bases.extend(self.shape(base) for base in child.named_children)
        body = node.child_by_field_name("body")
        self._module.declarations.setdefault(
            self._text(name_node),
            TypeDeclaration(
                name=self._text(name_node),
                kind="interface",
                properties=self.members(body.named_children) if body is not None else (),
                bases=tuple(bases),
            ),
        )

    def _alias(self, node) -> None:  # type: ignore[no-untyped-def]
        name_node = node.child_by_field_name("name")
        value_node = node.child_by_field_name("value")
        if name_node is None or value_node is None:
            return
        shape = self.shape(value_node)
        self._module.declarations.setdefault(
            self._text(name_node),
            TypeDeclaration(
                name=self._text(name_node),
                kind="alias",
                properties=shape.properties if shape.kind == OBJECT else (),
                value=shape,
            ),
        )

    def _import(self, node) -> None:  # type: ignore[no-untyped-def]
        source_node = node.child_by_field_name("source")
        if source_node is None:
            return
        source = self._text(source_node).strip("'\"")
        for clause in node.named_children:
            if clause.type != "import_clause":
                continue
            for group in clause.named_children:
                if group.type != "named_imports":
                    continue
                for specifier in group.named_children:
                    if specifier.type != "import_specifier":
                        continue
                    name_node = specifier.child_by_field_name("name")
                    alias_node = specifier.child_by_field_name("alias")
                    if name_node is None:
                        continue
                    imported = self._text(name_node)
                    local = self._text(alias_node) if alias_node is not None else imported
                    self._module.imports[local] = ImportBinding(source=source, imported=imported)

    # Components -------------------------------------------------------

    def _declarator(self, node) -> None:  # type: ignore[no-untyped-def]
        name_node = node.child_by_field_name("name")
        if name_node is None or name_node.type != "identifier":
            return
        name = self._text(name_node)
        if not name[:1].isupper():
            return
        shape: Optional[TypeShape] = None
        type_node = node.child_by_field_name("type")
        if type_node is not None:
            annotation = self.shape(type_node)
            if (
                annotation.kind == REFERENCE
                and annotation.reference_name in COMPONENT_TYPE_NAMES
                and annotation.arguments
            ):
                shape = annotation.arguments[0]
        value_node = node.child_by_field_name("value")
        if shape is None and value_node is not None:
            shape = self._props_from_expression(value_node)
        if shape is not None:
            self._module.component_props.setdefault(name, shape)

    def _function(self, node) -> None:  # type: ignore[no-untyped-def]
        name_node = node.child_by_field_name("name")
        parameters = node.child_by_field_name("parameters")
        if name_node is None or parameters is None:
            return
        name = self._text(name_node)
        if not name[:1].isupper():
            return
        shape = self._first_parameter(parameters)
        if shape is not None:
            self._module.component_props.setdefault(name, shape)

    def _props_from_expression(self, node) -> Optional[TypeShape]:  # type: ignore[no-untyped-def]
        kind = node.type
        if kind == "call_expression":
            function = node.child_by_field_name("function")
            if function is None:
                return None
            wrapper = self._text(function).replace(" ", "").rsplit(".", 1)[-1]
            if wrapper not in _WRAPPERS:
                return None
            type_arguments = node.child_by_field_name("type_arguments")
            if type_arguments is not None:
                arguments = [self.shape(child) for child in type_arguments.named_children]
                if wrapper == "forwardRef" and len(arguments) >= 2:
                    return arguments[1]
                if wrapper == "memo" and arguments:
                    return arguments[0]
            call_arguments = node.child_by_field_name("arguments")
            if call_arguments is not None and call_arguments.named_children:
                return self._props_from_expression(call_arguments.named_children[0])
            return None
        if kind in ("arrow_function", "function_expression", "function"):
            parameters = node.child_by_field_name("parameters")
            return self._first_parameter(parameters) if parameters is not None else None
        if kind in ("parenthesized_expression", "as_expression", "satisfies_expression"):
            if node.named_children:
                return self._props_from_expression(node.named_children[0])
        return None

    def _first_parameter(self, parameters) -> Optional[TypeShape]:  # type: ignore[no-untyped-def]
        for child in parameters.named_children:
            if child.type in ("required_parameter", "optional_parameter"):
                type_node = child.child_by_field_name("type")
                return self.shape(type_node) if type_node is not None else None
        return None

    # Types ------------------------------------------------------------

    def members(self, nodes: Iterable) -> tuple:  # type: ignore[type-arg]
        properties: List[PropertySignature] = []
        for child in nodes:
            if child.type not in ("property_signature", "method_signature"):
                continue
            name_node = child.child_by_field_name("name")
            if name_node is None:
                continue
            name = self._text(name_node).strip("'\"")
            optional = any(token.type == "?" for token in child.children)
            if child.type == "method_signature":
                shape = TypeShape(FUNCTION, self._text(child))
            else:
                type_node = child.child_by_field_name("type")
                if type_node is None:
                    shape = TypeShape(KEYWORD, "any", value="any")
                else:
                    shape = self.shape(type_node)
            properties.append(PropertySignature(name=name, shape=shape, optional=optional))
        return tuple(properties)

    def shape(self, node) -> TypeShape:  # type: ignore[no-untyped-def]
        kind = node.type
        text = self._text(node)
        named = node.named_children
        if kind in ("type_annotation", "parenthesized_type", "readonly_type") and named:
            return self.shape(named[0])
        if kind == "union_type":
            return TypeShape(UNION, text, members=tuple(self.shape(child) for child in named))
        if kind == "intersection_type":
            return TypeShape(INTERSECTION, text, members=tuple(self.shape(child) for child in named))
        if kind == "literal_type":
            return self._literal(named[0] if named else node)
        if kind in ("null", "undefined"):
            return TypeShape(NULLISH, text, value=text)
        if kind == "predefined_type":
            if text in ("null", "undefined"):
                return TypeShape(NULLISH, text, value=text)
            return TypeShape(KEYWORD, text, value=text)
        if kind in ("type_identifier", "nested_type_identifier", "identifier"):
            return TypeShape(REFERENCE, text, value=text)
        if kind == "generic_type":
            name_node = node.child_by_field_name("name")
            arguments_node = node.child_by_field_name("type_arguments")
            if arguments_node is None:
                arguments_node = next((c for c in named if c.type == "type_arguments"), None)
            arguments = ()
            if arguments_node is not None:
                arguments = tuple(self.shape(child) for child in arguments_node.named_children)
            name = self._text(name_node) if name_node is not None else text.split("<", 1)[0]
            return TypeShape(REFERENCE, text, value=name.strip(), arguments=arguments)
        if kind == "array_type":
            return TypeShape(ARRAY, text, members=tuple(self.shape(child) for child in named[:1]))
        if kind == "tuple_type":
            return TypeShape(ARRAY, text)
        if kind in ("function_type", "constructor_type"):
            return TypeShape(FUNCTION, text)
        if kind == "object_type":
            return TypeShape(OBJECT, text, properties=self.members(named))
        if kind == "template_literal_type":
            return TypeShape(KEYWORD, text, value="string")
        return parse_type_text(text)

    def _literal(self, node) -> TypeShape:  # type: ignore[no-untyped-def]
        kind = node.type
        text = self._text(node)
        if kind == "string":
            return TypeShape(STRING_LITERAL, text, value=text[1:-1])
        if kind in ("number", "unary_expression"):
            return TypeShape(NUMBER_LITERAL, text, value=text)
        if kind in ("true", "false"):
            return TypeShape(BOOLEAN_LITERAL, text, value=text)
        if kind in ("null", "undefined"):
            return TypeShape(NULLISH, text, value=text)
        return parse_type_text(text)


__all__ = ["TREE_SITTER_AVAILABLE", "TreeSitterResolver"]
