from __future__ import annotations

import pytest

from uiforge.props.extractor import PropSchemaExtractor
from uiforge.props.heuristic import HeuristicResolver
from uiforge.props.tree_sitter import TREE_SITTER_AVAILABLE, TreeSitterResolver
from uiforge.stores.type_cache import TypeResolutionCache
from tests._fixtures.repo_builder import RepoBuilder

RESOLVERS = [HeuristicResolver]
if TREE_SITTER_AVAILABLE:
    RESOLVERS.append(TreeSitterResolver)


@pytest.fixture(params=RESOLVERS, ids=lambda cls: cls.name)
def extractor(request) -> PropSchemaExtractor:
    return PropSchemaExtractor(request.param(), TypeResolutionCache())


def _extract(extractor: PropSchemaExtractor, builder: RepoBuilder, rel_path: str, name: str):
    return extractor.extract(builder.path() / rel_path, name, builder.path())


def test_extracts_button_props(extractor, component_library: RepoBuilder) -> None:
    props = _extract(extractor, component_library, "src/components/Button/Button.tsx", "Button")

    summary = [(prop.name, prop.kind, prop.options, prop.default_value) for prop in props]
    assert summary == [
        ("variant", "enum", ("primary", "secondary", "ghost"), "primary"),
        ("size", "enum", ("sm", "md", "lg"), "md"),
        ("loading", "boolean", None, False),
        ("count", "number", None, 3),
        ("label", "string", None, None),
        ("icon", "reactnode", None, None),
        ("items", "array", None, None),
        ("onPress", "function", None, None),
        ("testLabel", "string", None, None),
        ("tone", "enum", ("light", "dark"), None),
    ]
    assert [prop.control for prop in props[:4]] == ["select", "select", "boolean", "number"]


def test_extracts_alias_props_of_function_component(extractor, component_library: RepoBuilder) -> None:
    props = _extract(extractor, component_library, "src/components/Spinner/Spinner.tsx", "Spinner")

    assert [(prop.name, prop.kind, prop.default_value) for prop in props] == [
        ("size", "number", 16),
        ("color", "string", None),
    ]


def test_follows_annotations_and_utility_types(extractor, repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/base.ts": """
            export type Density = 'compact' | 'cozy';
            export interface Shared {
              density?: Density;
              hidden?: boolean;
              onFocusLost?: () => void;
            }
            """,
            "src/Menu.tsx": """
            import { Shared as SharedProps } from './base';

            type MenuOptions = Omit<SharedProps, 'hidden'> & {
              items: string[];
              onSelect?: (value: string) => void;
            };

            export const Menu: React.FC<Readonly<MenuOptions>> = ({ items }) => null;
            """,
        }
    )

    props = _extract(extractor, repo_builder, "src/Menu.tsx", "Menu")

    assert [(prop.name, prop.kind) for prop in props] == [
        ("density", "enum"),
        ("items", "array"),
        ("onSelect", "function"),
    ]
    assert props[0].options == ("compact", "cozy")


def test_own_declarations_win_over_inherited(extractor, repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/Field.tsx": """
            interface Base {
              value?: string;
              style?: object;
            }
            export interface FieldProps extends Base {
              value?: number;
            }
            export function Field({ value = 2 }: FieldProps) { return null; }
            """,
        }
    )

    props = _extract(extractor, repo_builder, "src/Field.tsx", "Field")

    assert [(prop.name, prop.kind, prop.default_value) for prop in props] == [("value", "number", 2)]


def test_unknown_component_yields_no_props(extractor, repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/Empty.tsx": "export const Empty = () => null;\n"})

    assert _extract(extractor, repo_builder, "src/Empty.tsx", "Empty") == []


def test_missing_file_is_not_an_error(extractor, repo_builder: RepoBuilder) -> None:
    assert _extract(extractor, repo_builder, "src/Missing.tsx", "Missing") == []


def test_reuses_cached_modules(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/types.ts": "export interface Shared { tone?: 'a' | 'b'; }\n",
            "src/One.tsx": "import { Shared } from './types';\nexport const One = (props: Shared) => null;\n",
            "src/Two.tsx": "import { Shared } from './types';\nexport const Two = (props: Shared) => null;\n",
        }
    )
    cache = TypeResolutionCache()
    extractor = PropSchemaExtractor(HeuristicResolver(), cache)

    first = _extract(extractor, repo_builder, "src/One.tsx", "One")
    second = _extract(extractor, repo_builder, "src/Two.tsx", "Two")

    assert [prop.name for prop in first] == [prop.name for prop in second] == ["tone"]
    assert len(cache.context_for(repo_builder.path(), extractor.resolver)) == 3
