"""Core data models shared across uiforge components."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple

PROP_KINDS = (
    "string",
    "number",
    "boolean",
    "enum",
    "array",
    "object",
    "function",
    "reactnode",
)

CONTROL_BY_KIND = {
    "string": "text",
    "number": "number",
    "boolean": "boolean",
    "enum": "select",
    "array": "json",
    "object": "json",
    "function": "none",
    "reactnode": "slot",
}

VARIANT_TYPES = ("variant", "size", "state")

TOKEN_TYPES = ("color", "spacing", "typography", "radius")


@dataclass(frozen=True)
class PropDef:
    """Editable prop of a component with its editor control."""

    name: str
    kind: str
    options: Optional[Tuple[str, ...]] = None
    default_value: Any = None
    control: str = field(init=False)

    def __post_init__(self) -> None:
        kind = self.kind if self.kind in PROP_KINDS else "string"
        options = tuple(self.options) if self.options else None
        if kind == "enum" and not options:
            kind = "string"
        if kind != "enum":
            options = None
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "options", options)
        object.__setattr__(self, "control", CONTROL_BY_KIND[kind])


@dataclass(frozen=True)
class Variant:
    """Named visual variation tied to a CSS class."""

    name: str
    type: str
    css_class: str
    is_default: Optional[bool] = None


@dataclass(frozen=True)
class StoryVariant:
    """A story exported from a component's stories file."""

    name: str
    args: Dict[str, Any] = field(default_factory=dict)
    has_render: bool = False


@dataclass(frozen=True)
class CSSPropertyValue:
    raw: str
    is_variable: bool = False
    variable_name: Optional[str] = None
    category: str = "other"
    references: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ParsedCSSRule:
    """One selector's declarations, keyed by camelCase property name."""

    selector: str
    properties: Dict[str, CSSPropertyValue] = field(default_factory=dict)
    media_query: Optional[str] = None
    start_line: int = 0
    end_line: int = 0


@dataclass(frozen=True)
class MergedCSSProperty:
    """Effective value of a property after merging, with provenance."""

    property: str
    value: CSSPropertyValue
    selector: str
    computed_only: bool = False


@dataclass(frozen=True)
class Token:
    name: str
    value: str
    type: str
    source_path: Optional[str] = None


@dataclass(frozen=True)
class ManifestTokens:
    css: Tuple[str, ...] = ()
    json: Tuple[str, ...] = ()
    categories: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ManifestComponent:
    """A component entry declared in the repository manifest."""

    name: str
    entry: str
    styles: Tuple[str, ...] = ()
    prop_defs: Optional[Tuple[PropDef, ...]] = None
    variants: Optional[Tuple[Variant, ...]] = None
    default_props: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class Manifest:
    """Parsed repository manifest file."""

    name: str
    components: Dict[str, ManifestComponent]
    version: Optional[str] = None
    tokens: ManifestTokens = field(default_factory=ManifestTokens)
    path: Optional[str] = None


@dataclass(frozen=True)
class Component:
    """A discovered UI component with its editable surface."""

    id: str
    name: str
    source_file_path: str
    source_code: str
    prop_defs: Tuple[PropDef, ...] = ()
    variants: Tuple[Variant, ...] = ()
    css_module_path: Optional[str] = None
    raw_css: Optional[str] = None
    story_variants: Tuple[StoryVariant, ...] = ()
    default_props: Dict[str, Any] = field(default_factory=dict)
    css_rules: Tuple[ParsedCSSRule, ...] = ()
    scoped_css: Optional[str] = None
    dependencies: Tuple[str, ...] = ()
    import_path: str = ""


@dataclass(frozen=True)
class RepositoryModel:
    """Typed result of parsing a component library repository."""

    root: str
    components: Tuple[Component, ...] = ()
    tokens: Tuple[Token, ...] = ()
    theme_source: str = ""
    manifest: Optional[Manifest] = None
    warnings: Tuple[str, ...] = ()

    def component(self, name: str) -> Optional[Component]:
        for component in self.components:
            if component.name == name:
                return component
        return None


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


# Keys below hold user data (prop values, story args, token prefixes) kept as authored.
_VERBATIM_KEYS = {"default_props", "args", "categories"}


def _camelize(value: Any, *, convert_keys: bool = True) -> Any:
    if isinstance(value, dict):
        return {
            (_camel(key) if convert_keys and isinstance(key, str) else key): _camelize(
                item, convert_keys=convert_keys and key not in _VERBATIM_KEYS
            )
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_camelize(item, convert_keys=convert_keys) for item in value]
    return value


def to_payload(model: Any) -> Dict[str, Any]:
    """Serialize a model dataclass into a JSON-ready dict with camelCase keys."""
    data = asdict(model)
    return _camelize(data)
