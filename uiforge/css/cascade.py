"""Cascade merging of parsed CSS rules and rule categorization.

:func:`merge_rules` assumes its input is already ordered by increasing
priority; it does not compute specificity. :func:`active_rules` produces that
ordering for a component (base, then variant, then size, then pseudo-state
overrides).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..models import CSSPropertyValue, MergedCSSProperty, ParsedCSSRule, Variant
from .structure import normalize_media
from .values import classify_value, to_camel_case

RULE_CATEGORIES = ("base", "variant", "size", "state", "sub-element", "modifier")

PSEUDO_STATES = (
    "hover",
    "focus",
    "focus-visible",
    "focus-within",
    "active",
    "disabled",
    "checked",
    "read-only",
    "placeholder",
    "first-child",
    "last-child",
)

MODIFIER_CLASSES = ("fullWidth", "loading", "disabled", "selected", "interactive", "required")

# Computed values that carry no design intent; never surfaced as computed-only.
TRIVIAL_VALUES = frozenset(
    {
        "0px",
        "0",
        "none",
        "normal",
        "auto",
        "visible",
        "static",
        "start",
        "stretch",
        "baseline",
        "ease",
        "medium",
        '""',
        "content-box",
        "border-box",
        "transparent",
    }
)

_CLASS_NAME_RE = re.compile(r"\.([A-Za-z_][\w-]*)")
_NOT_RE = re.compile(r":not\([^)]*\)")
_PSEUDO_ELEMENT_RE = re.compile(
    r"::(?:before|after|placeholder|first-line|first-letter|selection|marker)"
)
_STATE_PATTERNS = {state: re.compile(rf":{re.escape(state)}(?![\w-])") for state in PSEUDO_STATES}


def merge_rules(
    rules: Sequence[ParsedCSSRule],
    computed_styles: Optional[Mapping[str, str]] = None,
    computed_selector: Optional[str] = None,
) -> List[MergedCSSProperty]:
    """Merge pre-ordered rules into one entry per property.

    A property keeps the position where its name first appeared while its
    value (and selector) come from the last rule that declares it. Properties
    found only in ``computed_styles`` are appended with ``computed_only`` set,
    unless their value is trivial.
    """
    slots: Dict[str, MergedCSSProperty] = {}
    for rule in rules:
        for name, value in rule.properties.items():
            slots[name] = MergedCSSProperty(property=name, value=value, selector=rule.selector)

    merged = list(slots.values())
    if not computed_styles:
        return merged

    selector = computed_selector
    if selector is None:
        selector = rules[0].selector if rules else ""
    seen = set(slots)
    for name, raw in computed_styles.items():
        key = to_camel_case(name) if "-" in name else name
        value = str(raw).strip()
        if key in seen or value in TRIVIAL_VALUES:
            continue
        seen.add(key)
        merged.append(
            MergedCSSProperty(
                property=key,
                value=CSSPropertyValue(raw=value, category=classify_value(value)),
                selector=selector,
                computed_only=True,
            )
        )
    return merged


@dataclass(frozen=True)
class CategorizedRule:
    rule: ParsedCSSRule
    category: str
    variant_name: Optional[str] = None
    size_name: Optional[str] = None
    pseudo_states: Tuple[str, ...] = ()
    sub_element: Optional[str] = None

    @property
    def selector(self) -> str:
        return self.rule.selector


@dataclass
class CSSModuleView:
    """A component stylesheet's rules grouped by what they style."""

    rules: List[CategorizedRule] = field(default_factory=list)
    base: List[CategorizedRule] = field(default_factory=list)
    variants: Dict[str, List[CategorizedRule]] = field(default_factory=dict)
    sizes: Dict[str, List[CategorizedRule]] = field(default_factory=dict)
    sub_elements: Dict[str, List[CategorizedRule]] = field(default_factory=dict)
    modifiers: List[CategorizedRule] = field(default_factory=list)


def categorize_rules(
    rules: Sequence[ParsedCSSRule],
    component_name: str,
    variants: Sequence[Variant] = (),
) -> CSSModuleView:
    """Group rules into base, variant, size, state, sub-element and modifier rules."""
    variant_classes = {variant.css_class for variant in variants if variant.type != "size"}
    size_classes = {variant.css_class for variant in variants if variant.type == "size"}
    base_class = component_name[:1].lower() + component_name[1:]
    module_prefix = f"{component_name}_"

    view = CSSModuleView()
    for rule in rules:
        categorized = _categorize(rule, base_class, module_prefix, variant_classes, size_classes)
        view.rules.append(categorized)
        if categorized.category in ("base", "state"):
            view.base.append(categorized)
        elif categorized.category == "variant" and categorized.variant_name:
            view.variants.setdefault(categorized.variant_name, []).append(categorized)
        elif categorized.category == "size" and categorized.size_name:
            view.sizes.setdefault(categorized.size_name, []).append(categorized)
        elif categorized.category == "sub-element" and categorized.sub_element:
            view.sub_elements.setdefault(categorized.sub_element, []).append(categorized)
        else:
            view.modifiers.append(categorized)
    return view


def _categorize(
    rule: ParsedCSSRule,
    base_class: str,
    module_prefix: str,
    variant_classes: set,
    size_classes: set,
) -> CategorizedRule:
    selector = rule.selector
    states = tuple(state for state, pattern in _STATE_PATTERNS.items() if pattern.search(selector))
    classes = [
        name[len(module_prefix) :] if name.startswith(module_prefix) else name
        for name in _CLASS_NAME_RE.findall(_strip_pseudo(selector))
    ]
    if not classes:
        return CategorizedRule(rule, "modifier", pseudo_states=states)

    primary = classes[0]
    if primary == base_class:
        return CategorizedRule(rule, "state" if states else "base", pseudo_states=states)
    if primary in variant_classes:
        return CategorizedRule(rule, "variant", variant_name=primary, pseudo_states=states)
    if primary in size_classes:
        if len(classes) > 1:
            return CategorizedRule(
                rule, "sub-element", size_name=primary, sub_element=classes[1], pseudo_states=states
            )
        return CategorizedRule(rule, "size", size_name=primary, pseudo_states=states)

    for name in classes:
        others = [other for other in classes if other != name]
        sub_element = others[0] if others else None
        if name in variant_classes:
            return CategorizedRule(
                rule, "variant", variant_name=name, sub_element=sub_element, pseudo_states=states
            )
        if name in size_classes:
            return CategorizedRule(
                rule, "size", size_name=name, sub_element=sub_element, pseudo_states=states
            )

    if primary in MODIFIER_CLASSES:
        return CategorizedRule(rule, "modifier", pseudo_states=states)
    return CategorizedRule(rule, "sub-element", sub_element=primary, pseudo_states=states)


def _strip_pseudo(selector: str) -> str:
    cleaned = _NOT_RE.sub("", selector)
    for pattern in _STATE_PATTERNS.values():
        cleaned = pattern.sub("", cleaned)
    return _PSEUDO_ELEMENT_RE.sub("", cleaned).strip()


def active_rules(
    view: CSSModuleView,
    variant: Optional[str] = None,
    size: Optional[str] = None,
    state: Optional[str] = None,
    media: Optional[str] = None,
) -> List[ParsedCSSRule]:
    """Rules applying to a selection, ordered for :func:`merge_rules`.

    Order: base, variant, size (without sub-element rules), then the
    pseudo-state rules of base and variant. Rules inside a media block only
    take part when ``media`` names that block.
    """
    state = None if state in (None, "", "default") else state
    media_key = normalize_media(media) if media else None

    def applies(item: CategorizedRule) -> bool:
        if item.rule.media_query is None:
            return True
        return media_key is not None and normalize_media(item.rule.media_query) == media_key

    def plain(items: Sequence[CategorizedRule]) -> List[CategorizedRule]:
        return [item for item in items if not item.pseudo_states and applies(item)]

    def stateful(items: Sequence[CategorizedRule]) -> List[CategorizedRule]:
        return [item for item in items if state in item.pseudo_states and applies(item)]

    variant_rules = view.variants.get(variant, []) if variant else []
    size_rules = view.sizes.get(size, []) if size else []

    ordered = plain(view.base) + plain(variant_rules)
    ordered += [item for item in plain(size_rules) if item.sub_element is None]
    if state:
        ordered += stateful(view.base) + stateful(variant_rules)
    return [item.rule for item in ordered]


def merged_view(
    view: CSSModuleView,
    variant: Optional[str] = None,
    size: Optional[str] = None,
    state: Optional[str] = None,
    media: Optional[str] = None,
    computed_styles: Optional[Mapping[str, str]] = None,
) -> List[MergedCSSProperty]:
    rules = active_rules(view, variant, size, state, media)
    base_selector = next(
        (item.selector for item in view.base if not item.pseudo_states), None
    )
    return merge_rules(rules, computed_styles, computed_selector=base_selector)


def find_writeback_selector(
    view: CSSModuleView,
    prop: str,
    variant: Optional[str] = None,
    size: Optional[str] = None,
    state: Optional[str] = None,
    sub_element: Optional[str] = None,
) -> Optional[str]:
    """Selector of the rule block an edit to ``prop`` should target.

    The rule currently supplying the winning value is preferred; otherwise the
    most specific rule of the selection (state, variant, size, base).
    """
    prop = to_camel_case(prop) if "-" in prop else prop
    if sub_element:
        targets = [item.rule for item in view.sub_elements.get(sub_element, [])]
    else:
        targets = active_rules(view, variant, size, state)

    for rule in reversed(targets):
        if prop in rule.properties:
            return rule.selector

    state = None if state in (None, "", "default") else state
    if state and variant:
        for item in view.variants.get(variant, []):
            if state in item.pseudo_states:
                return item.selector
    for group in (view.variants.get(variant or "", []), view.sizes.get(size or "", []), view.base):
        for item in group:
            if not item.pseudo_states and item.rule.media_query is None:
                return item.selector
    if sub_element and targets:
        return targets[0].selector
    return None


__all__ = [
    "CSSModuleView",
    "CategorizedRule",
    "MODIFIER_CLASSES",
    "PSEUDO_STATES",
    "RULE_CATEGORIES",
    "TRIVIAL_VALUES",
    "active_rules",
    "categorize_rules",
    "find_writeback_selector",
    "merge_rules",
    "merged_view",
]
