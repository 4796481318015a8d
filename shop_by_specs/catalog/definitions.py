import logging
import re

from shop_by_specs.catalog.models import (
    CANONICAL_ORDER,
    COLUMN_METAFIELD,
    COLUMN_TYPE,
    COLUMN_VENDOR,
    METAFIELD_ATTRIBUTES,
    PRODUCT_TYPE,
    RELATION_EQUALS,
    VENDOR,
    CollectionDefinition,
    MatchRule,
)

logger = logging.getLogger(__name__)

_HANDLE_STRIP_RE = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s+", re.ASCII)
_MULTI_HYPHEN_RE = re.compile(r"-+")


def handle_fragment(value: str) -> str:
    s = (value or "").lower()
    s = _HANDLE_STRIP_RE.sub("", s)
    s = _WHITESPACE_RE.sub("-", s)
    s = _MULTI_HYPHEN_RE.sub("-", s)
    return s.strip("-")


def _canonical_position(name: str) -> tuple[int, int]:
    if name in CANONICAL_ORDER:
        return (0, CANONICAL_ORDER.index(name))
    return (1, 0)


def sort_entries(combination: dict[str, str]) -> list[tuple[str, str]]:
    entries = [(name, value) for name, value in combination.items() if value]
    # sorted() is stable, so unknown names keep their insertion order
    return sorted(entries, key=lambda e: _canonical_position(e[0]))


def build_rule(name: str, value: str, definition_map: dict[str, str]) -> MatchRule | None:
    if name == VENDOR:
        return MatchRule(column=COLUMN_VENDOR, relation=RELATION_EQUALS, condition=value)
    if name == PRODUCT_TYPE:
        return MatchRule(column=COLUMN_TYPE, relation=RELATION_EQUALS, condition=value)
    if name in METAFIELD_ATTRIBUTES:
        definition_id = (definition_map or {}).get(name)
        if definition_id:
            return MatchRule(
                column=COLUMN_METAFIELD,
                relation=RELATION_EQUALS,
                condition=value,
                condition_object_id=str(definition_id),
            )
        logger.warning(
            f"No metafield definition for '{name}'; dropping rule '{value}'. "
            "The collection will filter on fewer attributes than its title suggests."
        )
    return None


def build_collection_definition(
    combination: dict[str, str],
    definition_map: dict[str, str],
) -> CollectionDefinition | None:
    entries = sort_entries(combination)
    if not entries:
        return None

    title = " ".join(value for _, value in entries)

    fragments = [handle_fragment(value) for _, value in entries]
    handle = "-".join(f for f in fragments if f)

    rules = []
    for name, value in entries:
        rule = build_rule(name, value, definition_map)
        if rule is not None:
            rules.append(rule)

    return CollectionDefinition(title=title, handle=handle, rules=rules)
