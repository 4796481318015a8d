import logging
import re
from typing import Iterable

from shop_by_specs.catalog.models import (
    COLUMN_METAFIELD,
    COLUMN_TYPE,
    COLUMN_VENDOR,
    CONDITION,
    FUEL_TYPE,
    SIZE,
    ExistingCollection,
    MatchRule,
    MetafieldDefinition,
    ProductAttributeSet,
)
from shop_by_specs.catalog.rules import gid_tail, normalize_rules

logger = logging.getLogger(__name__)

SOURCE_PRODUCT = "product"
SOURCE_COLLECTION = "collection"

# Lowercased metafield / definition key -> internal attribute
METAFIELD_KEY_ALIASES: dict[str, str] = {
    "condition": CONDITION,
    "size_item": SIZE,
    "size": SIZE,
    "fuel_type": FUEL_TYPE,
}


def attribute_for_key(key: str | None) -> str | None:
    if not key:
        return None
    return METAFIELD_KEY_ALIASES.get(str(key).strip().lower())


class PatternAttributeInference:
    """
    Guess which attribute a metafield rule filters on from its value alone.

    Only used when neither the definition id nor the definition key
    resolves. It is a heuristic: "30-46" reads as a size even where it
    is not one. First match wins, in condition, size, fuel type order.
    """

    PATTERNS: list[tuple[str, re.Pattern]] = [
        (CONDITION, re.compile(r"\b(used|new|refurbished)\b")),
        (SIZE, re.compile(r"(\d+['\"]|\d+ft|\d+-\d+|feet|\d+')")),
        (FUEL_TYPE, re.compile(r"\b(electric|diesel|gas|hybrid|propane)\b")),
    ]

    def infer(self, condition: str) -> str | None:
        text = (condition or "").lower()
        for attribute, pattern in self.PATTERNS:
            if pattern.search(text):
                return attribute
        return None


DEFAULT_INFERENCE = PatternAttributeInference()


def build_definition_map(definitions: Iterable[MetafieldDefinition]) -> dict[str, str]:
    """
    Map internal attribute names to metafield definition ids.

    Keys are matched case-insensitively, so "Condition" and "condition"
    land on the same slot. Definitions for untracked keys are ignored.
    """
    definition_map: dict[str, str] = {}
    for definition in definitions:
        attribute = attribute_for_key(definition.key)
        definition_id = gid_tail(definition.id)
        if not attribute or not definition_id:
            continue
        if attribute in definition_map and definition_map[attribute] != definition_id:
            logger.warning(
                f"Multiple metafield definitions map to '{attribute}' "
                f"({definition_map[attribute]}, {definition_id}); keeping the last one"
            )
        definition_map[attribute] = definition_id
    return definition_map


def _metafield_entries(metafields) -> list[dict]:
    # Accept a plain list of {key, value} or a GraphQL connection
    if isinstance(metafields, dict):
        return [(e or {}).get("node") or {} for e in metafields.get("edges") or []]
    if isinstance(metafields, list):
        return [m for m in metafields if isinstance(m, dict)]
    return []


def extract_product_attributes(product: dict) -> ProductAttributeSet:
    attributes = {
        "vendor": product.get("vendor") or "",
        "product_type": product.get("productType") or product.get("product_type") or "",
    }

    for metafield in _metafield_entries(product.get("metafields")):
        attribute = attribute_for_key(metafield.get("key"))
        value = metafield.get("value")
        if attribute and value:
            attributes[attribute] = str(value)

    return ProductAttributeSet(**attributes)


def extract_rule_attributes(
    rules: list[MatchRule],
    definition_map: dict[str, str],
    inference: PatternAttributeInference | None = DEFAULT_INFERENCE,
) -> ProductAttributeSet:
    id_to_attribute = {definition_id: name for name, definition_id in (definition_map or {}).items()}
    attributes: dict[str, str] = {}

    for rule in rules:
        if rule.column == COLUMN_TYPE:
            attributes["product_type"] = rule.condition
        elif rule.column == COLUMN_VENDOR:
            attributes["vendor"] = rule.condition
        elif rule.column == COLUMN_METAFIELD:
            attribute = id_to_attribute.get(rule.condition_object_id or "")
            if not attribute:
                attribute = attribute_for_key(rule.definition_key)
            if not attribute and inference is not None:
                attribute = inference.infer(rule.condition)
                if attribute:
                    logger.debug(f"Inferred '{attribute}' from rule value '{rule.condition}'")
            if attribute:
                attributes[attribute] = rule.condition

    return ProductAttributeSet(**attributes)


def extract_attributes(
    record,
    source: str,
    definition_map: dict[str, str] | None = None,
    inference: PatternAttributeInference | None = DEFAULT_INFERENCE,
) -> ProductAttributeSet:
    """Pull the five tracked attributes out of a product or collection record."""
    if source == SOURCE_PRODUCT:
        return extract_product_attributes(record)

    if source == SOURCE_COLLECTION:
        if isinstance(record, ExistingCollection):
            rules = record.rules
        elif isinstance(record, list):
            rules = record
        else:
            rules = normalize_rules(record)
        return extract_rule_attributes(rules, definition_map or {}, inference)

    raise ValueError(f"Unknown attribute source: {source}")
