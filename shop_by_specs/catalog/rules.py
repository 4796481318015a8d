"""
Ingress normalization for collections coming back from the store.

Smart collections reach us in one of two shapes:

  - REST ("flat"):   {"rules": [{"column": "vendor", "relation": "equals",
                                  "condition": "Genie",
                                  "condition_object_id": 123}]}
  - GraphQL ("rule_set"): {"ruleSet": {"rules": [{"column": "VENDOR",
                                  "relation": "EQUALS", "condition": "Genie",
                                  "conditionObject": {"metafieldDefinition":
                                      {"id": "gid://.../123", "key": "..."}}}]}}

Both become a list of MatchRule here, and nothing past this module looks at
the raw shape again.
"""
import logging
from typing import Any

from shop_by_specs.catalog.models import ExistingCollection, MatchRule

logger = logging.getLogger(__name__)

SHAPE_FLAT = "flat"
SHAPE_RULE_SET = "rule_set"


def gid_tail(value: Any) -> str | None:
    """'gid://shopify/MetafieldDefinition/42' -> '42'; plain ids pass through."""
    if value is None or value == "":
        return None
    s = str(value).strip()
    if "/" in s:
        s = s.rsplit("/", 1)[-1]
    return s or None


def detect_rule_shape(raw: dict) -> str | None:
    if isinstance(raw.get("rules"), list):
        return SHAPE_FLAT
    rule_set = raw.get("ruleSet")
    if isinstance(rule_set, dict) and isinstance(rule_set.get("rules"), list):
        return SHAPE_RULE_SET
    return None


def _rule_from_flat(rule: dict) -> MatchRule:
    return MatchRule(
        column=str(rule.get("column") or "").lower(),
        relation=str(rule.get("relation") or "").lower(),
        condition=str(rule.get("condition") or ""),
        condition_object_id=gid_tail(rule.get("condition_object_id")),
    )


def _rule_from_rule_set(rule: dict) -> MatchRule:
    definition = ((rule.get("conditionObject") or {}).get("metafieldDefinition")) or {}
    return MatchRule(
        column=str(rule.get("column") or "").lower(),
        relation=str(rule.get("relation") or "").lower(),
        condition=str(rule.get("condition") or ""),
        condition_object_id=gid_tail(definition.get("id") or rule.get("conditionObjectId")),
        definition_key=definition.get("key"),
    )


def normalize_rules(raw: dict) -> list[MatchRule]:
    shape = detect_rule_shape(raw)
    if shape == SHAPE_FLAT:
        return [_rule_from_flat(r) for r in raw["rules"] if isinstance(r, dict)]
    if shape == SHAPE_RULE_SET:
        return [_rule_from_rule_set(r) for r in raw["ruleSet"]["rules"] if isinstance(r, dict)]
    return []


def extract_image_url(raw: dict) -> str | None:
    """
    Best-effort image for a collection:
      - the collection's own image (GraphQL `url`, REST `src`)
      - else the first product's featured media preview
      - else None
    """
    image = raw.get("image")
    if isinstance(image, dict):
        url = image.get("url") or image.get("src")
        if url:
            return url

    edges = ((raw.get("products") or {}).get("edges")) or []
    if edges:
        node = (edges[0] or {}).get("node") or {}
        preview_image = (((node.get("featuredMedia") or {}).get("preview") or {}).get("image")) or {}
        if preview_image.get("url"):
            return preview_image["url"]

    return None


def normalize_collection(raw: dict) -> ExistingCollection:
    return ExistingCollection(
        id=str(raw.get("id") or ""),
        title=raw.get("title") or "",
        handle=raw.get("handle") or "",
        rules=normalize_rules(raw),
        image=extract_image_url(raw),
        created_at=raw.get("created_at") or raw.get("createdAt"),
    )


def normalize_collections(raws: list[dict]) -> list[ExistingCollection]:
    out = []
    for raw in raws or []:
        if not isinstance(raw, dict):
            logger.warning("Skipping collection with unexpected shape: %r", raw)
            continue
        out.append(normalize_collection(raw))
    return out
