import logging
from datetime import datetime, timezone

from shop_by_specs.catalog.models import COLUMN_METAFIELD, ExistingCollection, MatchRule
from shop_by_specs.catalog.rules import gid_tail

logger = logging.getLogger(__name__)

SIGNATURE_SEPARATOR = "|"


def rules_match(candidate: MatchRule, existing: MatchRule) -> bool:
    if (
        existing.column != candidate.column
        or existing.relation != candidate.relation
        or existing.condition != candidate.condition
    ):
        return False
    if candidate.column == COLUMN_METAFIELD:
        return existing.condition_object_id == candidate.condition_object_id
    return True


def collection_exists(candidate_rules: list[MatchRule], existing_collections: list[ExistingCollection]) -> bool:
    """
    True if some existing collection filters on exactly the same rules.

    Order does not matter; condition values are compared verbatim, so
    "Used" and "used" are different collections.
    """
    for collection in existing_collections:
        if not collection.rules:
            continue
        if len(collection.rules) != len(candidate_rules):
            continue
        if all(any(rules_match(new, old) for old in collection.rules) for new in candidate_rules):
            return True
    return False


def rule_signature(rules: list[MatchRule]) -> str:
    ordered = sorted(rules, key=lambda r: (r.column, r.condition))
    parts = []
    for rule in ordered:
        part = f"{rule.column}:{rule.relation}:{rule.condition}"
        if rule.condition_object_id:
            part += f":{rule.condition_object_id}"
        parts.append(part)
    return SIGNATURE_SEPARATOR.join(parts)


def _parse_created_at(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    # Naive timestamps are taken as UTC so they compare with offset-aware ones
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _numeric_id(collection: ExistingCollection) -> int:
    try:
        return int(gid_tail(collection.id) or 0)
    except ValueError:
        return 0


def order_oldest_first(group: list[ExistingCollection]) -> list[ExistingCollection]:
    if all(c.created_at for c in group):
        try:
            return sorted(group, key=lambda c: _parse_created_at(c.created_at))
        except (ValueError, TypeError):
            logger.warning("Unparseable created_at in duplicate group; ordering by id")
    return sorted(group, key=_numeric_id)


def group_by_signature(collections: list[ExistingCollection]) -> dict[str, list[ExistingCollection]]:
    groups: dict[str, list[ExistingCollection]] = {}
    for collection in collections:
        if not collection.rules:
            continue
        groups.setdefault(rule_signature(collection.rules), []).append(collection)
    return groups


def plan_duplicate_deletions(collections: list[ExistingCollection]) -> list[str]:
    """Ids to delete so that each rule signature keeps only its oldest collection."""
    to_delete: list[str] = []

    for signature, group in group_by_signature(collections).items():
        if len(group) < 2:
            continue

        ordered = order_oldest_first(group)
        keep = ordered[0]
        logger.info(f"Found {len(group)} collections with identical rules [{signature}]")
        logger.info(f"Keeping: '{keep.title}' (ID: {keep.id})")

        for dupe in ordered[1:]:
            logger.info(f"Will delete: '{dupe.title}' (ID: {dupe.id})")
            to_delete.append(dupe.id)

    return to_delete
