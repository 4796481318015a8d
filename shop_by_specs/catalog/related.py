import logging

from shop_by_specs.catalog.attributes import (
    DEFAULT_INFERENCE,
    PatternAttributeInference,
    extract_rule_attributes,
)
from shop_by_specs.catalog.models import (
    CollectionRef,
    ExistingCollection,
    ProductAttributeSet,
    RelatedCollectionsResult,
    SpecsBuckets,
)
from shop_by_specs.errors import NotFoundError

logger = logging.getLogger(__name__)

PARTS_COLLECTIONS = [
    CollectionRef(title="Genie Parts", handle="genie-parts"),
    CollectionRef(title="JLG Parts", handle="jlg-parts"),
    CollectionRef(title="Skyjack Parts", handle="skyjack-parts"),
    CollectionRef(title="Haulage Parts", handle="haulage-parts"),
]


def _ref(collection: ExistingCollection) -> CollectionRef:
    return CollectionRef(title=collection.title, handle=collection.handle, image=collection.image)


def _adds_dimension(target: ProductAttributeSet, other: ProductAttributeSet, attribute: str) -> bool:
    # Drill-down: the other collection filters on something the target does not
    return (
        not target.get(attribute)
        and bool(target.product_type)
        and other.product_type == target.product_type
        and bool(other.get(attribute))
    )


def resolve_related_collections(
    target_handle: str,
    collections: list[ExistingCollection],
    definition_map: dict[str, str],
    inference: PatternAttributeInference | None = DEFAULT_INFERENCE,
) -> RelatedCollectionsResult:
    """
    Bucket every other collection by how it relates to the target.

    A collection may appear in several buckets. Entries carry whatever
    image the collection had; filtering is left to the caller.
    """
    target = next((c for c in collections if c.handle == target_handle), None)
    if target is None:
        raise NotFoundError(f"Collection not found with handle: {target_handle}")

    parsed: dict[str, ProductAttributeSet] = {}

    def attributes_of(collection: ExistingCollection) -> ProductAttributeSet:
        key = collection.handle or collection.id
        if key not in parsed:
            parsed[key] = extract_rule_attributes(collection.rules, definition_map, inference)
        return parsed[key]

    target_attrs = attributes_of(target)
    related = RelatedCollectionsResult(parts=list(PARTS_COLLECTIONS))

    for processed, other in enumerate(collections, 1):
        if processed % 100 == 0:
            logger.info(f"Processed {processed}/{len(collections)} collections")

        if other.handle == target_handle:
            continue

        other_attrs = attributes_of(other)
        ref = _ref(other)

        if other_attrs.product_type == target_attrs.product_type:
            related.by_category.append(ref)
        if _adds_dimension(target_attrs, other_attrs, "vendor"):
            related.by_manufacturer.append(ref)
        if _adds_dimension(target_attrs, other_attrs, "size"):
            related.by_size_item.append(ref)
        if _adds_dimension(target_attrs, other_attrs, "condition"):
            related.by_specs.condition.append(ref)
        if _adds_dimension(target_attrs, other_attrs, "fuel_type"):
            related.by_specs.fuel_type.append(ref)

    return related


def filter_entries_without_image(result: RelatedCollectionsResult) -> RelatedCollectionsResult:
    """Drop computed entries that have no image. `parts` is left alone."""

    def keep(refs: list[CollectionRef]) -> list[CollectionRef]:
        return [r for r in refs if r.image]

    return RelatedCollectionsResult(
        by_category=keep(result.by_category),
        by_manufacturer=keep(result.by_manufacturer),
        by_size_item=keep(result.by_size_item),
        by_specs=SpecsBuckets(
            condition=keep(result.by_specs.condition),
            fuel_type=keep(result.by_specs.fuel_type),
        ),
        parts=list(result.parts),
    )
