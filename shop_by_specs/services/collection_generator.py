import logging

from shop_by_specs.catalog.attributes import extract_product_attributes
from shop_by_specs.catalog.combinations import generate_combinations
from shop_by_specs.catalog.definitions import build_collection_definition
from shop_by_specs.catalog.duplicates import collection_exists
from shop_by_specs.catalog.models import ExistingCollection
from shop_by_specs.errors import MalformedResponseError, UpstreamValidationError
from shop_by_specs.shopify.client import ShopifyClient, get_default_client
from shop_by_specs.shopify.collections import create_smart_collection, list_smart_collections_rest
from shop_by_specs.shopify.metafields import get_definition_map
from shop_by_specs.shopify.products import fetch_product, fetch_products_page

logger = logging.getLogger(__name__)


async def create_collections_for_product(
    product: dict,
    definition_map: dict[str, str],
    existing_collections: list[ExistingCollection],
    shopify_client: ShopifyClient,
) -> dict:
    """
    Create every missing combination collection for one product record.

    `existing_collections` is extended in place with what gets created, so
    later products in the same run see them.
    """
    product_id = product.get("id")
    attributes = extract_product_attributes(product)

    combinations = generate_combinations(attributes)
    if not combinations:
        logger.warning(f"Product type is missing for product: {product_id or product.get('title')}")
        return {"product_id": product_id, "combinations": 0, "created": 0, "existing": 0, "failed": 0}

    logger.info(f"Generated {len(combinations)} combinations for product {product_id}")

    created = 0
    existing = 0
    failed = 0

    for combination in combinations:
        definition = build_collection_definition(combination, definition_map)
        if definition is None:
            continue

        if collection_exists(definition.rules, existing_collections):
            logger.info(f"Collection already exists: {definition.title}")
            existing += 1
            continue

        try:
            collection = await create_smart_collection(definition, shopify_client)
        except UpstreamValidationError as e:
            logger.error(
                f"Error creating smart collection '{definition.title}' (handle {definition.handle}): {e}. "
                f"Rules: {[r.model_dump(exclude_none=True) for r in definition.rules]}"
            )
            failed += 1
            continue

        existing_collections.append(collection)
        created += 1

    logger.info(f"Finished processing product {product_id}: {created} created, {existing} existing, {failed} failed")
    return {
        "product_id": product_id,
        "combinations": len(combinations),
        "created": created,
        "existing": existing,
        "failed": failed,
    }


async def process_product(
    product_id,
    shopify_client: ShopifyClient | None = None,
    definition_map: dict[str, str] | None = None,
    existing_collections: list[ExistingCollection] | None = None,
) -> dict | None:
    """Fetch one product and create its missing combination collections."""
    if shopify_client is None:
        shopify_client = get_default_client()

    product = await fetch_product(product_id, shopify_client)
    if not product:
        logger.error(f"Product not found: {product_id}")
        return None

    if definition_map is None:
        definition_map = await get_definition_map(shopify_client)
    if existing_collections is None:
        existing_collections = await list_smart_collections_rest(shopify_client)

    return await create_collections_for_product(product, definition_map, existing_collections, shopify_client)


async def process_all_existing_products(shopify_client: ShopifyClient | None = None, limit: int | None = None, page_size: int = 50) -> dict:
    """
    Walk every product in pagination order, one at a time.

    A failing product is logged and skipped; a malformed page ends the walk.
    """
    if shopify_client is None:
        shopify_client = get_default_client()

    logger.info("▶ Processing all existing products..." + (f" (limit: {limit})" if limit else ""))

    definition_map = await get_definition_map(shopify_client)
    existing_collections = await list_smart_collections_rest(shopify_client)

    processed = 0
    created = 0
    failed_products = 0
    cursor = None

    while True:
        try:
            page = await fetch_products_page(cursor, first=page_size, shopify_client=shopify_client)
        except MalformedResponseError as e:
            logger.error(f"Stopping product walk: {e}")
            break

        logger.info(f"Processing {len(page['products'])} products (total processed: {processed})")

        for product in page["products"]:
            if limit and processed >= limit:
                break
            try:
                summary = await create_collections_for_product(product, definition_map, existing_collections, shopify_client)
                created += summary["created"]
            except Exception as e:
                logger.exception(f"Error processing product {product.get('id')}: {e}")
                failed_products += 1
            processed += 1

        if limit and processed >= limit:
            break
        if not page["has_next_page"]:
            break
        cursor = page["end_cursor"]

    logger.info(f"✔ Finished processing all {processed} existing products → {created} collections created, {failed_products} failed")
    return {"processed": processed, "collections_created": created, "failed": failed_products}
