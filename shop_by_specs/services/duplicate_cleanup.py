import asyncio
import logging

from shop_by_specs.catalog.duplicates import plan_duplicate_deletions
from shop_by_specs.config import settings
from shop_by_specs.shopify.client import ShopifyClient, get_default_client
from shop_by_specs.shopify.collections import delete_smart_collection, list_smart_collections_rest

logger = logging.getLogger(__name__)


async def cleanup_duplicate_collections(shopify_client: ShopifyClient | None = None, delay: float | None = None) -> dict:
    """
    Delete smart collections whose rules duplicate an older collection.
    One failed delete does not stop the rest.
    """
    if shopify_client is None:
        shopify_client = get_default_client()
    if delay is None:
        delay = settings.DUPLICATE_DELETE_DELAY

    logger.info("Starting duplicate collection cleanup...")
    collections = await list_smart_collections_rest(shopify_client)
    logger.info(f"Found {len(collections)} smart collections total")

    to_delete = plan_duplicate_deletions(collections)
    if not to_delete:
        logger.info("No duplicate collections found!")
        return {"found": len(collections), "planned": 0, "deleted": 0, "failed": 0}

    logger.info(f"Deleting {len(to_delete)} duplicate collections...")
    deleted = 0
    failed = 0

    for i, collection_id in enumerate(to_delete, 1):
        try:
            await delete_smart_collection(collection_id, shopify_client)
            deleted += 1
            logger.info(f"Deleted collection {i}/{len(to_delete)} (ID: {collection_id})")
        except Exception as e:
            logger.error(f"Error deleting collection {collection_id}: {e}")
            failed += 1

        if delay and i < len(to_delete):
            await asyncio.sleep(delay)

    logger.info(f"Cleanup complete. Deleted: {deleted}, Failed: {failed}")
    return {"found": len(collections), "planned": len(to_delete), "deleted": deleted, "failed": failed}
