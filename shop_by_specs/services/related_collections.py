import logging

from shop_by_specs.catalog.models import RelatedCollectionsResult
from shop_by_specs.catalog.related import filter_entries_without_image, resolve_related_collections
from shop_by_specs.errors import NotFoundError
from shop_by_specs.shopify.client import ShopifyClient, get_default_client
from shop_by_specs.shopify.collections import get_collection_by_handle, list_smart_collections
from shop_by_specs.shopify.metafields import get_definition_map

logger = logging.getLogger(__name__)


async def get_related_collections(
    handle: str,
    shopify_client: ShopifyClient | None = None,
    include_without_image: bool = False,
) -> RelatedCollectionsResult:
    """
    Related collections for a collection page, grouped by tab.

    Entries without an image are dropped unless `include_without_image`
    asks for the older, unfiltered output.
    """
    if shopify_client is None:
        shopify_client = get_default_client()

    logger.info(f"Getting related collections for: {handle}")

    target = await get_collection_by_handle(handle, shopify_client)
    if target is None:
        raise NotFoundError(f"Collection not found with handle: {handle}")

    definition_map = await get_definition_map(shopify_client)
    collections = await list_smart_collections(shopify_client)

    # The target may be a custom collection that the smart listing skips
    if not any(c.handle == handle for c in collections):
        collections = [target] + collections

    logger.info(f"Processing {len(collections)} collections")
    related = resolve_related_collections(handle, collections, definition_map)

    if not include_without_image:
        related = filter_entries_without_image(related)

    logger.info(f"Completed finding related collections for: {handle}")
    return related
