import logging

from shop_by_specs.catalog.models import CollectionDefinition, ExistingCollection
from shop_by_specs.catalog.rules import gid_tail, normalize_collection, normalize_collections
from shop_by_specs.shopify.client import ShopifyClient, get_default_client

logger = logging.getLogger(__name__)

_COLLECTION_FIELDS = """
    id
    title
    handle
    image { url altText }
    products(first: 1) {
      edges {
        node {
          featuredMedia { preview { image { url altText } } }
        }
      }
    }
    ruleSet {
      appliedDisjunctively
      rules {
        column
        condition
        relation
        conditionObject {
          ... on CollectionRuleMetafieldCondition {
            metafieldDefinition { id key }
          }
        }
      }
    }
"""

COLLECTION_BY_HANDLE_QUERY = f"""
query CollectionByHandle($handle: String!) {{
  collectionByHandle(handle: $handle) {{
{_COLLECTION_FIELDS}
  }}
}}
"""

SMART_COLLECTIONS_QUERY = f"""
query SmartCollections($first: Int!, $after: String) {{
  collections(query: "collection_type:smart", first: $first, after: $after) {{
    pageInfo {{ hasNextPage endCursor }}
    edges {{
      node {{
{_COLLECTION_FIELDS}
      }}
    }}
  }}
}}
"""


async def get_collection_by_handle(handle: str, shopify_client: ShopifyClient | None = None) -> ExistingCollection | None:
    """
    Look a collection up by handle: GraphQL first, then REST smart
    collections, then REST custom collections. None when nothing matches.
    """
    if shopify_client is None:
        shopify_client = get_default_client()

    data = await shopify_client.graphql(COLLECTION_BY_HANDLE_QUERY, {"handle": handle})
    node = (data or {}).get("collectionByHandle")
    if node:
        return normalize_collection(node)

    for resource in ("smart_collections", "custom_collections"):
        res = await shopify_client.get(f"{resource}.json", params={"handle": handle})
        found = (res or {}).get(resource) or []
        if found:
            return normalize_collection(found[0])

    logger.info(f"Collection with handle {handle} not found")
    return None


async def list_smart_collections(shopify_client: ShopifyClient | None = None, page_size: int = 50) -> list[ExistingCollection]:
    """All smart collections via GraphQL cursor pagination."""
    if shopify_client is None:
        shopify_client = get_default_client()

    collections: list[ExistingCollection] = []
    cursor = None
    page = 0

    while True:
        page += 1
        data = await shopify_client.graphql(SMART_COLLECTIONS_QUERY, {"first": page_size, "after": cursor})
        connection = (data or {}).get("collections")
        if not connection or not isinstance(connection.get("edges"), list):
            logger.error(f"Error fetching collections page {page}: Invalid response structure")
            break

        collections.extend(normalize_collections([(e or {}).get("node") for e in connection["edges"]]))

        page_info = connection.get("pageInfo") or {}
        if not page_info.get("hasNextPage"):
            break
        cursor = page_info.get("endCursor")

    logger.info(f"Fetched {len(collections)} smart collections ({page} pages)")
    return collections


async def list_smart_collections_rest(shopify_client: ShopifyClient | None = None, limit: int = 250) -> list[ExistingCollection]:
    """All smart collections via REST, following the Link header."""
    if shopify_client is None:
        shopify_client = get_default_client()

    collections: list[ExistingCollection] = []
    endpoint = f"smart_collections.json?limit={limit}"
    page = 0

    while endpoint:
        page += 1
        res, next_endpoint = await shopify_client.get_page(endpoint)
        batch = (res or {}).get("smart_collections")
        if not isinstance(batch, list):
            logger.error(f"Error fetching smart collections page {page}: Invalid response structure")
            break
        collections.extend(normalize_collections(batch))
        endpoint = next_endpoint

    logger.info(f"Fetched {len(collections)} smart collections ({page} pages)")
    return collections


async def create_smart_collection(definition: CollectionDefinition, shopify_client: ShopifyClient | None = None) -> ExistingCollection:
    """
    Create a conjunctive smart collection (products must match every rule).
    UpstreamValidationError propagates to the caller.
    """
    if shopify_client is None:
        shopify_client = get_default_client()

    logger.info(f"Attempting to create collection: {definition.title}")
    res = await shopify_client.post("smart_collections.json", definition.to_rest_payload(disjunctive=False))
    created = (res or {}).get("smart_collection")
    if not created:
        # Echo back what we asked for so the run can keep de-duplicating
        logger.warning(f"Create returned no collection body for '{definition.title}'")
        return ExistingCollection(id="", title=definition.title, handle=definition.handle, rules=definition.rules)

    logger.info(f"✔ Created collection: {definition.title}")
    return normalize_collection(created)


async def delete_smart_collection(collection_id: str, shopify_client: ShopifyClient | None = None) -> None:
    if shopify_client is None:
        shopify_client = get_default_client()
    await shopify_client.delete(f"smart_collections/{gid_tail(collection_id)}.json")
