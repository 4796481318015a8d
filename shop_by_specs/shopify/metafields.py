import logging

from shop_by_specs.catalog.attributes import build_definition_map
from shop_by_specs.catalog.models import MetafieldDefinition
from shop_by_specs.shopify.client import ShopifyClient, get_default_client

logger = logging.getLogger(__name__)

METAFIELD_DEFINITIONS_QUERY = """
query ProductMetafieldDefinitions($namespace: String) {
  metafieldDefinitions(first: 50, ownerType: PRODUCT, namespace: $namespace) {
    edges {
      node {
        id
        name
        key
        namespace
        type { name }
      }
    }
  }
}
"""


async def fetch_metafield_definitions(
    shopify_client: ShopifyClient | None = None,
    namespace: str = "custom",
) -> list[MetafieldDefinition]:
    if shopify_client is None:
        shopify_client = get_default_client()

    logger.info("Getting metafield definitions")
    data = await shopify_client.graphql(METAFIELD_DEFINITIONS_QUERY, {"namespace": namespace})
    connection = (data or {}).get("metafieldDefinitions")
    if not connection or not isinstance(connection.get("edges"), list):
        logger.error("Failed to fetch metafield definitions - invalid response structure")
        return []

    definitions = []
    for edge in connection["edges"]:
        node = (edge or {}).get("node") or {}
        if not node.get("id") or not node.get("key"):
            continue
        definitions.append(
            MetafieldDefinition(
                id=node["id"],
                key=node["key"],
                name=node.get("name") or "",
                namespace=node.get("namespace"),
            )
        )
    return definitions


async def get_definition_map(shopify_client: ShopifyClient | None = None) -> dict[str, str]:
    definitions = await fetch_metafield_definitions(shopify_client)
    definition_map = build_definition_map(definitions)
    logger.info(f"Metafield definition map: {definition_map}")
    return definition_map
