import logging

from shop_by_specs.errors import MalformedResponseError
from shop_by_specs.shopify.client import ShopifyClient, get_default_client

logger = logging.getLogger(__name__)

PRODUCT_QUERY = """
query GetProduct($id: ID!) {
  product(id: $id) {
    id
    title
    handle
    productType
    vendor
    tags
    metafields(first: 20, namespace: "custom") {
      edges { node { key value } }
    }
  }
}
"""

PRODUCTS_PAGE_QUERY = """
query GetProducts($first: Int!, $after: String) {
  products(first: $first, after: $after) {
    pageInfo { hasNextPage endCursor }
    edges {
      node {
        id
        title
        handle
        productType
        vendor
        metafields(first: 20, namespace: "custom") {
          edges { node { key value } }
        }
      }
    }
  }
}
"""


def product_gid(product_id) -> str:
    formatted = str(product_id)
    if not formatted.startswith("gid://"):
        formatted = f"gid://shopify/Product/{formatted}"
    return formatted


def _flatten_product(node: dict) -> dict:
    metafields = node.get("metafields") or {}
    return {
        **node,
        "product_type": node.get("productType") or "",
        "metafields": [(e or {}).get("node") or {} for e in metafields.get("edges") or []],
    }


async def fetch_product(product_id, shopify_client: ShopifyClient | None = None) -> dict | None:
    if shopify_client is None:
        shopify_client = get_default_client()

    logger.info(f"Getting product by ID: {product_id}")
    data = await shopify_client.graphql(PRODUCT_QUERY, {"id": product_gid(product_id)})
    product = (data or {}).get("product")
    if not product:
        return None
    return _flatten_product(product)


async def fetch_products_page(cursor: str | None = None, first: int = 50, shopify_client: ShopifyClient | None = None) -> dict:
    """
    One page of products.

    Returns {"products": [...], "has_next_page": bool, "end_cursor": str | None}.
    Raises MalformedResponseError when the connection is missing.
    """
    if shopify_client is None:
        shopify_client = get_default_client()

    data = await shopify_client.graphql(PRODUCTS_PAGE_QUERY, {"first": first, "after": cursor})
    connection = (data or {}).get("products")
    if not connection or not isinstance(connection.get("edges"), list):
        raise MalformedResponseError("Error fetching products: Invalid response structure")

    page_info = connection.get("pageInfo") or {}
    return {
        "products": [_flatten_product((e or {}).get("node") or {}) for e in connection["edges"]],
        "has_next_page": bool(page_info.get("hasNextPage")),
        "end_cursor": page_info.get("endCursor"),
    }
