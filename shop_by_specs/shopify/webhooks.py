import logging

from shop_by_specs.shopify.client import ShopifyClient, get_default_client

logger = logging.getLogger(__name__)

PRODUCT_CREATE_TOPIC = "products/create"


async def register_product_creation_webhook(callback_url: str, shopify_client: ShopifyClient | None = None) -> dict | None:
    if shopify_client is None:
        shopify_client = get_default_client()

    payload = {
        "webhook": {
            "topic": PRODUCT_CREATE_TOPIC,
            "address": callback_url,
            "format": "json",
        }
    }
    res = await shopify_client.post("webhooks.json", payload)
    webhook = (res or {}).get("webhook")
    if webhook:
        logger.info(f"Registered product creation webhook -> {callback_url}")
    else:
        logger.error(f"Webhook registration returned no webhook: {res}")
    return webhook
