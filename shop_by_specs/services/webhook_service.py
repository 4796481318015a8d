import base64
import hashlib
import hmac
import json
import logging

from shop_by_specs.errors import SignatureMismatchError

logger = logging.getLogger(__name__)

HMAC_HEADER = "X-Shopify-Hmac-Sha256"


def compute_webhook_signature(raw_body: bytes, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_webhook_signature(raw_body: bytes, signature: str | None, secret: str | None) -> bool:
    """Constant-time check of the base64 HMAC-SHA256 the store sends with each webhook."""
    if not signature or not secret:
        return False
    expected = compute_webhook_signature(raw_body, secret)
    return hmac.compare_digest(expected.encode("ascii"), signature.strip().encode("utf-8"))


def handle_product_create_webhook(raw_body: bytes, signature: str | None, secret: str, queue) -> dict:
    """
    Verify, parse and enqueue a products/create notification.

    The body is not parsed until the signature matches.
    """
    if not verify_webhook_signature(raw_body, signature, secret):
        logger.warning("Rejected products/create webhook: HMAC signature mismatch")
        raise SignatureMismatchError("Webhook signature mismatch")

    product = json.loads(raw_body)
    if not isinstance(product, dict):
        raise ValueError(f"Expected a JSON object, got {type(product).__name__}")
    product_id = product.get("admin_graphql_api_id") or product.get("id")
    logger.info(f"Received webhook for new product: {product_id} - {product.get('title')}")

    queue.enqueue(product_id)
    return {"ok": True, "queued": True, "product_id": product_id}
