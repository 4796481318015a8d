import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from shop_by_specs.config import settings
from shop_by_specs.errors import QueueFullError, SignatureMismatchError
from shop_by_specs.services.processing_queue import processing_queue
from shop_by_specs.services.webhook_service import HMAC_HEADER, handle_product_create_webhook

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/products/create")
async def product_create_webhook(request: Request):
    """
    Receive products/create webhooks, enqueue processing, and return quickly.

    - Verifies the HMAC over the raw body before anything else
    - Queues the product for collection generation
    """
    raw_body = await request.body()
    signature = request.headers.get(HMAC_HEADER)

    try:
        receipt = handle_product_create_webhook(raw_body, signature, settings.SHOPIFY_WEBHOOK_SECRET, processing_queue)
    except SignatureMismatchError:
        return JSONResponse({"ok": False, "error": "invalid signature"}, status_code=403)
    except QueueFullError as e:
        logger.error(f"Failed to queue webhook processing: {e}")
        return JSONResponse({"ok": False, "error": str(e)}, status_code=503)
    except ValueError as e:
        logger.error(f"Unreadable webhook payload: {e}")
        return JSONResponse({"ok": False, "error": "invalid payload"}, status_code=400)

    return JSONResponse(receipt)
