import asyncio
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from shop_by_specs.config import settings
from shop_by_specs.errors import NotFoundError, QueueFullError, ShopifyError
from shop_by_specs.services.collection_generator import process_all_existing_products
from shop_by_specs.services.duplicate_cleanup import cleanup_duplicate_collections
from shop_by_specs.services.processing_queue import processing_queue
from shop_by_specs.services.related_collections import get_related_collections
from shop_by_specs.shopify.webhooks import register_product_creation_webhook

logger = logging.getLogger(__name__)

router = APIRouter()
related_router = APIRouter()

# Keep references so background runs are not garbage collected mid-flight
_background_tasks: set[asyncio.Task] = set()


def _run_in_background(coro) -> None:
    task = asyncio.create_task(coro)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


@router.post("/process-existing-products")
async def process_existing_products(limit: int = None):
    _run_in_background(process_all_existing_products(limit=limit))
    return {"message": "Processing started in background"}


@router.post("/process-product/{product_id}")
async def process_single_product(product_id: str):
    try:
        processing_queue.enqueue(product_id)
    except QueueFullError as e:
        logger.error(f"Failed to queue product {product_id}: {e}")
        return JSONResponse({"success": False, "error": str(e)}, status_code=503)
    return {"message": f"Processing product {product_id} queued", "queued": processing_queue.pending}


@router.post("/register-webhooks")
async def register_webhooks(request: Request, url: str = None):
    base_url = (url or settings.PUBLIC_BASE_URL or str(request.base_url)).rstrip("/")
    webhook_url = f"{base_url}/webhooks/products/create"

    try:
        webhook = await register_product_creation_webhook(webhook_url)
    except ShopifyError as e:
        logger.error(f"Error registering webhook: {e}")
        return JSONResponse({"success": False, "error": str(e)}, status_code=502)

    if not webhook:
        return JSONResponse({"success": False, "error": "Failed to register webhook"}, status_code=502)
    return {"success": True, "webhook": webhook}


@router.post("/delete-duplicate-collections")
async def delete_duplicate_collections():
    try:
        result = await cleanup_duplicate_collections()
    except ShopifyError as e:
        logger.error(f"Error deleting duplicate collections: {e}")
        return JSONResponse({"success": False, "error": str(e)}, status_code=502)
    return {"message": "Duplicate collection cleanup finished", "result": result}


@related_router.get("/{handle}")
async def related_collections(handle: str, include_without_image: bool = False):
    try:
        related = await get_related_collections(handle, include_without_image=include_without_image)
    except NotFoundError as e:
        return JSONResponse({"success": False, "error": str(e)}, status_code=404)
    except ShopifyError as e:
        logger.error(f"Error fetching related collections: {e}")
        return JSONResponse({"success": False, "error": str(e)}, status_code=502)
    return related.model_dump(by_alias=True)
