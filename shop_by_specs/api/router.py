from fastapi import APIRouter
from shop_by_specs.api.routes import collections, webhooks

api_router = APIRouter()

api_router.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
api_router.include_router(collections.router, prefix="/collections", tags=["Collections"])
api_router.include_router(collections.related_router, prefix="/related-collections", tags=["Related"])
