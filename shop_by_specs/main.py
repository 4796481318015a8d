import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from shop_by_specs.api.router import api_router
from shop_by_specs.config import settings
from shop_by_specs.services.processing_queue import processing_queue
from shop_by_specs.services.scheduler import start_scheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Shop by Specs Collection Sync")

app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=settings.CORS_ALLOW_ORIGIN_REGEX,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    allow_credentials=True,
)

app.include_router(api_router)


@app.on_event("startup")
async def startup_event():
    processing_queue.start()
    if settings.ENABLE_SCHEDULER:
        app.state.scheduler = start_scheduler()
        logger.info("Scheduler started")


@app.on_event("shutdown")
async def shutdown_event():
    await processing_queue.stop()
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is not None:
        scheduler.shutdown(wait=False)


@app.get("/")
def root():
    return {"status": "running", "message": "Shop by Specs app is running!"}


@app.get("/health")
def health_check():
    return {"status": "healthy", "queued_products": processing_queue.pending}
