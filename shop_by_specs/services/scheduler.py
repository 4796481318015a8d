from apscheduler.schedulers.asyncio import AsyncIOScheduler

from shop_by_specs.config import settings
from shop_by_specs.services.collection_generator import process_all_existing_products
from shop_by_specs.services.duplicate_cleanup import cleanup_duplicate_collections


def start_scheduler() -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        process_all_existing_products,
        "interval",
        minutes=settings.SCHEDULER_PRODUCTS_INTERVAL_MINUTES,
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        cleanup_duplicate_collections,
        "interval",
        minutes=settings.SCHEDULER_CLEANUP_INTERVAL_MINUTES,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    return scheduler
