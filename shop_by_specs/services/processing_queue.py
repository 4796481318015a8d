import asyncio
import logging

from shop_by_specs.config import settings
from shop_by_specs.errors import QueueFullError
from shop_by_specs.services.collection_generator import process_product

logger = logging.getLogger(__name__)


class ProductProcessingQueue:
    """
    Bounded queue with a single worker for webhook-triggered product jobs.

    A burst of product/create events is processed one product at a time.
    Each job is retried up to `max_retries` times, `retry_delay` seconds
    apart, before it is logged and dropped.
    """

    def __init__(self, processor, maxsize: int = 500, max_retries: int = 3, retry_delay: float = 2.0):
        self.processor = processor
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._worker: asyncio.Task | None = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def enqueue(self, product_id) -> None:
        try:
            self._queue.put_nowait(product_id)
        except asyncio.QueueFull as e:
            raise QueueFullError(f"Processing queue is full ({self._queue.maxsize} jobs)") from e
        logger.info(f"Queued product {product_id} ({self.pending} pending)")

    def start(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None

    async def join(self) -> None:
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            product_id = await self._queue.get()
            try:
                await self._process_with_retries(product_id)
            finally:
                self._queue.task_done()

    async def _process_with_retries(self, product_id) -> bool:
        attempts = self.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                await self.processor(product_id)
                return True
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if attempt >= attempts:
                    logger.error(f"Giving up on product {product_id} after {attempts} attempts: {e}")
                    return False
                logger.warning(f"Processing product {product_id} failed (attempt {attempt}/{attempts}): {e}; retrying in {self.retry_delay}s")
                await asyncio.sleep(self.retry_delay)
        return False


processing_queue = ProductProcessingQueue(
    process_product,
    maxsize=settings.QUEUE_MAXSIZE,
    max_retries=settings.QUEUE_JOB_RETRIES,
    retry_delay=settings.QUEUE_RETRY_DELAY,
)
