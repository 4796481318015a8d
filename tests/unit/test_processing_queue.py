import pytest

from shop_by_specs.errors import QueueFullError
from shop_by_specs.services.processing_queue import ProductProcessingQueue


@pytest.mark.asyncio
async def test_job_is_retried_until_it_succeeds():
    attempts = []

    async def processor(product_id):
        attempts.append(product_id)
        if len(attempts) < 3:
            raise RuntimeError("store unavailable")

    queue = ProductProcessingQueue(processor, max_retries=3, retry_delay=0)
    queue.start()
    queue.enqueue("1")
    await queue.join()
    await queue.stop()

    assert attempts == ["1", "1", "1"]


@pytest.mark.asyncio
async def test_job_is_dropped_after_retries_and_worker_keeps_going():
    seen = []

    async def processor(product_id):
        seen.append(product_id)
        if product_id == "bad":
            raise RuntimeError("always fails")

    queue = ProductProcessingQueue(processor, max_retries=2, retry_delay=0)
    queue.start()
    queue.enqueue("bad")
    queue.enqueue("good")
    await queue.join()
    await queue.stop()

    assert seen == ["bad", "bad", "bad", "good"]


@pytest.mark.asyncio
async def test_full_queue_rejects_new_jobs():
    async def processor(product_id):
        return None

    queue = ProductProcessingQueue(processor, maxsize=1)
    queue.enqueue("1")

    with pytest.raises(QueueFullError):
        queue.enqueue("2")
    assert queue.pending == 1
