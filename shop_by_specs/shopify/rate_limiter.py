import asyncio
import logging
import time

from shop_by_specs.errors import RetryableError

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Paces calls to the store and retries throttled / transient failures.

    Owned by one ShopifyClient. Calls are spaced at least `min_interval`
    seconds apart; a RetryableError is retried with exponential backoff
    (or the server's Retry-After) up to `max_attempts` total attempts.
    """

    def __init__(
        self,
        min_interval: float = 0.5,
        max_attempts: int = 5,
        backoff_base: float = 1.0,
        max_backoff: float = 30.0,
        sleep=asyncio.sleep,
        clock=time.monotonic,
    ):
        self.min_interval = min_interval
        self.max_attempts = max(1, max_attempts)
        self.backoff_base = backoff_base
        self.max_backoff = max_backoff
        self._sleep = sleep
        self._clock = clock
        self._last_request_at: float | None = None
        # Held across check, sleep and stamp so concurrent callers queue up
        self._lock = asyncio.Lock()

    async def wait(self) -> None:
        async with self._lock:
            if self._last_request_at is not None:
                remaining = self.min_interval - (self._clock() - self._last_request_at)
                if remaining > 0:
                    await self._sleep(remaining)
            self._last_request_at = self._clock()

    def backoff_delay(self, attempt: int, retry_after: float | None = None) -> float:
        if retry_after:
            return min(float(retry_after), self.max_backoff)
        return min(self.backoff_base * (2 ** attempt), self.max_backoff)

    async def run(self, func, description: str = "request"):
        for attempt in range(self.max_attempts):
            await self.wait()
            try:
                return await func()
            except RetryableError as e:
                if attempt >= self.max_attempts - 1:
                    logger.error(f"{description} failed after {self.max_attempts} attempts: {e}")
                    raise
                delay = self.backoff_delay(attempt, e.retry_after)
                logger.warning(
                    f"{description} attempt {attempt + 1}/{self.max_attempts} failed "
                    f"({type(e).__name__}: {e}); retrying in {delay:.1f}s"
                )
                await self._sleep(delay)
