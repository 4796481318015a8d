class ShopifyError(Exception):
    """Base class for failures talking to the catalog store."""


class NotFoundError(ShopifyError):
    """The requested product or collection does not exist."""


class RetryableError(ShopifyError):
    """Failures the rate limiter retries with backoff."""

    def __init__(self, message: str, retry_after: float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class RateLimitedError(RetryableError):
    pass


class ThrottledError(RetryableError):
    pass


class TransientNetworkError(RetryableError):
    pass


class UpstreamValidationError(ShopifyError):
    """The store rejected a mutation (conflicting handle, invalid rule...)."""

    def __init__(self, message: str, errors=None):
        super().__init__(message)
        self.errors = errors


class MalformedResponseError(ShopifyError):
    """A response was missing the fields we expected."""


class SignatureMismatchError(Exception):
    pass


class QueueFullError(Exception):
    pass
