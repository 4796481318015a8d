from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    SHOPIFY_STORE_URL: str
    SHOPIFY_ACCESS_TOKEN: str
    SHOPIFY_API_VERSION: str = "2024-07"
    SHOPIFY_WEBHOOK_SECRET: str

    # Public URL of this service, used when registering webhooks
    PUBLIC_BASE_URL: str | None = None

    # Catalog store pacing
    RATE_LIMIT_MIN_INTERVAL: float = 0.5
    RATE_LIMIT_MAX_ATTEMPTS: int = 5
    RATE_LIMIT_BACKOFF_BASE: float = 1.0
    RATE_LIMIT_MAX_BACKOFF: float = 30.0
    REQUEST_TIMEOUT: float = 45.0

    # Webhook-triggered processing
    QUEUE_MAXSIZE: int = 500
    QUEUE_JOB_RETRIES: int = 3
    QUEUE_RETRY_DELAY: float = 2.0

    DUPLICATE_DELETE_DELAY: float = 0.5

    ENABLE_SCHEDULER: bool = False
    SCHEDULER_PRODUCTS_INTERVAL_MINUTES: int = 360
    SCHEDULER_CLEANUP_INTERVAL_MINUTES: int = 1440

    CORS_ALLOW_ORIGIN_REGEX: str = r"https://([a-z0-9-]+\.myshopify\.com|cdn\.shopify\.com)|http://localhost:\d+"

    class Config:
        env_file = ".env"

settings = Settings()
