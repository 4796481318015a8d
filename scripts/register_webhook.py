import asyncio, sys, os

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(ROOT)

from shop_by_specs.config import settings
from shop_by_specs.shopify.webhooks import register_product_creation_webhook

async def main():
    base_url = sys.argv[1] if len(sys.argv) > 1 else settings.PUBLIC_BASE_URL
    if not base_url:
        print("Usage: python scripts/register_webhook.py https://your-app.example.com")
        sys.exit(1)

    webhook_url = f"{base_url.rstrip('/')}/webhooks/products/create"
    print(f"Registering products/create webhook -> {webhook_url}")
    webhook = await register_product_creation_webhook(webhook_url)
    print("Registered:", webhook)

if __name__ == "__main__":
    asyncio.run(main())
