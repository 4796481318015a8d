import asyncio, sys, os

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(ROOT)

from shop_by_specs.services.collection_generator import process_all_existing_products

async def main():
    limit = int(sys.argv[1]) if len(sys.argv) > 1 else None
    print("=== PROCESS EXISTING PRODUCTS ===")
    result = await process_all_existing_products(limit=limit)
    print(result)

if __name__ == "__main__":
    asyncio.run(main())
