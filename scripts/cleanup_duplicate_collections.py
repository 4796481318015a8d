import asyncio, sys, os

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(ROOT)

from shop_by_specs.services.duplicate_cleanup import cleanup_duplicate_collections

async def main():
    print("=== DELETE DUPLICATE COLLECTIONS ===")
    result = await cleanup_duplicate_collections()
    print(result)

if __name__ == "__main__":
    asyncio.run(main())
