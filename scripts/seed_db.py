#!/usr/bin/env python3
# =============================================================================
# scripts/seed_db.py - Seed the Database
# =============================================================================
# Inserts a handful of sample products (and optionally a farm that owns some
# of them) through the same DocumentStore the app uses.
#
# Usage:
#   python scripts/seed_db.py
#   python scripts/seed_db.py --with-farm
#
# Prerequisites:
#   - MongoDB must be running (or STORE_BACKEND=memory for a dry run)
#   - Environment variables may be set in .env (see app/config.py)
# =============================================================================

import argparse
import asyncio
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from app.config import settings
from app.main import create_store
from core.models import FarmCreate, ProductCreate

logger = logging.getLogger("seed_db")

SEED_PRODUCTS = [
    {"name": "Fairy Eggplant", "price": 1.00, "category": "vegetables"},
    {"name": "Organic Goddess Melon", "price": 4.99, "category": "fruit"},
    {"name": "Organic Mini Seedless Watermelon", "price": 3.99, "category": "fruit"},
    {"name": "Organic Celery", "price": 1.50, "category": "vegetables"},
    {"name": "Chocolate Whole Milk", "price": 2.69, "category": "dairy"},
]

SEED_FARM = {"name": "Full Belly Farms", "city": "Guinda, CA", "email": "fullbelly@example.com"}

SEED_FARM_PRODUCTS = [
    {"name": "Sugar Snap Peas", "price": 3.25, "category": "vegetables"},
    {"name": "Heirloom Tomatoes", "price": 4.50, "category": "vegetables"},
]


async def seed(with_farm: bool) -> None:
    store = create_store(settings)
    await store.connect()
    try:
        for fields in SEED_PRODUCTS:
            product = await store.insert_product(ProductCreate(**fields))
            logger.info(f"Inserted product {product.id}: {product.name}")

        if with_farm:
            farm = await store.insert_farm(FarmCreate(**SEED_FARM))
            logger.info(f"Inserted farm {farm.id}: {farm.name}")
            for fields in SEED_FARM_PRODUCTS:
                product = await store.add_product_to_farm(farm.id, ProductCreate(**fields))
                logger.info(f"Linked product {product.id}: {product.name}")
    finally:
        await store.close()


def main():
    """Seed the configured database."""
    parser = argparse.ArgumentParser(description="Seed the Farm Stand database")
    parser.add_argument(
        "--with-farm",
        action="store_true",
        help="Also create a farm that owns a few products",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    print("=" * 60)
    print(f"Seeding {settings.STORE_BACKEND} store ({settings.MONGO_DB})")
    print("=" * 60)

    asyncio.run(seed(with_farm=args.with_farm))
    print("Done.")


if __name__ == "__main__":
    main()
