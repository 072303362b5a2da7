# scripts/seed_data.py
import asyncio
import logging
from decimal import Decimal

from app.core.config import LOG_FORMAT
from app.core.db import init_db, close_db
from app.models.menu import InventoryType, MenuItem
from app.services.stock_service import daily_stock_reset

log = logging.getLogger("seed")

DEMO_ITEMS = [
    # name, price, inventory type, starting stock
    ("Paneer Wrap", "149.00", InventoryType.TRACKED, 50),
    ("Chili Paneer Rice", "199.00", InventoryType.TRACKED, 30),
    ("Cold Drink", "49.00", InventoryType.UNLIMITED, None),
]


async def seed():
    reset_batch = []
    for name, price, inventory_type, stock in DEMO_ITEMS:
        item, created = await MenuItem.get_or_create(
            name=name,
            deleted=False,
            defaults={"price": Decimal(price), "inventory_type": inventory_type},
        )
        log.info(f"Menu item {item.id} '{item.name}' {'created' if created else 'exists'}")
        if inventory_type == InventoryType.TRACKED:
            reset_batch.append({"item_id": item.id, "quantity": stock, "low_stock_alert": 5})

    # Starting stock goes through the daily reset so the ledger records it
    await daily_stock_reset(reset_batch, user_id="seed")
    log.info("Stock seeded.")


async def main():
    await init_db()
    try:
        await seed()
    finally:
        await close_db()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    asyncio.run(main())
