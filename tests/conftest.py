import os
import sys
from decimal import Decimal

import pytest
import pytest_asyncio
from tortoise import Tortoise, connections

# Add app to path
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from app.core.db import MODELS_MODULES
from app.models.menu import InventoryType, MenuItem


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory SQLite database per test."""
    await Tortoise.init(db_url="sqlite://:memory:", modules={"models": MODELS_MODULES})
    await Tortoise.generate_schemas()
    yield
    await connections.close_all()


@pytest.fixture
def make_item(db):
    """Factory for menu items stored straight in the database."""
    async def _make(name="Chicken Biryani", price="12.50", tracked=True, stock=10, alert=5, **overrides):
        fields = {
            "name": name,
            "price": Decimal(price),
            "inventory_type": InventoryType.TRACKED if tracked else InventoryType.UNLIMITED,
            "stock_quantity": stock if tracked else None,
            "initial_stock": stock if tracked else None,
            "low_stock_alert": alert if tracked else None,
            "auto_mark_unavailable": True,
            "is_available": True,
        }
        fields.update(overrides)
        return await MenuItem.create(**fields)
    return _make
