from decimal import Decimal
from typing import Any, Dict, Optional

from app.core.config import DEFAULT_HISTORY_LIMIT, DEFAULT_LOW_STOCK_ALERT
from app.core.exceptions import ItemNotFound, ValidationError
from app.models.menu import InventoryType, MenuItem
from app.repositories import stock_repository
from app.services import stock_validators
from app.services.stock_query_service import page_meta


async def create_menu_item(
    name: str,
    price: Decimal,
    inventory_type: InventoryType = InventoryType.UNLIMITED,
    stock_quantity: Optional[int] = None,
    low_stock_alert: Optional[int] = None,
    auto_mark_unavailable: bool = True,
    is_available: bool = True,
) -> MenuItem:
    """
    Creates a menu item. TRACKED items take `stock_quantity` as their initial
    baseline; UNLIMITED items carry no stock fields at all.
    """
    if inventory_type == InventoryType.TRACKED:
        if stock_quantity is not None and stock_quantity < 0:
            raise ValidationError("Stock quantity must be 0 or greater")
        stock = stock_quantity or 0
        return await MenuItem.create(
            name=name,
            price=price,
            inventory_type=inventory_type,
            stock_quantity=stock,
            initial_stock=stock,
            low_stock_alert=low_stock_alert if low_stock_alert is not None else DEFAULT_LOW_STOCK_ALERT,
            auto_mark_unavailable=auto_mark_unavailable,
            is_available=is_available,
        )

    return await MenuItem.create(
        name=name,
        price=price,
        inventory_type=InventoryType.UNLIMITED,
        auto_mark_unavailable=auto_mark_unavailable,
        is_available=is_available,
    )


async def get_menu_item(item_id: int) -> MenuItem:
    item = await stock_repository.get_active_item(item_id)
    if item is None:
        raise ItemNotFound(item_id)
    return item


async def list_menu_items(
    page: int = 1,
    limit: int = DEFAULT_HISTORY_LIMIT,
    search: Optional[str] = None,
) -> Dict[str, Any]:
    """Active menu items by name, one page at a time. `search` matches names case-insensitively."""
    stock_validators.validate_pagination(page, limit)

    search = search.strip() if search else None
    rows, total = await stock_repository.find_menu_items(page, limit, search)
    return {"data": rows, "meta": page_meta(total, page, limit)}


async def soft_delete_menu_item(item_id: int) -> MenuItem:
    """Hides the item; its stock ledger stays in place."""
    item = await get_menu_item(item_id)
    item.deleted = True
    item.is_available = False
    await item.save(update_fields=["deleted", "is_available", "updated_at"])
    return item
