"""
Ledger store: the only place that reads and writes menu item stock rows and
stock adjustment records.

Mutating helpers take the connection of an already open transaction. The
caller owns the transaction boundary, so the item update and the ledger
insert of one logical operation always commit or roll back together.
"""
from typing import Any, Dict, List, Optional, Tuple

from app.models.menu import InventoryType, MenuItem
from app.models.stock import StockAdjustment, StockAdjustmentType


async def lock_item_for_update(conn: Any, item_id: int) -> Optional[MenuItem]:
    """
    Reads a non-deleted menu item and holds a row lock on it until `conn`
    commits or rolls back. Concurrent transactions asking for the same row
    wait here instead of reading a stale stock value.
    """
    return await (
        MenuItem.filter(id=item_id, deleted=False)
        .using_db(conn)
        .select_for_update()
        .first()
    )


async def apply_item_mutation(conn: Any, item: MenuItem, changes: Dict[str, Any]) -> MenuItem:
    """Writes only the supplied fields (plus updated_at) of a locked item."""
    for field_name, value in changes.items():
        setattr(item, field_name, value)
    await item.save(using_db=conn, update_fields=[*changes.keys(), "updated_at"])
    return item


async def append_adjustment(
    conn: Any,
    item: MenuItem,
    adjustment_type: StockAdjustmentType,
    previous_stock: int,
    new_stock: int,
    quantity: int,
    reason: Optional[str] = None,
    user_id: Optional[str] = None,
    order_id: Optional[str] = None,
) -> StockAdjustment:
    """Inserts one immutable ledger row inside the caller's transaction."""
    return await StockAdjustment.create(
        menu_item=item,
        adjustment_type=adjustment_type,
        previous_stock=previous_stock,
        new_stock=new_stock,
        quantity=quantity,
        reason=reason,
        user_id=user_id,
        order_id=order_id,
        using_db=conn,
    )


# ----------- Read side (no locks) -----------

async def get_active_item(item_id: int) -> Optional[MenuItem]:
    return await MenuItem.get_or_none(id=item_id, deleted=False)


async def find_tracked_items(**filters) -> List[MenuItem]:
    return await MenuItem.filter(
        inventory_type=InventoryType.TRACKED,
        deleted=False,
        **filters,
    ).order_by("name", "id")


async def find_history(item_id: int, page: int, limit: int) -> Tuple[List[StockAdjustment], int]:
    """Returns one page of an item's adjustments (newest first) and the total row count."""
    query = StockAdjustment.filter(menu_item_id=item_id)
    rows = await (
        query.select_related("menu_item").order_by("-created_at").offset((page - 1) * limit).limit(limit)
    )
    total = await query.count()
    return rows, total


async def find_menu_items(page: int, limit: int, search: Optional[str] = None) -> Tuple[List[MenuItem], int]:
    """One page of active menu items ordered by name, optionally matching `search` case-insensitively."""
    query = MenuItem.filter(deleted=False)
    if search:
        query = query.filter(name__icontains=search)
    rows = await query.order_by("name", "id").offset((page - 1) * limit).limit(limit)
    total = await query.count()
    return rows, total
