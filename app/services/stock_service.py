"""
Stock mutations for menu items.

Every operation runs its "lock row -> check rules -> write item -> append
ledger row" sequence inside one transaction. Pass `conn` to join a
transaction the caller already opened (the order service does this so that
order rows and stock deductions commit together); without it a new
transaction is opened and committed here.
"""
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from tortoise.exceptions import OperationalError, TransactionManagementError
from tortoise.transactions import in_transaction

from app.core.config import DAILY_RESET_REASON
from app.core.exceptions import ItemNotFound, PersistenceFailure
from app.models.menu import InventoryType, MenuItem
from app.repositories import stock_repository
from app.services import inventory_policy, stock_validators
from app.services.inventory_policy import StockChange

log = logging.getLogger(__name__)


@asynccontextmanager
async def unit_of_work(conn: Any = None):
    """
    Yields `conn` untouched when the caller owns the transaction, otherwise
    opens one. Database failures surface as PersistenceFailure after the
    rollback; business errors pass through as raised.
    """
    if conn is not None:
        yield conn
        return
    try:
        async with in_transaction() as tx:
            yield tx
    except (OperationalError, TransactionManagementError) as exc:
        log.exception("Stock transaction rolled back")
        raise PersistenceFailure(f"Stock transaction failed: {exc}") from exc


async def _lock_or_fail(conn: Any, item_id: int) -> MenuItem:
    item = await stock_repository.lock_item_for_update(conn, item_id)
    if item is None:
        raise ItemNotFound(item_id)
    return item


async def _commit_change(
    conn: Any,
    item: MenuItem,
    change: StockChange,
    reason: Optional[str] = None,
    user_id: Optional[str] = None,
    order_id: Optional[str] = None,
) -> MenuItem:
    """Persists the item fields and the matching ledger row on the same connection."""
    item = await stock_repository.apply_item_mutation(conn, item, change.item_changes)
    await stock_repository.append_adjustment(
        conn,
        item,
        adjustment_type=change.adjustment_type,
        previous_stock=change.previous_stock,
        new_stock=change.new_stock,
        quantity=change.quantity,
        reason=reason,
        user_id=user_id,
        order_id=order_id,
    )
    log.info(
        f"{change.adjustment_type.value}: item {item.id} stock {change.previous_stock} -> {change.new_stock}"
        f" (available={item.is_available})"
    )
    return item


async def daily_stock_reset(
    items: List[Dict[str, Any]],
    user_id: Optional[str] = None,
    conn: Any = None,
) -> List[MenuItem]:
    """
    Sets the starting stock of each TRACKED item for a new business day.
    All-or-nothing: one missing or UNLIMITED item aborts the whole batch.
    Rows are locked in the order given.
    """
    stock_validators.validate_daily_reset(items)

    updated = []
    async with unit_of_work(conn) as tx:
        for entry in items:
            item = await _lock_or_fail(tx, entry["item_id"])
            change = inventory_policy.plan_daily_reset(item, entry["quantity"], entry.get("low_stock_alert"))
            updated.append(
                await _commit_change(tx, item, change, reason=DAILY_RESET_REASON, user_id=user_id)
            )
    return updated


async def add_stock(
    item_id: int,
    quantity: int,
    reason: str,
    user_id: Optional[str] = None,
    conn: Any = None,
) -> MenuItem:
    stock_validators.validate_positive_quantity(quantity)
    stock_validators.validate_reason(reason)

    async with unit_of_work(conn) as tx:
        item = await _lock_or_fail(tx, item_id)
        change = inventory_policy.plan_manual_add(item, quantity)
        return await _commit_change(tx, item, change, reason=reason, user_id=user_id)


async def remove_stock(
    item_id: int,
    quantity: int,
    reason: Optional[str],
    user_id: Optional[str] = None,
    conn: Any = None,
) -> MenuItem:
    """Manual removal (waste, spoilage). Reaching zero always blocks ordering."""
    stock_validators.validate_positive_quantity(quantity)
    stock_validators.validate_reason(reason)

    async with unit_of_work(conn) as tx:
        item = await _lock_or_fail(tx, item_id)
        change = inventory_policy.plan_manual_remove(item, quantity)
        return await _commit_change(tx, item, change, reason=reason, user_id=user_id)


async def deduct_stock_for_order(
    item_id: int,
    quantity: int,
    order_id: str,
    conn: Any = None,
) -> Optional[MenuItem]:
    """
    Called when an order is confirmed. Missing and UNLIMITED items are skipped
    (returns None, no ledger row). Raises InsufficientStock when the order asks
    for more than remains; the caller must abort the order.
    """
    stock_validators.validate_positive_quantity(quantity)

    async with unit_of_work(conn) as tx:
        item = await stock_repository.lock_item_for_update(tx, item_id)
        if item is None or not item.is_tracked:
            return None
        change = inventory_policy.plan_order_deduct(item, quantity)
        return await _commit_change(tx, item, change, reason=f"Order {order_id}", order_id=str(order_id))


async def revert_stock_for_order(
    item_id: int,
    quantity: int,
    order_id: str,
    conn: Any = None,
) -> Optional[MenuItem]:
    """Called when an order is cancelled. Same skip rule as deduct_stock_for_order."""
    stock_validators.validate_positive_quantity(quantity)

    async with unit_of_work(conn) as tx:
        item = await stock_repository.lock_item_for_update(tx, item_id)
        if item is None or not item.is_tracked:
            return None
        change = inventory_policy.plan_order_revert(item, quantity)
        return await _commit_change(
            tx, item, change, reason=f"Order {order_id} cancelled", order_id=str(order_id)
        )


async def set_inventory_type(
    item_id: int,
    inventory_type: Any,
    low_stock_alert: Optional[int] = None,
    conn: Any = None,
) -> MenuItem:
    """Switches TRACKED/UNLIMITED or updates the alert threshold. Never writes a ledger row."""
    new_type = stock_validators.validate_inventory_type(inventory_type, low_stock_alert)

    async with unit_of_work(conn) as tx:
        item = await _lock_or_fail(tx, item_id)
        previous_type = InventoryType(item.inventory_type)
        changes = inventory_policy.plan_inventory_type_change(item, new_type, low_stock_alert)
        item = await stock_repository.apply_item_mutation(tx, item, changes)
        log.info(f"Inventory type of item {item.id}: {previous_type.value} -> {new_type.value}")
        return item
