"""
Pure inventory rules. Nothing in here touches the database: the stock
service locks the row, asks these functions what the new state should be,
and persists the answer.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from app.core.config import DEFAULT_LOW_STOCK_ALERT
from app.core.exceptions import InsufficientStock, InvalidInventoryType
from app.models.menu import InventoryType, MenuItem
from app.models.stock import StockAdjustmentType


@dataclass
class StockChange:
    """The outcome of applying a signed delta to an item's stock."""
    previous_stock: int
    new_stock: int
    quantity: int
    adjustment_type: StockAdjustmentType
    item_changes: Dict[str, Any] = field(default_factory=dict)


def compute_new_stock(previous_stock: Optional[int], quantity: int) -> int:
    # Null stock counts as zero
    return (previous_stock or 0) + quantity


def should_auto_block(item: MenuItem, new_stock: int) -> bool:
    return bool(item.auto_mark_unavailable) and new_stock <= 0


def availability_after_decrease(item: MenuItem, new_stock: int) -> bool:
    """A decrease may switch ordering off, never back on."""
    if should_auto_block(item, new_stock):
        return False
    return item.is_available


def require_tracked(item: MenuItem, action: str) -> None:
    if item.inventory_type != InventoryType.TRACKED:
        raise InvalidInventoryType(f"Cannot {action} UNLIMITED item {item.id}")


def require_available_stock(item: MenuItem, quantity: int) -> int:
    current = item.stock_quantity or 0
    if quantity > current:
        raise InsufficientStock(item.id, current, quantity)
    return current


def plan_daily_reset(item: MenuItem, quantity: int, low_stock_alert: Optional[int] = None) -> StockChange:
    """
    A reset starts a fresh day: the ledger row always records a previous
    stock of 0, whatever the item held before.
    """
    if item.inventory_type != InventoryType.TRACKED:
        raise InvalidInventoryType("Only TRACKED items can have stock reset")
    return StockChange(
        previous_stock=0,
        new_stock=quantity,
        quantity=quantity,
        adjustment_type=StockAdjustmentType.DAILY_RESET,
        item_changes={
            "stock_quantity": quantity,
            "initial_stock": quantity,
            "low_stock_alert": low_stock_alert if low_stock_alert is not None else item.low_stock_alert,
            "is_available": True,
        },
    )


def plan_manual_add(item: MenuItem, quantity: int) -> StockChange:
    require_tracked(item, "add stock to")
    previous = item.stock_quantity or 0
    new_stock = compute_new_stock(previous, quantity)
    return StockChange(
        previous_stock=previous,
        new_stock=new_stock,
        quantity=quantity,
        adjustment_type=StockAdjustmentType.MANUAL_ADD,
        # Replenishing always re-enables ordering
        item_changes={"stock_quantity": new_stock, "is_available": True},
    )


def plan_manual_remove(item: MenuItem, quantity: int) -> StockChange:
    require_tracked(item, "remove stock from")
    previous = require_available_stock(item, quantity)
    new_stock = compute_new_stock(previous, -quantity)
    return StockChange(
        previous_stock=previous,
        new_stock=new_stock,
        quantity=-quantity,
        adjustment_type=StockAdjustmentType.MANUAL_REMOVE,
        item_changes={
            "stock_quantity": new_stock,
            "is_available": item.is_available if new_stock > 0 else False,
        },
    )


def plan_order_deduct(item: MenuItem, quantity: int) -> StockChange:
    previous = require_available_stock(item, quantity)
    new_stock = compute_new_stock(previous, -quantity)
    return StockChange(
        previous_stock=previous,
        new_stock=new_stock,
        quantity=-quantity,
        adjustment_type=StockAdjustmentType.ORDER_DEDUCT,
        item_changes={
            "stock_quantity": new_stock,
            "is_available": availability_after_decrease(item, new_stock),
        },
    )


def plan_order_revert(item: MenuItem, quantity: int) -> StockChange:
    # No upper bound: a revert may lift stock above the day's baseline
    previous = item.stock_quantity or 0
    new_stock = compute_new_stock(previous, quantity)
    return StockChange(
        previous_stock=previous,
        new_stock=new_stock,
        quantity=quantity,
        adjustment_type=StockAdjustmentType.ORDER_CANCELLED,
        item_changes={"stock_quantity": new_stock},
    )


def plan_inventory_type_change(
    item: MenuItem,
    new_type: InventoryType,
    low_stock_alert: Optional[int] = None,
) -> Dict[str, Any]:
    """Field changes for an inventory type switch. Configuration only, never a ledger event."""
    previous_type = item.inventory_type
    changes: Dict[str, Any] = {"inventory_type": new_type}

    if previous_type == InventoryType.TRACKED and new_type == InventoryType.UNLIMITED:
        changes.update(stock_quantity=None, initial_stock=None, low_stock_alert=None)
    elif previous_type == InventoryType.UNLIMITED and new_type == InventoryType.TRACKED:
        changes.update(
            stock_quantity=0,
            initial_stock=0,
            low_stock_alert=low_stock_alert if low_stock_alert is not None else DEFAULT_LOW_STOCK_ALERT,
            auto_mark_unavailable=True,
        )
    elif new_type == InventoryType.TRACKED and low_stock_alert is not None:
        changes["low_stock_alert"] = low_stock_alert

    return changes
