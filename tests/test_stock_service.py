import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from tortoise.exceptions import OperationalError
from tortoise.transactions import in_transaction

from app.core.exceptions import (
    AdjustmentImmutable,
    InsufficientStock,
    InvalidInventoryType,
    ItemNotFound,
    PersistenceFailure,
    ValidationError,
)
from app.models.menu import InventoryType, MenuItem
from app.models.stock import StockAdjustment, StockAdjustmentType
from app.services import stock_service


async def _ledger(item_id):
    return await StockAdjustment.filter(menu_item_id=item_id).order_by("created_at")


async def _reload(item):
    return await MenuItem.get(id=item.id)


# --- Scenarios ---

@pytest.mark.asyncio
async def test_remove_all_stock_blocks_item(make_item):
    item = await make_item(stock=10, alert=5)

    updated = await stock_service.remove_stock(item.id, 10, "waste", user_id="chef-1")

    assert updated.stock_quantity == 0
    assert updated.is_available is False
    stored = await _reload(item)
    assert stored.stock_quantity == 0
    assert stored.is_available is False

    [row] = await _ledger(item.id)
    assert row.adjustment_type == StockAdjustmentType.MANUAL_REMOVE
    assert (row.previous_stock, row.new_stock, row.quantity) == (10, 0, -10)
    assert row.reason == "waste"
    assert row.user_id == "chef-1"


@pytest.mark.asyncio
async def test_remove_more_than_available_changes_nothing(make_item):
    item = await make_item(stock=3)

    with pytest.raises(InsufficientStock):
        await stock_service.remove_stock(item.id, 5, "spilled")

    assert (await _reload(item)).stock_quantity == 3
    assert await _ledger(item.id) == []


@pytest.mark.asyncio
async def test_daily_reset_sets_baseline_for_batch(make_item):
    first = await make_item(name="Dal Makhani", stock=4, alert=2)
    second = await make_item(name="Jeera Rice", stock=9, alert=3, is_available=False)

    await stock_service.daily_stock_reset(
        [
            {"item_id": first.id, "quantity": 20, "low_stock_alert": 5},
            {"item_id": second.id, "quantity": 0},
        ],
        user_id="manager",
    )

    first, second = await _reload(first), await _reload(second)
    assert (first.stock_quantity, first.initial_stock, first.low_stock_alert) == (20, 20, 5)
    assert first.is_available is True
    assert (second.stock_quantity, second.initial_stock, second.low_stock_alert) == (0, 0, 3)
    assert second.is_available is True

    rows = await StockAdjustment.filter(adjustment_type=StockAdjustmentType.DAILY_RESET)
    assert len(rows) == 2
    assert all(row.previous_stock == 0 for row in rows)
    assert {row.new_stock for row in rows} == {20, 0}
    assert all(row.reason == "Begin of the day" for row in rows)


@pytest.mark.asyncio
async def test_switch_to_unlimited_then_deduct_is_noop(make_item):
    item = await make_item(stock=8)

    updated = await stock_service.set_inventory_type(item.id, "UNLIMITED")

    assert updated.inventory_type == InventoryType.UNLIMITED
    stored = await _reload(item)
    assert stored.stock_quantity is None
    assert stored.initial_stock is None
    assert stored.low_stock_alert is None

    result = await stock_service.deduct_stock_for_order(item.id, 1, "o1")

    assert result is None
    assert await _ledger(item.id) == []
    assert (await _reload(item)).stock_quantity is None


@pytest.mark.asyncio
async def test_add_stock_replenishes_and_re_enables(make_item):
    item = await make_item(stock=0, is_available=False)

    updated = await stock_service.add_stock(item.id, 4, "restock")

    assert updated.stock_quantity == 4
    assert updated.is_available is True
    [row] = await _ledger(item.id)
    assert row.adjustment_type == StockAdjustmentType.MANUAL_ADD
    assert (row.previous_stock, row.new_stock, row.quantity) == (0, 4, 4)


# --- Business rules ---

@pytest.mark.asyncio
async def test_daily_reset_is_all_or_nothing(make_item):
    tracked = await make_item(name="Paneer Tikka", stock=2)
    unlimited = await make_item(name="Masala Chai", tracked=False)

    with pytest.raises(InvalidInventoryType):
        await stock_service.daily_stock_reset([
            {"item_id": tracked.id, "quantity": 30},
            {"item_id": unlimited.id, "quantity": 10},
        ])

    assert (await _reload(tracked)).stock_quantity == 2
    assert await StockAdjustment.all().count() == 0


@pytest.mark.asyncio
async def test_daily_reset_applies_repeated_item_in_order(make_item):
    item = await make_item(stock=4)

    await stock_service.daily_stock_reset([
        {"item_id": item.id, "quantity": 10},
        {"item_id": item.id, "quantity": 12},
    ])

    stored = await _reload(item)
    assert (stored.stock_quantity, stored.initial_stock) == (12, 12)
    rows = await _ledger(item.id)
    assert [row.adjustment_type for row in rows] == [StockAdjustmentType.DAILY_RESET] * 2
    assert sorted(row.new_stock for row in rows) == [10, 12]


@pytest.mark.asyncio
async def test_daily_reset_fails_on_missing_item(make_item):
    tracked = await make_item(stock=2)

    with pytest.raises(ItemNotFound):
        await stock_service.daily_stock_reset([
            {"item_id": tracked.id, "quantity": 30},
            {"item_id": 9999, "quantity": 10},
        ])

    assert (await _reload(tracked)).stock_quantity == 2


@pytest.mark.asyncio
async def test_add_stock_rejects_unlimited_item(make_item):
    item = await make_item(tracked=False)
    with pytest.raises(InvalidInventoryType):
        await stock_service.add_stock(item.id, 3, "restock")


@pytest.mark.asyncio
async def test_soft_deleted_item_is_not_found(make_item):
    item = await make_item(deleted=True)
    with pytest.raises(ItemNotFound):
        await stock_service.add_stock(item.id, 3, "restock")


@pytest.mark.asyncio
async def test_invalid_input_rejected_before_lookup(db):
    with pytest.raises(ValidationError):
        await stock_service.add_stock(9999, 0, "restock")
    with pytest.raises(ValidationError):
        await stock_service.add_stock(9999, 2, "no")


@pytest.mark.asyncio
async def test_partial_remove_keeps_availability(make_item):
    item = await make_item(stock=6)
    updated = await stock_service.remove_stock(item.id, 2, "dropped tray")
    assert updated.stock_quantity == 4
    assert updated.is_available is True


@pytest.mark.asyncio
async def test_order_deduct_and_revert_write_ledger(make_item):
    item = await make_item(stock=2)

    deducted = await stock_service.deduct_stock_for_order(item.id, 2, "order-42")
    assert deducted.stock_quantity == 0
    assert deducted.is_available is False

    reverted = await stock_service.revert_stock_for_order(item.id, 2, "order-42")
    assert reverted.stock_quantity == 2
    # A revert does not switch ordering back on by itself
    assert reverted.is_available is False

    deduct_row, revert_row = await _ledger(item.id)
    assert deduct_row.adjustment_type == StockAdjustmentType.ORDER_DEDUCT
    assert deduct_row.reason == "Order order-42"
    assert deduct_row.order_id == "order-42"
    assert revert_row.adjustment_type == StockAdjustmentType.ORDER_CANCELLED
    assert revert_row.reason == "Order order-42 cancelled"


@pytest.mark.asyncio
async def test_order_deduct_insufficient_stock(make_item):
    item = await make_item(stock=1)
    with pytest.raises(InsufficientStock):
        await stock_service.deduct_stock_for_order(item.id, 2, "order-7")
    assert await _ledger(item.id) == []


@pytest.mark.asyncio
async def test_order_hooks_skip_missing_items(db):
    assert await stock_service.deduct_stock_for_order(12345, 1, "o1") is None
    assert await stock_service.revert_stock_for_order(12345, 1, "o1") is None


@pytest.mark.asyncio
async def test_set_inventory_type_to_tracked_starts_empty(make_item):
    item = await make_item(tracked=False, auto_mark_unavailable=False)

    updated = await stock_service.set_inventory_type(item.id, InventoryType.TRACKED)

    assert updated.stock_quantity == 0
    assert updated.initial_stock == 0
    assert updated.low_stock_alert == 5
    assert updated.auto_mark_unavailable is True
    assert await _ledger(item.id) == []


@pytest.mark.asyncio
async def test_set_inventory_type_updates_alert_only(make_item):
    item = await make_item(stock=7, alert=5)

    updated = await stock_service.set_inventory_type(item.id, "TRACKED", low_stock_alert=2)

    assert (updated.stock_quantity, updated.low_stock_alert) == (7, 2)
    assert await _ledger(item.id) == []


# --- Ledger and transaction properties ---

@pytest.mark.asyncio
async def test_every_change_has_one_consistent_ledger_row(make_item):
    item = await make_item(stock=5)

    await stock_service.add_stock(item.id, 3, "extra batch")
    await stock_service.remove_stock(item.id, 4, "burnt")
    await stock_service.deduct_stock_for_order(item.id, 2, "o-1")
    await stock_service.revert_stock_for_order(item.id, 1, "o-1")
    await stock_service.set_inventory_type(item.id, "TRACKED", low_stock_alert=3)

    rows = await _ledger(item.id)
    assert len(rows) == 4
    for row in rows:
        assert row.new_stock == row.previous_stock + row.quantity
        assert row.new_stock >= 0
    assert (await _reload(item)).stock_quantity == rows[-1].new_stock == 3


@pytest.mark.asyncio
async def test_concurrent_removals_do_not_lose_updates(make_item):
    item = await make_item(stock=5)

    results = await asyncio.gather(
        stock_service.remove_stock(item.id, 5, "waste"),
        stock_service.remove_stock(item.id, 5, "waste"),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], InsufficientStock)
    assert (await _reload(item)).stock_quantity == 0
    assert len(await _ledger(item.id)) == 1


@pytest.mark.asyncio
async def test_ledger_failure_rolls_back_item_update(make_item):
    item = await make_item(stock=5)

    with patch.object(StockAdjustment, "create", AsyncMock(side_effect=OperationalError("disk I/O error"))):
        with pytest.raises(PersistenceFailure):
            await stock_service.add_stock(item.id, 3, "restock")

    assert (await _reload(item)).stock_quantity == 5
    assert await _ledger(item.id) == []


@pytest.mark.asyncio
async def test_shared_transaction_commits_together(make_item):
    first = await make_item(name="Butter Naan", stock=5)
    second = await make_item(name="Garlic Naan", stock=1)

    with pytest.raises(InsufficientStock):
        async with in_transaction() as conn:
            await stock_service.deduct_stock_for_order(first.id, 2, "o-9", conn=conn)
            await stock_service.deduct_stock_for_order(second.id, 2, "o-9", conn=conn)

    # The first deduction was rolled back with the failing one
    assert (await _reload(first)).stock_quantity == 5
    assert await StockAdjustment.all().count() == 0


@pytest.mark.asyncio
async def test_saved_adjustments_are_immutable(make_item):
    item = await make_item(stock=5)
    await stock_service.add_stock(item.id, 1, "restock")
    row = await StockAdjustment.get(menu_item_id=item.id)

    row.quantity = 100
    with pytest.raises(AdjustmentImmutable):
        await row.save()
    with pytest.raises(AdjustmentImmutable):
        await row.delete()

    assert (await StockAdjustment.get(id=row.id)).quantity == 1
