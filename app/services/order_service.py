import logging
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from app.core.exceptions import InvalidOrderState, ItemNotFound, OrderNotFound, ValidationError
from app.models.menu import MenuItem
from app.models.order import FINAL_STATUSES, Order, OrderItem, OrderStatus
from app.services.stock_service import deduct_stock_for_order, revert_stock_for_order, unit_of_work

log = logging.getLogger(__name__)


async def place_order(user_id: Optional[str], items: List[Dict]) -> Order:
    """
    Creates Order/OrderItem rows and deducts stock in ONE transaction.
    If any TRACKED line lacks stock, InsufficientStock rolls back the order too.
    """
    if not items:
        raise ValidationError("Order must contain items.")

    async with unit_of_work() as conn:
        # Input validation and existence check
        menu_item_ids = [int(it["menu_item_id"]) for it in items]
        menu_items = await MenuItem.filter(id__in=menu_item_ids, deleted=False).using_db(conn)
        menu_map = {m.id: m for m in menu_items}

        for item_id in menu_item_ids:
            menu = menu_map.get(item_id)
            if menu is None:
                raise ItemNotFound(item_id)
            if not menu.is_available:
                raise ValidationError(f"The following item is not available: {menu.name}")

        # 1. Create the Order header
        order = await Order.create(
            user_id=user_id,
            status=OrderStatus.PLACED,
            total_amount=Decimal("0"),
            using_db=conn
        )

        total = Decimal("0")
        for it in items:
            qty = int(it["quantity"])
            menu = menu_map[int(it["menu_item_id"])]
            line_total = menu.price * qty
            total += line_total

            # 2. Create Order Item line with the price captured now
            await OrderItem.create(
                order=order,
                menu_item=menu,
                quantity=qty,
                unit_price=menu.price,
                line_total=line_total,
                using_db=conn
            )

            # 3. Deduct stock on the same connection (no-op for UNLIMITED items)
            await deduct_stock_for_order(menu.id, qty, str(order.id), conn=conn)

        order.total_amount = total
        await order.save(using_db=conn, update_fields=["total_amount", "updated_at"])

    log.info(f"Order {order.id} placed with {len(items)} line(s), total {total}.")
    return order


async def get_order_by_id(order_id: UUID) -> Order:
    """Fetches order details with items, including the menu item name/price."""
    # Pre-fetch related entities to minimize DB queries (N+1 avoidance)
    order = await Order.get_or_none(id=order_id).prefetch_related('items', 'items__menu_item')
    if not order:
        raise OrderNotFound(order_id)
    return order


async def cancel_order(order_id: UUID, conn=None) -> Order:
    """
    Cancels an order and puts every line's stock back, atomically.
    """
    async with unit_of_work(conn) as tx:
        order = await Order.filter(id=order_id).using_db(tx).select_for_update().first()
        if not order:
            raise OrderNotFound(order_id)

        # Validation: Cannot cancel if already completed or cancelled
        if order.status in FINAL_STATUSES:
            raise InvalidOrderState(f"Cannot cancel order in status {order.status.value}")

        lines = await OrderItem.filter(order_id=order.id).using_db(tx).order_by("menu_item_id")
        for line in lines:
            await revert_stock_for_order(line.menu_item_id, line.quantity, str(order.id), conn=tx)

        order.status = OrderStatus.CANCELLED
        await order.save(using_db=tx, update_fields=["status", "updated_at"])

    log.info(f"Order {order.id} cancelled, stock restored for {len(lines)} line(s).")
    return order


async def update_order_status(order_id: UUID, new_status: OrderStatus) -> Order:
    """
    Updates order status and enforces the state machine rules.
    Moving to CANCELLED goes through cancel_order so stock is reverted.
    """
    async with unit_of_work() as conn:
        order = await Order.filter(id=order_id).using_db(conn).select_for_update().first()

        if not order:
            raise OrderNotFound(order_id)

        # Block status updates if the order is in a final, irreversible state.
        if order.status in FINAL_STATUSES:
            raise InvalidOrderState(
                f"Order is already in a final state: {order.status.value}. Status cannot be updated."
            )

        if new_status == OrderStatus.CANCELLED:
            return await cancel_order(order_id, conn=conn)

        old_status = order.status
        order.status = new_status
        await order.save(using_db=conn, update_fields=["status", "updated_at"])

    log.info(f"Order {order.id} moved from {old_status.value} to {new_status.value}.")
    return order
