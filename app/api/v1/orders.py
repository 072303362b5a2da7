import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Header, status

from app.schemas.response import SuccessResponse
from app.services.order_service import place_order, get_order_by_id, update_order_status, cancel_order
from app.models.order import OrderStatus
from app.schemas.order import OrderRequest, OrderPlacementResponse, OrderStatusUpdate, OrderDetailResponse

router = APIRouter()
log = logging.getLogger("uvicorn")


def _placement_data(order, message: str):
    return OrderPlacementResponse(
        order_id=order.id,
        status=order.status,
        total_amount=order.total_amount,
        message=message
    ).model_dump()


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_order_endpoint(request_data: OrderRequest, x_user_id: Optional[str] = Header(None)):
    """
    Places a new order. Stock for TRACKED items is deducted in the same transaction,
    so an order is either stored with its deductions or not at all.
    """
    items_data = [
        {"menu_item_id": item.menu_item_id, "quantity": item.quantity}
        for item in request_data.items
    ]
    order = await place_order(user_id=x_user_id, items=items_data)
    log.info(f"Order {order.id} placed successfully for user {x_user_id}.")
    return SuccessResponse(data=_placement_data(order, "Order placed."))


@router.get("/{order_id}", response_model=SuccessResponse)
async def get_order_endpoint(order_id: UUID):
    """Fetches details for a specific order."""
    order = await get_order_by_id(order_id)

    # Prepare items data for clean output using the response schema
    items = [
        {
            "menu_item_id": i.menu_item.id,
            "name": i.menu_item.name,
            "quantity": i.quantity,
            "price": str(i.unit_price)
        }
        for i in order.items
    ]

    data = OrderDetailResponse(
        id=order.id,
        status=order.status,
        total_amount=order.total_amount,
        items=items,
        created_at=str(order.created_at)
    ).model_dump()
    return SuccessResponse(data=data)


@router.patch("/{order_id}/status", response_model=SuccessResponse)
async def update_status_endpoint(order_id: UUID, payload: OrderStatusUpdate):
    """
    Updates status (e.g. 'PREPARING', 'OUT_FOR_DELIVERY', 'DELIVERED').
    """
    order = await update_order_status(order_id, payload.status)
    return SuccessResponse(
        data=_placement_data(order, f"Order status successfully updated to {OrderStatus(order.status).value}")
    )


@router.post("/{order_id}/cancel", response_model=SuccessResponse)
async def cancel_order_endpoint(order_id: UUID):
    """
    Cancels the order, updates status to CANCELLED and restores stock.
    """
    order = await cancel_order(order_id)
    return SuccessResponse(data=_placement_data(order, "Order cancelled. Stock restored."))
