from pydantic import BaseModel, Field
from typing import List
import uuid
from decimal import Decimal

from app.models.order import OrderStatus


class OrderItemRequest(BaseModel):
    """Schema for a single item in the order request."""
    menu_item_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)

class OrderRequest(BaseModel):
    """Schema for the full order placement request body."""
    items: List[OrderItemRequest]

class OrderPlacementResponse(BaseModel):
    """Response schema for a placed or updated order."""
    order_id: uuid.UUID
    status: OrderStatus
    total_amount: Decimal
    message: str

class OrderStatusUpdate(BaseModel):
    """Schema for updating an order status."""
    status: OrderStatus

class OrderItemResponse(BaseModel):
    """Schema for an item inside the detailed order response."""
    menu_item_id: int
    name: str
    quantity: int
    price: str  # Use string for Decimal type serialization

class OrderDetailResponse(BaseModel):
    """Schema for fetching detailed order information."""
    id: uuid.UUID
    status: OrderStatus
    total_amount: Decimal
    items: List[OrderItemResponse]
    created_at: str
