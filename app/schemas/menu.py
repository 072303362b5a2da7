import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.menu import InventoryType
from app.models.stock import StockAdjustmentType


class MenuItemCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Name of the menu item (e.g., Chicken Biryani).")
    price: Decimal = Field(..., gt=0, description="Selling price of the item.")
    inventory_type: InventoryType = Field(InventoryType.UNLIMITED, description="TRACKED or UNLIMITED.")
    stock_quantity: Optional[int] = Field(None, ge=0, description="Initial stock for TRACKED items.")
    low_stock_alert: Optional[int] = Field(None, ge=1, description="Alert threshold for TRACKED items.")
    auto_mark_unavailable: bool = Field(True, description="Block ordering automatically when stock runs out.")
    is_available: bool = Field(True, description="Whether the item can currently be ordered.")


class MenuItemResponse(BaseModel):
    """Menu item as seen by API clients."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: Decimal
    is_available: bool
    inventory_type: InventoryType
    stock_quantity: Optional[int] = None
    initial_stock: Optional[int] = None
    low_stock_alert: Optional[int] = None
    auto_mark_unavailable: bool
    updated_at: Optional[datetime] = None


class DailyStockResetItem(BaseModel):
    item_id: int = Field(..., gt=0)
    quantity: int = Field(..., ge=0, description="Starting stock for the day.")
    low_stock_alert: Optional[int] = Field(None, ge=1)


class DailyStockResetRequest(BaseModel):
    items: List[DailyStockResetItem] = Field(..., min_length=1)


class AddStockRequest(BaseModel):
    quantity: int = Field(..., gt=0, description="Number of portions to add.")
    reason: str = Field(..., min_length=3, description="Why stock is being added.")


class RemoveStockRequest(BaseModel):
    quantity: int = Field(..., gt=0, description="Number of portions to remove.")
    # Optional in the payload, still checked by the stock service
    reason: Optional[str] = Field(None, description="Why stock is being removed (waste, spoilage...).")


class InventoryTypeRequest(BaseModel):
    inventory_type: InventoryType
    low_stock_alert: Optional[int] = Field(None, ge=1)


class StockAdjustmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    menu_item_id: int
    menu_item_name: Optional[str] = None
    adjustment_type: StockAdjustmentType
    previous_stock: int
    new_stock: int
    quantity: int
    reason: Optional[str] = None
    user_id: Optional[str] = None
    order_id: Optional[str] = None
    created_at: datetime
