# app/models/__init__.py
from .menu import InventoryType, MenuItem
from .stock import StockAdjustment, StockAdjustmentType
from .order import Order, OrderItem, OrderStatus

# Export all models
__all__ = [
    "InventoryType",
    "MenuItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "StockAdjustment",
    "StockAdjustmentType",
]
