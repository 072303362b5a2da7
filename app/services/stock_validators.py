"""Input checks run before any transaction is opened."""
from typing import Any, Iterable, Mapping, Optional

from app.core.config import MAX_HISTORY_LIMIT, MIN_REASON_LENGTH
from app.core.exceptions import ValidationError
from app.models.menu import InventoryType


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_positive_quantity(quantity: Any) -> None:
    if not _is_int(quantity) or quantity <= 0:
        raise ValidationError("Quantity must be a positive integer")


def validate_reason(reason: Optional[str]) -> None:
    if reason is None or len(reason.strip()) < MIN_REASON_LENGTH:
        raise ValidationError(f"Reason must be at least {MIN_REASON_LENGTH} characters")


def validate_low_stock_alert(low_stock_alert: Any) -> None:
    if low_stock_alert is not None and (not _is_int(low_stock_alert) or low_stock_alert < 1):
        raise ValidationError("Low stock alert must be at least 1")


def validate_daily_reset(items: Iterable[Mapping[str, Any]]) -> None:
    items = list(items)
    if not items:
        raise ValidationError("At least one item must be provided")

    for entry in items:
        item_id = entry.get("item_id")
        quantity = entry.get("quantity")
        if not _is_int(item_id) or item_id <= 0:
            raise ValidationError("Item ID must be a positive integer")
        if not _is_int(quantity) or quantity < 0:
            raise ValidationError("Quantity must be 0 or greater")
        validate_low_stock_alert(entry.get("low_stock_alert"))


def validate_inventory_type(inventory_type: Any, low_stock_alert: Any = None) -> InventoryType:
    try:
        new_type = InventoryType(inventory_type)
    except ValueError:
        raise ValidationError("Invalid enum value. Expected 'TRACKED' | 'UNLIMITED'")
    if new_type == InventoryType.TRACKED:
        validate_low_stock_alert(low_stock_alert)
    return new_type


def validate_pagination(page: Any, limit: Any) -> None:
    if not _is_int(page) or page < 1:
        raise ValidationError("Page must be positive")
    if not _is_int(limit) or limit < 1:
        raise ValidationError("Limit must be positive")
    if limit > MAX_HISTORY_LIMIT:
        raise ValidationError(f"Limit cannot exceed {MAX_HISTORY_LIMIT}")
