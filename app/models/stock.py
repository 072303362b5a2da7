from enum import Enum
from tortoise import fields, models
import uuid

from app.core.exceptions import AdjustmentImmutable


class StockAdjustmentType(str, Enum):
    DAILY_RESET = "DAILY_RESET"
    MANUAL_ADD = "MANUAL_ADD"
    MANUAL_REMOVE = "MANUAL_REMOVE"
    ORDER_DEDUCT = "ORDER_DEDUCT"
    ORDER_CANCELLED = "ORDER_CANCELLED"
    AUTO_BLOCKED = "AUTO_BLOCKED"


class StockAdjustment(models.Model):
    """
    Append-only audit record of one stock-quantity change.
    Rows are written in the same transaction as the menu item update and
    are never updated or removed afterwards.
    """
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    menu_item = fields.ForeignKeyField(
        "models.MenuItem", related_name="stock_adjustments", on_delete=fields.RESTRICT
    )
    adjustment_type = fields.CharEnumField(StockAdjustmentType, max_length=32)
    previous_stock = fields.IntField()
    new_stock = fields.IntField()
    quantity = fields.IntField()  # Signed delta
    reason = fields.TextField(null=True)
    user_id = fields.CharField(max_length=64, null=True)
    order_id = fields.CharField(max_length=64, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "stock_adjustments"
        indexes = [
            ("menu_item_id", "created_at"),  # History per item, newest first
        ]

    @property
    def menu_item_name(self):
        """Name of the item when the relation was fetched with the row."""
        return getattr(self.menu_item, "name", None)

    async def save(self, *args, **kwargs):
        if self._saved_in_db:
            raise AdjustmentImmutable(f"Stock adjustment {self.id} cannot be modified")
        await super().save(*args, **kwargs)

    async def delete(self, *args, **kwargs):
        raise AdjustmentImmutable(f"Stock adjustment {self.id} cannot be deleted")
