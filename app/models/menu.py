from enum import Enum
from tortoise import fields, models


class InventoryType(str, Enum):
    TRACKED = "TRACKED"  # Finite, monitored stock (pre-prepared dishes)
    UNLIMITED = "UNLIMITED"  # Always orderable, no stock bookkeeping


class MenuItem(models.Model):
    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=255)
    price = fields.DecimalField(max_digits=12, decimal_places=2)
    is_available = fields.BooleanField(default=True)

    inventory_type = fields.CharEnumField(InventoryType, default=InventoryType.UNLIMITED)
    stock_quantity = fields.IntField(null=True)
    initial_stock = fields.IntField(null=True)  # Day's starting baseline, set by the daily reset
    low_stock_alert = fields.IntField(null=True)
    auto_mark_unavailable = fields.BooleanField(default=True)

    deleted = fields.BooleanField(default=False)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "menu_items"
        indexes = [
            ("deleted",),
            ("inventory_type", "deleted"),  # Composite: low/out-of-stock scans
        ]

    @property
    def is_tracked(self) -> bool:
        return self.inventory_type == InventoryType.TRACKED

    def __str__(self):
        return f"{self.name} ({self.id})"
