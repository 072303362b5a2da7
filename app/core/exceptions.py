"""Stock domain exceptions.

Every business rule violation is a subclass of StockError so the HTTP layer
can map them uniformly. Each class carries the status code and machine code
the API answers with.
"""


class StockError(Exception):
    """Base class for all stock and ordering errors."""

    status_code = 500
    code = "stock_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ItemNotFound(StockError):
    """The menu item does not exist or has been soft-deleted."""

    status_code = 404
    code = "ITEM_NOT_FOUND"

    def __init__(self, item_id: int):
        super().__init__(f"Menu Item ID {item_id} not found")
        self.item_id = item_id


class InvalidInventoryType(StockError):
    """The operation needs a different inventory type than the item has."""

    status_code = 400
    code = "INVALID_INVENTORY_TYPE"


class InsufficientStock(StockError):
    """A removal or deduction asks for more portions than remain."""

    status_code = 400
    code = "INSUFFICIENT_STOCK"

    def __init__(self, item_id: int, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for item {item_id}. Available: {available}, Required: {requested}"
        )
        self.item_id = item_id
        self.available = available
        self.requested = requested


class ValidationError(StockError):
    """Malformed quantity, reason or pagination input."""

    status_code = 400
    code = "VALIDATION_ERROR"


class PersistenceFailure(StockError):
    """The transaction, lock or connection failed; nothing was committed."""

    status_code = 500
    code = "PERSISTENCE_FAILURE"


class AdjustmentImmutable(StockError):
    """Stock adjustments are append-only."""

    status_code = 500
    code = "LEDGER_IMMUTABLE"


class OrderNotFound(StockError):
    status_code = 404
    code = "ORDER_NOT_FOUND"

    def __init__(self, order_id):
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class InvalidOrderState(StockError):
    status_code = 400
    code = "INVALID_ORDER_STATE"
