"""Read-side stock queries. No locks, no side effects."""
import math
from typing import Any, Dict, List

from tortoise.expressions import F

from app.core.config import DEFAULT_HISTORY_LIMIT
from app.core.exceptions import ItemNotFound
from app.models.menu import MenuItem
from app.repositories import stock_repository
from app.services import stock_validators


def page_meta(total: int, page: int, limit: int) -> Dict[str, int]:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit),
    }


async def get_low_stock() -> List[MenuItem]:
    """TRACKED items at or below their own alert threshold."""
    return await stock_repository.find_tracked_items(
        stock_quantity__isnull=False,
        low_stock_alert__isnull=False,
        stock_quantity__lte=F("low_stock_alert"),
    )


async def get_out_of_stock() -> List[MenuItem]:
    return await stock_repository.find_tracked_items(stock_quantity=0)


async def get_stock_history(item_id: int, page: int = 1, limit: int = DEFAULT_HISTORY_LIMIT) -> Dict[str, Any]:
    """Paginated adjustment history of one item, newest first."""
    stock_validators.validate_pagination(page, limit)

    if await stock_repository.get_active_item(item_id) is None:
        raise ItemNotFound(item_id)

    rows, total = await stock_repository.find_history(item_id, page, limit)
    return {"data": rows, "meta": page_meta(total, page, limit)}
