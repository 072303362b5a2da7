import logging
from typing import Optional

from fastapi import APIRouter, Header, Query, status

from app.core.config import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT
from app.schemas.menu import (
    AddStockRequest,
    DailyStockResetRequest,
    InventoryTypeRequest,
    MenuItemCreateRequest,
    MenuItemResponse,
    RemoveStockRequest,
    StockAdjustmentResponse,
)
from app.schemas.response import SuccessResponse
from app.services.menu_service import create_menu_item, get_menu_item, list_menu_items, soft_delete_menu_item
from app.services.stock_query_service import get_low_stock, get_out_of_stock, get_stock_history
from app.services.stock_service import add_stock, daily_stock_reset, remove_stock, set_inventory_type

log = logging.getLogger("uvicorn")

router = APIRouter()


def _item_data(item):
    return MenuItemResponse.model_validate(item).model_dump()


def _items_data(items):
    return [_item_data(item) for item in items]


# ----------- Menu items -----------

@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_menu_item_endpoint(payload: MenuItemCreateRequest):
    """Adds a new menu item, TRACKED or UNLIMITED."""
    item = await create_menu_item(**payload.model_dump())
    log.info(f"Menu item {item.id} '{item.name}' created ({payload.inventory_type.value}).")
    return SuccessResponse(data=_item_data(item))


@router.get("/", response_model=SuccessResponse)
async def list_menu_items_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=MAX_HISTORY_LIMIT),
    search: Optional[str] = Query(None, max_length=100),
):
    """Menu items ordered by name, with optional case-insensitive name search."""
    result = await list_menu_items(page=page, limit=limit, search=search)
    return SuccessResponse(data={"data": _items_data(result["data"]), "meta": result["meta"]})


# ----------- Stock (static paths first so they are not taken for an item id) -----------

@router.post("/stock/daily-reset", response_model=SuccessResponse)
async def daily_stock_reset_endpoint(payload: DailyStockResetRequest, x_user_id: Optional[str] = Header(None)):
    """
    Registers the starting stock of TRACKED items for the day.
    The whole batch is applied atomically.
    """
    items = await daily_stock_reset([entry.model_dump() for entry in payload.items], user_id=x_user_id)
    log.info(f"Daily stock reset applied to {len(items)} item(s).")
    return SuccessResponse(data=_items_data(items))


@router.get("/stock/low-stock", response_model=SuccessResponse)
async def low_stock_endpoint():
    """Items at or below their low stock alert threshold."""
    return SuccessResponse(data=_items_data(await get_low_stock()))


@router.get("/stock/out-of-stock", response_model=SuccessResponse)
async def out_of_stock_endpoint():
    return SuccessResponse(data=_items_data(await get_out_of_stock()))


# ----------- Single item -----------

@router.get("/{item_id}", response_model=SuccessResponse)
async def get_menu_item_endpoint(item_id: int):
    return SuccessResponse(data=_item_data(await get_menu_item(item_id)))


@router.delete("/{item_id}", response_model=SuccessResponse)
async def delete_menu_item_endpoint(item_id: int):
    """Soft-deletes a menu item. Its stock history is kept."""
    item = await soft_delete_menu_item(item_id)
    log.info(f"Menu item {item.id} soft-deleted.")
    return SuccessResponse(data=_item_data(item))


@router.post("/{item_id}/stock/add", response_model=SuccessResponse)
async def add_stock_endpoint(item_id: int, payload: AddStockRequest, x_user_id: Optional[str] = Header(None)):
    """Mid-day stock addition (extra production run, correction)."""
    item = await add_stock(item_id, payload.quantity, payload.reason, user_id=x_user_id)
    return SuccessResponse(data=_item_data(item))


@router.post("/{item_id}/stock/remove", response_model=SuccessResponse)
async def remove_stock_endpoint(item_id: int, payload: RemoveStockRequest, x_user_id: Optional[str] = Header(None)):
    """Records waste, spoilage or any reduction outside order fulfilment."""
    item = await remove_stock(item_id, payload.quantity, payload.reason, user_id=x_user_id)
    return SuccessResponse(data=_item_data(item))


@router.patch("/{item_id}/inventory-type", response_model=SuccessResponse)
async def set_inventory_type_endpoint(item_id: int, payload: InventoryTypeRequest):
    item = await set_inventory_type(item_id, payload.inventory_type, payload.low_stock_alert)
    return SuccessResponse(data=_item_data(item))


@router.get("/{item_id}/stock/history", response_model=SuccessResponse)
async def stock_history_endpoint(
    item_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=MAX_HISTORY_LIMIT),
):
    """Paginated stock adjustment history, newest first."""
    history = await get_stock_history(item_id, page=page, limit=limit)
    data = {
        "data": [StockAdjustmentResponse.model_validate(row).model_dump() for row in history["data"]],
        "meta": history["meta"],
    }
    return SuccessResponse(data=data)
