"""
Order Service — Menu listing, admin menu edits and sales summary
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from order_service.core.order_id import current_date_key, is_valid_date_key
from order_service.db.database import get_db
from order_service.db.menu_ops import create_menu_item, list_menu, set_availability
from order_service.db.order_ops import sales_summary
from order_service.schemas.menu import (
    AvailabilityRequest,
    MenuItemCreateRequest,
    MenuItemResponse,
    SalesSummary,
)

router = APIRouter(tags=["menu"])
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/menu", response_model=list[MenuItemResponse])
async def get_menu(
    available: bool = Query(False, description="Only items currently for sale"),
    db: AsyncSession = Depends(get_db),
):
    return await list_menu(db, available_only=available)


@admin_router.post("/menu", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
async def add_menu_item(payload: MenuItemCreateRequest, db: AsyncSession = Depends(get_db)):
    return await create_menu_item(db, payload)


@admin_router.put("/menu/{menu_item_id}/availability", response_model=MenuItemResponse)
async def update_availability(menu_item_id: int, payload: AvailabilityRequest,
                              db: AsyncSession = Depends(get_db)):
    item = await set_availability(db, menu_item_id, payload.available)
    if item is None:
        raise HTTPException(status_code=404, detail="Menu item not found.")
    return item


@admin_router.get("/stats", response_model=SalesSummary)
async def get_stats(
    date_key: int | None = Query(None, description="DDMM, defaults to today"),
    db: AsyncSession = Depends(get_db),
):
    if date_key is None:
        date_key = current_date_key()
    elif not is_valid_date_key(date_key):
        raise HTTPException(status_code=400, detail="date_key must be in DDMM format (101-3112)")
    return await sales_summary(db, date_key)
