"""
Order Service — Menu reads and admin edits
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from order_service.models.menu import MenuItem
from order_service.schemas.menu import MenuItemCreateRequest


async def list_menu(db: AsyncSession, available_only: bool = False) -> list[MenuItem]:
    query = select(MenuItem).order_by(MenuItem.category, MenuItem.id)
    if available_only:
        query = query.where(MenuItem.available.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


async def create_menu_item(db: AsyncSession, payload: MenuItemCreateRequest) -> MenuItem:
    item = MenuItem(**payload.model_dump())
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


async def set_availability(db: AsyncSession, menu_item_id: int, available: bool) -> MenuItem | None:
    item = await db.get(MenuItem, menu_item_id)
    if item is None:
        return None
    item.available = available
    await db.commit()
    await db.refresh(item)
    return item
