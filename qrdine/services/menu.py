"""
Menu store: CRUD on a restaurant's menu items and category grouping.
"""

import logging
from typing import Iterable, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from qrdine.core.exceptions import NotFound
from qrdine.models import MenuItem
from qrdine.schemas import MenuItemCreate, MenuItemUpdate

logger = logging.getLogger(__name__)

T = TypeVar("T")


def group_menu_by_category(items: Iterable[T]) -> list[dict]:
    """
    Group menu items by their ``category`` attribute.

    Categories appear in the order they are first seen and items keep their
    relative order inside each group.

    Example:
        >>> group_menu_by_category([pizza1, drink, pizza2])
        [{"category": "Pizza", "items": [pizza1, pizza2]},
         {"category": "Drinks", "items": [drink]}]
    """
    groups: dict[str, list[T]] = {}
    for item in items:
        category = item["category"] if isinstance(item, dict) else item.category
        groups.setdefault(category, []).append(item)
    return [{"category": category, "items": members} for category, members in groups.items()]


async def list_menu_items(
    db: AsyncSession,
    restaurant_id: str,
    available_only: bool = False,
) -> list[MenuItem]:
    query = (
        select(MenuItem)
        .where(MenuItem.restaurant_id == restaurant_id)
        .order_by(MenuItem.created_at, MenuItem.id)
    )
    if available_only:
        query = query.where(MenuItem.is_available.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_menu_item(db: AsyncSession, item_id: str) -> MenuItem:
    item = await db.get(MenuItem, item_id)
    if item is None:
        raise NotFound("Menu item not found")
    return item


async def get_menu_items_by_ids(db: AsyncSession, item_ids: list[str]) -> dict[str, MenuItem]:
    if not item_ids:
        return {}
    result = await db.execute(select(MenuItem).where(MenuItem.id.in_(set(item_ids))))
    return {item.id: item for item in result.scalars().all()}


async def create_menu_item(db: AsyncSession, data: MenuItemCreate) -> MenuItem:
    item = MenuItem(
        restaurant_id=data.restaurant_id,
        name=data.name.strip(),
        description=data.description,
        price=round(data.price, 2),
        category=data.category,
        image=data.image,
        is_available=True,
    )
    db.add(item)
    await db.commit()
    await db.refresh(item)

    logger.info(f"Menu item {item.id} '{item.name}' added to restaurant {item.restaurant_id}")
    return item


async def update_menu_item(
    db: AsyncSession,
    item: MenuItem,
    patch: MenuItemUpdate,
) -> MenuItem:
    changes = patch.model_dump(exclude_unset=True)

    for field, value in changes.items():
        # name/price/category/availability are required columns
        if value is None and field not in ("description", "image"):
            continue
        if field == "price":
            value = round(value, 2)
        elif field == "category":
            value = value.strip()
        setattr(item, field, value)

    await db.commit()
    await db.refresh(item)

    logger.info(f"Menu item {item.id} updated: {sorted(changes)}")
    return item


async def delete_menu_item(db: AsyncSession, item: MenuItem) -> None:
    await db.delete(item)
    await db.commit()
    logger.info(f"Menu item {item.id} deleted from restaurant {item.restaurant_id}")
