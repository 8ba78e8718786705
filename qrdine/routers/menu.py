"""Menu item CRUD."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from qrdine.database import get_db
from qrdine.dependencies import current_restaurant, ensure_owner
from qrdine.models import Restaurant
from qrdine.routers.restaurants import menu_categories
from qrdine.schemas import (
    ErrorResponse,
    MenuItemCreate,
    MenuItemEnvelope,
    MenuItemResponse,
    MenuItemUpdate,
    MenuListResponse,
    MessageResponse,
)
from qrdine.services import menu as menu_service
from qrdine.services.restaurants import get_restaurant

router = APIRouter(prefix="/api/menu", tags=["Menu"])


@router.get("", response_model=MenuListResponse)
async def list_menu(
    restaurant_id: str = Query(..., alias="restaurantId", min_length=1),
    db: AsyncSession = Depends(get_db),
) -> MenuListResponse:
    """Full menu, available or not, grouped by category and as a flat list."""
    restaurant = await get_restaurant(db, restaurant_id)
    items = await menu_service.list_menu_items(db, restaurant.id)
    return MenuListResponse(
        menu=menu_categories(items),
        items=[MenuItemResponse.model_validate(item) for item in items],
    )


@router.post(
    "",
    status_code=201,
    response_model=MenuItemEnvelope,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def create_menu_item(
    data: MenuItemCreate,
    owner: Restaurant = Depends(current_restaurant),
    db: AsyncSession = Depends(get_db),
) -> MenuItemEnvelope:
    ensure_owner(owner, data.restaurant_id)
    item = await menu_service.create_menu_item(db, data)
    return MenuItemEnvelope(menu_item=MenuItemResponse.model_validate(item))


@router.get(
    "/{item_id}",
    response_model=MenuItemEnvelope,
    responses={404: {"model": ErrorResponse}},
)
async def get_menu_item(
    item_id: str,
    db: AsyncSession = Depends(get_db),
) -> MenuItemEnvelope:
    item = await menu_service.get_menu_item(db, item_id)
    return MenuItemEnvelope(menu_item=MenuItemResponse.model_validate(item))


@router.put(
    "/{item_id}",
    response_model=MenuItemEnvelope,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_menu_item(
    item_id: str,
    patch: MenuItemUpdate,
    owner: Restaurant = Depends(current_restaurant),
    db: AsyncSession = Depends(get_db),
) -> MenuItemEnvelope:
    """Edit an item; send ``{"isAvailable": false}`` alone to hide it."""
    item = await menu_service.get_menu_item(db, item_id)
    ensure_owner(owner, item.restaurant_id)
    item = await menu_service.update_menu_item(db, item, patch)
    return MenuItemEnvelope(menu_item=MenuItemResponse.model_validate(item))


@router.delete(
    "/{item_id}",
    response_model=MessageResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_menu_item(
    item_id: str,
    owner: Restaurant = Depends(current_restaurant),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    item = await menu_service.get_menu_item(db, item_id)
    ensure_owner(owner, item.restaurant_id)
    await menu_service.delete_menu_item(db, item)
    return MessageResponse(message="Menu item deleted successfully")
