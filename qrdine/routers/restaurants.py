"""Restaurant registration, public profile, settings and table QR codes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from qrdine.database import get_db
from qrdine.dependencies import current_restaurant, ensure_owner
from qrdine.models import Restaurant
from qrdine.schemas import (
    ErrorResponse,
    MenuCategory,
    MenuItemResponse,
    RestaurantCreate,
    RestaurantCreateResponse,
    RestaurantDetailResponse,
    RestaurantEnvelope,
    RestaurantResponse,
    RestaurantUpdate,
)
from qrdine.services import restaurants as restaurant_service
from qrdine.services.menu import group_menu_by_category, list_menu_items
from qrdine.services.qr import build_table_qr

router = APIRouter(prefix="/api/restaurants", tags=["Restaurants"])


def menu_categories(items) -> list[MenuCategory]:
    return [
        MenuCategory(
            category=group["category"],
            items=[MenuItemResponse.model_validate(item) for item in group["items"]],
        )
        for group in group_menu_by_category(items)
    ]


@router.post(
    "",
    status_code=201,
    response_model=RestaurantCreateResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Register Restaurant",
)
async def register_restaurant(
    data: RestaurantCreate,
    db: AsyncSession = Depends(get_db),
) -> RestaurantCreateResponse:
    """Create a restaurant account. Emails are unique across all restaurants."""
    restaurant = await restaurant_service.register_restaurant(db, data)
    return RestaurantCreateResponse(
        message="Restaurant registered successfully",
        restaurant=RestaurantResponse.model_validate(restaurant),
    )


@router.get(
    "/{restaurant_id}",
    response_model=RestaurantDetailResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_restaurant(
    restaurant_id: str,
    db: AsyncSession = Depends(get_db),
) -> RestaurantDetailResponse:
    """Public profile plus the available menu grouped by category."""
    restaurant = await restaurant_service.get_restaurant(db, restaurant_id)
    items = await list_menu_items(db, restaurant.id, available_only=True)
    return RestaurantDetailResponse(
        restaurant=RestaurantResponse.model_validate(restaurant),
        menu=menu_categories(items),
    )


@router.put(
    "/{restaurant_id}",
    response_model=RestaurantEnvelope,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def update_restaurant(
    restaurant_id: str,
    patch: RestaurantUpdate,
    owner: Restaurant = Depends(current_restaurant),
    db: AsyncSession = Depends(get_db),
) -> RestaurantEnvelope:
    """Update profile, operating hours or discount settings."""
    ensure_owner(owner, restaurant_id)
    restaurant = await restaurant_service.update_restaurant(db, owner, patch)
    return RestaurantEnvelope(restaurant=RestaurantResponse.model_validate(restaurant))


@router.get(
    "/{restaurant_id}/qr",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}, 404: {"model": ErrorResponse}},
    summary="Table QR Code",
)
async def table_qr_code(
    restaurant_id: str,
    table: Optional[str] = Query(None, max_length=20),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """PNG QR code that opens the restaurant's menu for a table."""
    restaurant = await restaurant_service.get_restaurant(db, restaurant_id)
    png = build_table_qr(restaurant.id, table)
    return Response(content=png, media_type="image/png")
