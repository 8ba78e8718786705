"""Order placement, tracking and the owner's status workflow."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from qrdine.database import get_db
from qrdine.dependencies import current_restaurant, ensure_owner
from qrdine.models import Restaurant
from qrdine.schemas import (
    ErrorResponse,
    OrderCreate,
    OrderEnvelope,
    OrderListResponse,
    OrderResponse,
    OrderUpdate,
)
from qrdine.services import orders as order_service

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.get(
    "",
    response_model=OrderListResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="List Orders",
)
async def list_orders(
    restaurant_id: str = Query(..., alias="restaurantId", min_length=1),
    status: Optional[str] = Query(None),
    owner: Restaurant = Depends(current_restaurant),
    db: AsyncSession = Depends(get_db),
) -> OrderListResponse:
    """Newest first; ``status`` narrows to one workflow state."""
    ensure_owner(owner, restaurant_id)
    status_filter = order_service.parse_status(status) if status else None
    orders = await order_service.list_orders(db, restaurant_id, status_filter)
    return OrderListResponse(
        total=len(orders),
        orders=[OrderResponse.model_validate(order) for order in orders],
    )


@router.post(
    "",
    status_code=201,
    response_model=OrderEnvelope,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Place Order",
)
async def create_order(
    data: OrderCreate,
    db: AsyncSession = Depends(get_db),
) -> OrderEnvelope:
    """
    Place an order from a table.

    Prices come from the menu at the moment of ordering. A ``discountCode``
    earned from an earlier review is validated and consumed here.
    """
    order = await order_service.create_order(db, data)
    return OrderEnvelope(order=OrderResponse.model_validate(order))


@router.get(
    "/{order_id}",
    response_model=OrderEnvelope,
    responses={404: {"model": ErrorResponse}},
)
async def get_order(
    order_id: str,
    db: AsyncSession = Depends(get_db),
) -> OrderEnvelope:
    """Customers poll this to follow their order's status."""
    order = await order_service.get_order(db, order_id)
    return OrderEnvelope(order=OrderResponse.model_validate(order))


@router.put(
    "/{order_id}",
    response_model=OrderEnvelope,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def update_order(
    order_id: str,
    patch: OrderUpdate,
    owner: Restaurant = Depends(current_restaurant),
    db: AsyncSession = Depends(get_db),
) -> OrderEnvelope:
    """Advance the status one step, cancel a pending order, or edit table/note."""
    order = await order_service.get_order(db, order_id)
    ensure_owner(owner, order.restaurant_id)
    order = await order_service.update_order(db, order, patch)
    return OrderEnvelope(order=OrderResponse.model_validate(order))
