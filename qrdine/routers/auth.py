"""Owner sign-in: issues and inspects signed restaurant sessions."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qrdine.core.security import create_session_token
from qrdine.database import get_db
from qrdine.dependencies import current_restaurant
from qrdine.models import Restaurant
from qrdine.schemas import (
    ErrorResponse,
    RestaurantEnvelope,
    RestaurantResponse,
    SessionCreate,
    SessionResponse,
)
from qrdine.services.restaurants import authenticate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/session",
    response_model=SessionResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Sign In",
)
async def create_session(
    credentials: SessionCreate,
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    """Exchange email and password for a bearer session token."""
    restaurant = await authenticate(db, credentials.email, credentials.password)
    token, expires_at = create_session_token(restaurant.id, restaurant.email, restaurant.name)

    logger.info(f"Restaurant {restaurant.id} signed in")
    return SessionResponse(
        access_token=token,
        expires_at=expires_at,
        restaurant=RestaurantResponse.model_validate(restaurant),
    )


@router.get(
    "/session",
    response_model=RestaurantEnvelope,
    responses={401: {"model": ErrorResponse}},
)
async def read_session(
    restaurant: Restaurant = Depends(current_restaurant),
) -> RestaurantEnvelope:
    """The restaurant the current session belongs to."""
    return RestaurantEnvelope(restaurant=RestaurantResponse.model_validate(restaurant))
