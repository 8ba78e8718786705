"""
Request-scoped dependencies for owner-only endpoints.

The signed-in restaurant is resolved from the bearer token on every request
and handed to the route explicitly.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from qrdine.core.exceptions import AuthenticationFailed, PermissionDenied
from qrdine.core.security import decode_session_token
from qrdine.database import get_db
from qrdine.models import Restaurant

bearer_scheme = HTTPBearer(auto_error=False, description="Owner session token")


async def current_restaurant(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Restaurant:
    """Restaurant identified by the request's session token."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationFailed("Sign in required")

    claims = decode_session_token(credentials.credentials)
    restaurant = await db.get(Restaurant, claims.restaurant_id)
    if restaurant is None:
        raise AuthenticationFailed("Invalid session")
    return restaurant


def ensure_owner(restaurant: Restaurant, restaurant_id: str) -> None:
    """Reject access to another tenant's data."""
    if restaurant.id != restaurant_id:
        raise PermissionDenied("You do not have access to this restaurant")
