"""
Restaurant store: registration, profile/settings updates, credential checks.
"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from qrdine.core.config import get_settings
from qrdine.core.exceptions import AuthenticationFailed, DomainRuleViolation, NotFound
from qrdine.core.security import hash_password, verify_password
from qrdine.models import Restaurant, generate_id
from qrdine.schemas import RestaurantCreate, RestaurantUpdate

logger = logging.getLogger(__name__)
settings = get_settings()

# Columns a patch may set to NULL; the rest are required
NULLABLE_PROFILE_FIELDS = {"description"}


def menu_url(restaurant_id: str) -> str:
    """Customer-facing menu URL for a restaurant."""
    return f"{settings.app_base_url}/restaurant/{restaurant_id}"


async def get_restaurant(db: AsyncSession, restaurant_id: str) -> Restaurant:
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFound("Restaurant not found")
    return restaurant


async def find_by_email(db: AsyncSession, email: str) -> Optional[Restaurant]:
    result = await db.execute(
        select(Restaurant).where(func.lower(Restaurant.email) == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def register_restaurant(db: AsyncSession, data: RestaurantCreate) -> Restaurant:
    """
    Create a new restaurant account.

    Raises:
        DomainRuleViolation: If the email is already registered
    """
    if await find_by_email(db, data.email) is not None:
        raise DomainRuleViolation("Restaurant with this email already exists")

    hours = data.operating_hours
    restaurant_id = generate_id()
    restaurant = Restaurant(
        id=restaurant_id,
        name=data.name.strip(),
        email=data.email,
        password_hash=hash_password(data.password),
        address=data.address.strip(),
        phone=data.phone.strip(),
        description=data.description,
        open_time=hours.open if hours else settings.default_open_time,
        close_time=hours.close if hours else settings.default_close_time,
        qr_code_url=menu_url(restaurant_id),
        discount_enabled=False,
        discount_percentage=settings.default_discount_percentage,
        discount_min_order_amount=0.0,
    )
    db.add(restaurant)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        await db.rollback()
        raise DomainRuleViolation("Restaurant with this email already exists")
    await db.refresh(restaurant)

    logger.info(f"Restaurant {restaurant.id} registered ({restaurant.email})")
    return restaurant


async def update_restaurant(
    db: AsyncSession,
    restaurant: Restaurant,
    patch: RestaurantUpdate,
) -> Restaurant:
    """
    Apply a partial profile/settings update.

    Nested ``operating_hours`` and ``discount_config`` patches are merged
    field by field, so ``{"discountConfig": {"enabled": true}}`` keeps the
    existing percentage and minimum.
    """
    changes = patch.model_dump(exclude_unset=True)

    new_email = changes.pop("email", None)
    if new_email and new_email != restaurant.email:
        existing = await find_by_email(db, new_email)
        if existing is not None and existing.id != restaurant.id:
            raise DomainRuleViolation("Restaurant with this email already exists")
        restaurant.email = new_email

    new_password = changes.pop("password", None)
    if new_password:
        restaurant.password_hash = hash_password(new_password)

    hours = changes.pop("operating_hours", None) or {}
    if hours.get("open"):
        restaurant.open_time = hours["open"]
    if hours.get("close"):
        restaurant.close_time = hours["close"]

    discount = changes.pop("discount_config", None) or {}
    if discount.get("enabled") is not None:
        restaurant.discount_enabled = discount["enabled"]
    if discount.get("percentage") is not None:
        restaurant.discount_percentage = discount["percentage"]
    if discount.get("min_order_amount") is not None:
        restaurant.discount_min_order_amount = round(discount["min_order_amount"], 2)

    for field, value in changes.items():
        if value is None and field not in NULLABLE_PROFILE_FIELDS:
            continue
        setattr(restaurant, field, value.strip() if isinstance(value, str) else value)

    try:
        await db.commit()
    except IntegrityError:
        # Another restaurant claimed the email after our check
        await db.rollback()
        raise DomainRuleViolation("Restaurant with this email already exists")
    await db.refresh(restaurant)

    logger.info(f"Restaurant {restaurant.id} settings updated")
    return restaurant


async def authenticate(db: AsyncSession, email: str, password: str) -> Restaurant:
    """
    Check owner credentials.

    Raises:
        AuthenticationFailed: Unknown email or wrong password (same message for both)
    """
    if not email or not password:
        raise AuthenticationFailed("Please enter email and password")

    restaurant = await find_by_email(db, email)
    if restaurant is None or not verify_password(password, restaurant.password_hash):
        logger.info(f"Failed sign-in attempt for {email}")
        raise AuthenticationFailed("Invalid email or password")

    return restaurant
