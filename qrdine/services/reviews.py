"""
Review store: one review per order, optionally minting a discount code.
"""

import logging
import secrets
import string
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from qrdine.core.config import get_settings
from qrdine.core.exceptions import DomainRuleViolation, NotFound
from qrdine.models import Order, Review
from qrdine.schemas import ReviewCreate
from qrdine.services.restaurants import get_restaurant

logger = logging.getLogger(__name__)
settings = get_settings()

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_SUFFIX_LENGTH = 4
MAX_CODE_ATTEMPTS = 10

DUPLICATE_REVIEW_MESSAGE = "Review already submitted for this order"


def generate_discount_code(percentage: int, prefix: Optional[str] = None) -> str:
    """
    Build a one-time code such as ``SAVE10-AB12``.

    The prefix and percentage are fixed; only the four-character suffix is random.
    """
    if prefix is None:
        prefix = settings.discount_code_prefix
    prefix = prefix.strip().upper()
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_SUFFIX_LENGTH))
    return f"{prefix}{percentage}-{suffix}"


def round_rating(value: Optional[float]) -> float:
    """Round an average rating half-up to one decimal place (0 when absent)."""
    if not value:
        return 0.0
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


async def _review_for_order(db: AsyncSession, order_id: str) -> Optional[Review]:
    result = await db.execute(select(Review).where(Review.order_id == order_id))
    return result.scalar_one_or_none()


async def _unused_code(db: AsyncSession, percentage: int) -> str:
    for _ in range(MAX_CODE_ATTEMPTS):
        code = generate_discount_code(percentage)
        taken = await db.execute(select(Review.id).where(Review.discount_code == code))
        if taken.scalar_one_or_none() is None:
            return code
    raise RuntimeError(f"Could not generate a unique discount code after {MAX_CODE_ATTEMPTS} attempts")


async def create_review(db: AsyncSession, data: ReviewCreate) -> tuple[Review, str]:
    """
    Record a customer's review of an order.

    Returns:
        The stored review and the thank-you message shown to the customer

    Raises:
        NotFound: Unknown restaurant or order
        DomainRuleViolation: Order belongs elsewhere or was already reviewed
    """
    restaurant = await get_restaurant(db, data.restaurant_id)

    order = await db.get(Order, data.order_id)
    if order is None:
        raise NotFound("Order not found")
    if order.restaurant_id != restaurant.id:
        raise DomainRuleViolation("Order does not belong to this restaurant")

    if await _review_for_order(db, order.id) is not None:
        raise DomainRuleViolation(DUPLICATE_REVIEW_MESSAGE)

    discount_code = None
    discount_earned = 0
    if restaurant.discount_enabled:
        discount_earned = restaurant.discount_percentage
        discount_code = await _unused_code(db, discount_earned)

    review = Review(
        restaurant_id=restaurant.id,
        order_id=order.id,
        food_rating=data.food_rating,
        restaurant_rating=data.restaurant_rating,
        comment=data.comment,
        discount_earned=discount_earned,
        discount_code=discount_code,
        is_redeemed=False,
    )
    db.add(review)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        if await _review_for_order(db, order.id) is not None:
            raise DomainRuleViolation(DUPLICATE_REVIEW_MESSAGE)
        raise
    await db.refresh(review)

    if discount_code:
        message = (
            f"Thank you! You earned a {discount_earned}% discount. "
            f"Your code is: {discount_code}"
        )
        logger.info(f"Review {review.id} for order {order.id} issued code {discount_code}")
    else:
        message = "Thank you for your review!"
        logger.info(f"Review {review.id} for order {order.id} recorded")

    return review, message


async def list_reviews(db: AsyncSession, restaurant_id: str) -> list[Review]:
    result = await db.execute(
        select(Review)
        .where(Review.restaurant_id == restaurant_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(result.scalars().all())


async def review_stats(db: AsyncSession, restaurant_id: str) -> dict[str, float]:
    """Review count and average ratings for a restaurant."""
    result = await db.execute(
        select(
            func.count(Review.id),
            func.avg(Review.food_rating),
            func.avg(Review.restaurant_rating),
        ).where(Review.restaurant_id == restaurant_id)
    )
    total, avg_food, avg_restaurant = result.one()
    return {
        "total_reviews": total or 0,
        "avg_food_rating": round_rating(avg_food),
        "avg_restaurant_rating": round_rating(avg_restaurant),
    }
