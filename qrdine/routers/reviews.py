"""Customer reviews and review statistics."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from qrdine.database import get_db
from qrdine.schemas import (
    ErrorResponse,
    ReviewCreate,
    ReviewCreateResponse,
    ReviewListResponse,
    ReviewResponse,
    ReviewStats,
)
from qrdine.services import reviews as review_service
from qrdine.services.restaurants import get_restaurant

router = APIRouter(prefix="/api/reviews", tags=["Reviews"])


@router.get("", response_model=ReviewListResponse, responses={404: {"model": ErrorResponse}})
async def list_reviews(
    restaurant_id: str = Query(..., alias="restaurantId", min_length=1),
    db: AsyncSession = Depends(get_db),
) -> ReviewListResponse:
    """Reviews newest first with average ratings rounded to one decimal."""
    restaurant = await get_restaurant(db, restaurant_id)
    reviews = await review_service.list_reviews(db, restaurant.id)
    stats = await review_service.review_stats(db, restaurant.id)
    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(review) for review in reviews],
        stats=ReviewStats(**stats),
    )


@router.post(
    "",
    status_code=201,
    response_model=ReviewCreateResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_review(
    data: ReviewCreate,
    db: AsyncSession = Depends(get_db),
) -> ReviewCreateResponse:
    """One review per order; may earn the customer a discount code."""
    review, message = await review_service.create_review(db, data)
    return ReviewCreateResponse(
        review=ReviewResponse.model_validate(review),
        message=message,
        discount_code=review.discount_code,
    )
