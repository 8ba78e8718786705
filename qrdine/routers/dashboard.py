"""Owner dashboard."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qrdine.database import get_db
from qrdine.dependencies import current_restaurant
from qrdine.models import Restaurant
from qrdine.schemas import DashboardSummary, ErrorResponse, OrderResponse
from qrdine.services.dashboard import dashboard_summary

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get(
    "/summary",
    response_model=DashboardSummary,
    responses={401: {"model": ErrorResponse}},
)
async def summary(
    owner: Restaurant = Depends(current_restaurant),
    db: AsyncSession = Depends(get_db),
) -> DashboardSummary:
    """Order counts, revenue, average ratings and the latest orders."""
    data = await dashboard_summary(db, owner.id)
    recent = data.pop("recent_orders")
    return DashboardSummary(
        **data,
        recent_orders=[OrderResponse.model_validate(order) for order in recent],
    )
