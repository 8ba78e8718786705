"""Owner dashboard headline numbers."""

from sqlalchemy.ext.asyncio import AsyncSession

from qrdine.services.orders import list_orders, order_counts
from qrdine.services.reviews import review_stats

RECENT_ORDER_COUNT = 5


async def dashboard_summary(db: AsyncSession, restaurant_id: str) -> dict:
    counts = await order_counts(db, restaurant_id)
    stats = await review_stats(db, restaurant_id)
    recent = await list_orders(db, restaurant_id, limit=RECENT_ORDER_COUNT)
    return {**counts, **stats, "recent_orders": recent}
