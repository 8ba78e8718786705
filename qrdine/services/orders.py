"""
Order store: placement with discount redemption, listing, status workflow.

Status workflow:
    pending -> confirmed -> preparing -> ready -> completed
    pending -> cancelled

completed and cancelled are terminal. Every change is applied with a
conditional UPDATE on the current status, so two owners clicking at the
same time cannot skip or reorder steps.

Discount redemption is likewise a conditional UPDATE (``is_redeemed`` must
still be false) committed in the same transaction as the order insert; a
code can be consumed by at most one order.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from qrdine.core.config import get_settings
from qrdine.core.exceptions import (
    DiscountCodeAlreadyUsed,
    DiscountCodeNotFound,
    DiscountCodeWrongRestaurant,
    DomainRuleViolation,
    MinimumOrderNotMet,
    NotFound,
    ValidationFailed,
)
from qrdine.models import Order, OrderStatus, Restaurant, Review, utc_now
from qrdine.schemas import OrderCreate, OrderItemCreate, OrderUpdate
from qrdine.services.menu import get_menu_items_by_ids
from qrdine.services.restaurants import get_restaurant

logger = logging.getLogger(__name__)
settings = get_settings()


# =============================================================================
# STATUS WORKFLOW
# =============================================================================

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY}),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def parse_status(value: str) -> OrderStatus:
    """
    Parse a status string from a query parameter.

    Raises:
        ValidationFailed: If the value is not one of the fixed statuses
    """
    try:
        return OrderStatus(value.strip().lower())
    except ValueError:
        raise ValidationFailed(
            f"Invalid status. Options: {[s.value for s in OrderStatus]}"
        )


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def validate_transition(current: OrderStatus, target: OrderStatus) -> None:
    if not can_transition(current, target):
        raise DomainRuleViolation(
            f"Cannot change order status from {current.value} to {target.value}"
        )


# =============================================================================
# PRICING
# =============================================================================

def calculate_subtotal(line_items: Iterable[dict]) -> float:
    """Sum of unit price x quantity over the line items."""
    return round(sum(item["price"] * item["quantity"] for item in line_items), 2)


def calculate_discount(subtotal: float, percentage: float) -> float:
    return round(subtotal * percentage / 100, 2)


async def build_line_items(
    db: AsyncSession,
    restaurant_id: str,
    items: list[OrderItemCreate],
) -> list[dict]:
    """
    Snapshot the name and current price of each ordered menu item.

    Raises:
        DomainRuleViolation: If an item is unknown, belongs to another
            restaurant, or is currently unavailable
    """
    menu = await get_menu_items_by_ids(db, [i.menu_item_id for i in items])

    line_items = []
    for requested in items:
        menu_item = menu.get(requested.menu_item_id)
        if menu_item is None or menu_item.restaurant_id != restaurant_id:
            raise DomainRuleViolation(
                f"Menu item {requested.menu_item_id} is not on this restaurant's menu"
            )
        if not menu_item.is_available:
            raise DomainRuleViolation(f"{menu_item.name} is currently unavailable")

        line_items.append({
            "menu_item_id": menu_item.id,
            "name": menu_item.name,
            "price": menu_item.price,
            "quantity": requested.quantity,
        })
    return line_items


# =============================================================================
# DISCOUNT REDEMPTION
# =============================================================================

async def find_review_by_code(db: AsyncSession, code: str) -> Optional[Review]:
    result = await db.execute(select(Review).where(Review.discount_code == code))
    return result.scalar_one_or_none()


async def redeem_discount_code(
    db: AsyncSession,
    restaurant: Restaurant,
    code: str,
    subtotal: float,
) -> float:
    """
    Validate a discount code and mark it redeemed inside the caller's transaction.

    Returns:
        The discount amount to subtract from ``subtotal``

    Raises:
        DiscountCodeNotFound, DiscountCodeAlreadyUsed,
        DiscountCodeWrongRestaurant, MinimumOrderNotMet
    """
    review = await find_review_by_code(db, code)
    if review is None:
        raise DiscountCodeNotFound()
    if review.is_redeemed:
        raise DiscountCodeAlreadyUsed()
    if review.restaurant_id != restaurant.id:
        raise DiscountCodeWrongRestaurant()
    if subtotal < restaurant.discount_min_order_amount:
        raise MinimumOrderNotMet(restaurant.discount_min_order_amount, settings.currency_symbol)

    claimed = await db.execute(
        update(Review)
        .where(Review.id == review.id, Review.is_redeemed.is_(False))
        .values(is_redeemed=True, redeemed_at=utc_now())
        .execution_options(synchronize_session=False)
    )
    if claimed.rowcount != 1:
        # Another order consumed the code between our read and this update
        raise DiscountCodeAlreadyUsed()

    return calculate_discount(subtotal, review.discount_earned)


# =============================================================================
# ORDER OPERATIONS
# =============================================================================

async def create_order(db: AsyncSession, data: OrderCreate) -> Order:
    """
    Place a customer order, redeeming ``data.discount_code`` if given.

    The discount claim and the order insert commit together or not at all.
    """
    restaurant = await get_restaurant(db, data.restaurant_id)

    try:
        line_items = await build_line_items(db, restaurant.id, data.items)
        subtotal = calculate_subtotal(line_items)

        discount_applied = 0.0
        if data.discount_code:
            discount_applied = await redeem_discount_code(
                db, restaurant, data.discount_code, subtotal
            )

        order = Order(
            restaurant_id=restaurant.id,
            items=line_items,
            total_price=round(subtotal - discount_applied, 2),
            discount_applied=discount_applied,
            discount_code=data.discount_code,
            table_number=data.table_number,
            customer_note=data.customer_note,
            status=OrderStatus.PENDING,
        )
        db.add(order)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(order)

    if data.discount_code:
        logger.info(
            f"Discount code {data.discount_code} redeemed on order {order.id} "
            f"(-{discount_applied:.2f})"
        )
    logger.info(
        f"Order {order.id} placed at restaurant {restaurant.id} "
        f"(table={order.table_number}, total={order.total_price:.2f})"
    )
    return order


async def get_order(db: AsyncSession, order_id: str) -> Order:
    order = await db.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found")
    return order


async def list_orders(
    db: AsyncSession,
    restaurant_id: str,
    status: Optional[OrderStatus] = None,
    limit: Optional[int] = None,
) -> list[Order]:
    """Orders for a restaurant, newest first, optionally filtered by status."""
    query = (
        select(Order)
        .where(Order.restaurant_id == restaurant_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    if status is not None:
        query = query.where(Order.status == status)
    if limit is not None:
        query = query.limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all())


async def update_order(db: AsyncSession, order: Order, patch: OrderUpdate) -> Order:
    """
    Apply an owner's patch to an order.

    Raises:
        DomainRuleViolation: If the status change is not an allowed
            transition, or the order moved on since it was read
    """
    changes = patch.model_dump(exclude_unset=True)
    target = changes.pop("status", None)
    current = order.status

    try:
        if target is not None and target != current:
            validate_transition(current, target)
            moved = await db.execute(
                update(Order)
                .where(Order.id == order.id, Order.status == current)
                .values(status=target)
                .execution_options(synchronize_session=False)
            )
            if moved.rowcount != 1:
                raise DomainRuleViolation(
                    "Order status was changed by someone else; refresh and try again"
                )

        for field, value in changes.items():
            setattr(order, field, value)

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(order)

    if target is not None and target != current:
        logger.info(f"Order {order.id}: {current.value} -> {order.status.value}")
    return order


async def order_counts(db: AsyncSession, restaurant_id: str) -> dict[str, float]:
    """Total orders, pending orders and revenue (cancelled orders excluded)."""
    total_result = await db.execute(
        select(func.count(Order.id)).where(Order.restaurant_id == restaurant_id)
    )
    pending_result = await db.execute(
        select(func.count(Order.id)).where(
            Order.restaurant_id == restaurant_id,
            Order.status == OrderStatus.PENDING,
        )
    )
    revenue_result = await db.execute(
        select(func.sum(Order.total_price)).where(
            Order.restaurant_id == restaurant_id,
            Order.status != OrderStatus.CANCELLED,
        )
    )
    return {
        "total_orders": total_result.scalar() or 0,
        "pending_orders": pending_result.scalar() or 0,
        "total_revenue": round(revenue_result.scalar() or 0.0, 2),
    }
