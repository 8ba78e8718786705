"""
SQLAlchemy Database Models

One table per tenant-scoped store:
- Restaurant (the tenant root)
- MenuItem
- Order (line items kept as a JSON snapshot)
- Review (optionally carries a one-time discount code)

Version: 1.0.0
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
)

from qrdine.database import Base


def generate_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


STATUS_FLOW = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.COMPLETED,
]


def next_status(status: OrderStatus) -> Optional[OrderStatus]:
    """The next forward step for an order, or None once it is terminal."""
    if status not in STATUS_FLOW:
        return None
    position = STATUS_FLOW.index(status)
    if position + 1 < len(STATUS_FLOW):
        return STATUS_FLOW[position + 1]
    return None


class Restaurant(Base):
    """
    Restaurant account - the tenant every other row belongs to.

    Operating hours and discount settings are stored flat and exposed as
    nested dicts through the ``operating_hours`` and ``discount_config``
    properties.
    """
    __tablename__ = "restaurants"

    id = Column(String(32), primary_key=True, default=generate_id)

    # =========================================================================
    # IDENTITY
    # =========================================================================
    name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)

    # =========================================================================
    # CONTACT
    # =========================================================================
    address = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=False)
    description = Column(Text, nullable=True)
    qr_code_url = Column(String(500), nullable=True)

    # =========================================================================
    # OPERATING HOURS ("HH:MM")
    # =========================================================================
    open_time = Column(String(5), nullable=False, default="09:00")
    close_time = Column(String(5), nullable=False, default="22:00")

    # =========================================================================
    # REVIEW DISCOUNTS
    # =========================================================================
    discount_enabled = Column(Boolean, nullable=False, default=False)
    discount_percentage = Column(Integer, nullable=False, default=10)
    discount_min_order_amount = Column(Float, nullable=False, default=0.0)

    # =========================================================================
    # TIMESTAMPS
    # =========================================================================
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    @property
    def operating_hours(self) -> dict[str, str]:
        return {"open": self.open_time, "close": self.close_time}

    @property
    def discount_config(self) -> dict:
        return {
            "enabled": self.discount_enabled,
            "percentage": self.discount_percentage,
            "min_order_amount": self.discount_min_order_amount,
        }

    def __repr__(self):
        return f"<Restaurant {self.id} - {self.name}>"


class MenuItem(Base):
    """A dish or drink offered by one restaurant."""
    __tablename__ = "menu_items"
    __table_args__ = (
        Index("ix_menu_items_restaurant_category", "restaurant_id", "category"),
    )

    id = Column(String(32), primary_key=True, default=generate_id)
    restaurant_id = Column(String(32), ForeignKey("restaurants.id"), nullable=False, index=True)

    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    category = Column(String(80), nullable=False)
    image = Column(String(500), nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    def __repr__(self):
        return f"<MenuItem {self.id} - {self.name} ({self.category})>"


class Order(Base):
    """
    Customer order placed from a table.

    ``items`` is a list of ``{menu_item_id, name, price, quantity}`` dicts
    captured when the order was placed; later menu edits never touch it.
    ``total_price`` already has ``discount_applied`` subtracted.
    """
    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_restaurant_status", "restaurant_id", "status"),
        Index("ix_orders_restaurant_created", "restaurant_id", "created_at"),
    )

    id = Column(String(32), primary_key=True, default=generate_id)
    restaurant_id = Column(String(32), ForeignKey("restaurants.id"), nullable=False)

    # =========================================================================
    # ORDER DETAILS
    # =========================================================================
    items = Column(JSON, nullable=False)
    table_number = Column(String(20), nullable=True)
    customer_note = Column(Text, nullable=True)

    # =========================================================================
    # PRICING
    # =========================================================================
    total_price = Column(Float, nullable=False)
    discount_applied = Column(Float, nullable=False, default=0.0)
    discount_code = Column(String(40), nullable=True)

    # =========================================================================
    # ORDER STATUS
    # =========================================================================
    status = Column(
        Enum(OrderStatus),
        default=OrderStatus.PENDING,
        nullable=False,
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    @property
    def next_status(self) -> Optional[OrderStatus]:
        """Status the owner's "mark as ..." action moves this order to."""
        return next_status(self.status)

    def __repr__(self):
        return f"<Order {self.id} - {self.status.value} - {self.total_price}>"


class Review(Base):
    """
    Customer feedback for a single order.

    When the restaurant had discounts enabled at review time the review
    carries a one-time ``discount_code`` worth ``discount_earned`` percent;
    ``is_redeemed`` flips once, when a later order consumes it.
    """
    __tablename__ = "reviews"
    __table_args__ = (
        Index("ix_reviews_restaurant_created", "restaurant_id", "created_at"),
    )

    id = Column(String(32), primary_key=True, default=generate_id)
    restaurant_id = Column(String(32), ForeignKey("restaurants.id"), nullable=False)
    order_id = Column(String(32), ForeignKey("orders.id"), nullable=False, unique=True)

    food_rating = Column(Integer, nullable=False)
    restaurant_rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)

    # =========================================================================
    # DISCOUNT
    # =========================================================================
    discount_earned = Column(Integer, nullable=False, default=0)
    discount_code = Column(String(40), nullable=True, unique=True)
    is_redeemed = Column(Boolean, nullable=False, default=False)
    redeemed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    def __repr__(self):
        return f"<Review {self.id} - order {self.order_id}>"
