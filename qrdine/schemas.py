"""
Pydantic Schemas for Request/Response Validation

Field names are snake_case in Python and camelCase on the wire
(``restaurantId``, ``totalPrice``, ``discountConfig``...). Requests
accept either spelling.

Version: 1.0.0
"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from qrdine.models import OrderStatus


TIME_OF_DAY_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
EMAIL_PATTERN = re.compile(r"^[\w\.\+-]+@[\w\.-]+\.\w+$")


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, ORM attribute loading."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PatchModel(CamelModel):
    """Base for partial updates; unknown fields are rejected."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


def _validate_email(v: str) -> str:
    v = v.strip().lower()
    if not EMAIL_PATTERN.match(v):
        raise ValueError("Invalid email format")
    return v


def _validate_category(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Category cannot be blank")
    return v


# =============================================================================
# RESTAURANT SETTINGS
# =============================================================================

class OperatingHours(CamelModel):
    open: str = Field(..., pattern=TIME_OF_DAY_PATTERN, examples=["09:00"])
    close: str = Field(..., pattern=TIME_OF_DAY_PATTERN, examples=["22:00"])


class OperatingHoursUpdate(PatchModel):
    open: Optional[str] = Field(None, pattern=TIME_OF_DAY_PATTERN)
    close: Optional[str] = Field(None, pattern=TIME_OF_DAY_PATTERN)


class DiscountConfig(CamelModel):
    enabled: bool
    percentage: int
    min_order_amount: float


class DiscountConfigUpdate(PatchModel):
    enabled: Optional[bool] = None
    percentage: Optional[int] = Field(None, ge=1, le=100)
    min_order_amount: Optional[float] = Field(None, ge=0)


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class RestaurantCreate(CamelModel):
    """Registration form for a new restaurant."""
    name: str = Field(..., min_length=1, max_length=120, examples=["Spice Route"])
    email: str = Field(..., max_length=255, examples=["owner@spiceroute.in"])
    password: str = Field(..., min_length=6, max_length=128)
    address: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=5, max_length=30, examples=["+91 98765 43210"])
    description: Optional[str] = Field(None, max_length=2000)
    operating_hours: Optional[OperatingHours] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _validate_email(v)


class RestaurantUpdate(PatchModel):
    """Partial update of a restaurant's profile and settings."""
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    email: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, min_length=5, max_length=30)
    description: Optional[str] = Field(None, max_length=2000)
    operating_hours: Optional[OperatingHoursUpdate] = None
    discount_config: Optional[DiscountConfigUpdate] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _validate_email(v)


class MenuItemCreate(CamelModel):
    restaurant_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=120, examples=["Paneer Tikka"])
    price: float = Field(..., ge=0, examples=[250.0])
    category: str = Field(..., min_length=1, max_length=80, examples=["Starters"])
    description: Optional[str] = Field(None, max_length=1000)
    image: Optional[str] = Field(None, max_length=500)

    @field_validator("category")
    @classmethod
    def strip_category(cls, v: str) -> str:
        return _validate_category(v)


class MenuItemUpdate(PatchModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1, max_length=80)
    description: Optional[str] = Field(None, max_length=1000)
    image: Optional[str] = Field(None, max_length=500)
    is_available: Optional[bool] = None

    @field_validator("category")
    @classmethod
    def strip_category(cls, v: Optional[str]) -> Optional[str]:
        return _validate_category(v)


class OrderItemCreate(CamelModel):
    """A menu item and quantity picked by the customer."""
    menu_item_id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1, le=99, examples=[2])


class OrderCreate(CamelModel):
    """Request schema for placing an order from a table."""
    restaurant_id: str = Field(..., min_length=1)
    items: List[OrderItemCreate] = Field(..., min_length=1)
    table_number: Optional[str] = Field(None, max_length=20, examples=["7"])
    customer_note: Optional[str] = Field(None, max_length=500)
    discount_code: Optional[str] = Field(None, max_length=40, examples=["SAVE10-AB12"])

    @field_validator("discount_code")
    @classmethod
    def normalize_code(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip().upper()
        return v or None


class OrderUpdate(PatchModel):
    """Owner-side patch; items and prices are not editable."""
    status: Optional[OrderStatus] = None
    table_number: Optional[str] = Field(None, max_length=20)
    customer_note: Optional[str] = Field(None, max_length=500)


class ReviewCreate(CamelModel):
    restaurant_id: str = Field(..., min_length=1)
    order_id: str = Field(..., min_length=1)
    food_rating: int = Field(..., ge=1, le=5)
    restaurant_rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class SessionCreate(CamelModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class RestaurantResponse(CamelModel):
    """Public restaurant profile (never includes the password hash)."""
    id: str
    name: str
    email: str
    address: str
    phone: str
    description: Optional[str]
    qr_code_url: Optional[str]
    operating_hours: OperatingHours
    discount_config: DiscountConfig
    created_at: datetime
    updated_at: datetime


class MenuItemResponse(CamelModel):
    id: str
    restaurant_id: str
    name: str
    description: Optional[str]
    price: float
    category: str
    image: Optional[str]
    is_available: bool
    created_at: datetime
    updated_at: datetime


class MenuCategory(CamelModel):
    category: str
    items: List[MenuItemResponse]


class RestaurantEnvelope(CamelModel):
    restaurant: RestaurantResponse


class RestaurantCreateResponse(CamelModel):
    message: str
    restaurant: RestaurantResponse


class RestaurantDetailResponse(CamelModel):
    """Restaurant plus its available menu, as shown to a customer."""
    restaurant: RestaurantResponse
    menu: List[MenuCategory]


class MenuListResponse(CamelModel):
    menu: List[MenuCategory]
    items: List[MenuItemResponse]


class MenuItemEnvelope(CamelModel):
    menu_item: MenuItemResponse


class MessageResponse(CamelModel):
    message: str


class OrderLineItem(CamelModel):
    menu_item_id: str
    name: str
    price: float
    quantity: int


class OrderResponse(CamelModel):
    id: str
    restaurant_id: str
    items: List[OrderLineItem]
    total_price: float
    discount_applied: float
    discount_code: Optional[str]
    status: OrderStatus
    next_status: Optional[OrderStatus] = None
    table_number: Optional[str]
    customer_note: Optional[str]
    created_at: datetime
    updated_at: datetime


class OrderEnvelope(CamelModel):
    order: OrderResponse


class OrderListResponse(CamelModel):
    total: int
    orders: List[OrderResponse]


class ReviewResponse(CamelModel):
    id: str
    restaurant_id: str
    order_id: str
    food_rating: int
    restaurant_rating: int
    comment: Optional[str]
    discount_earned: int
    discount_code: Optional[str]
    is_redeemed: bool
    created_at: datetime


class ReviewStats(CamelModel):
    total_reviews: int
    avg_food_rating: float
    avg_restaurant_rating: float


class ReviewListResponse(CamelModel):
    reviews: List[ReviewResponse]
    stats: ReviewStats


class ReviewCreateResponse(CamelModel):
    review: ReviewResponse
    message: str
    discount_code: Optional[str] = None


class SessionResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    restaurant: RestaurantResponse


class DashboardSummary(CamelModel):
    """Headline numbers for the owner dashboard."""
    total_orders: int
    pending_orders: int
    total_revenue: float
    total_reviews: int
    avg_food_rating: float
    avg_restaurant_rating: float
    recent_orders: List[OrderResponse]


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    environment: str
    timestamp: datetime
