"""
Domain Exceptions

Every failure a service can report maps onto one HTTP status. Routers let
these propagate; the handlers registered in ``qrdine.main`` turn them into
the standard error envelope.
"""

from typing import Optional


class QRDineError(Exception):
    """Base class for all expected application failures."""

    status_code: int = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationFailed(QRDineError):
    """Missing or malformed input."""
    status_code = 400


class NotFound(QRDineError):
    """Unknown identifier."""
    status_code = 404


class DomainRuleViolation(QRDineError):
    """Well-formed request that breaks a business rule."""
    status_code = 400


class AuthenticationFailed(QRDineError):
    """Missing, expired or invalid credentials."""
    status_code = 401


class PermissionDenied(QRDineError):
    """Authenticated restaurant acting on another tenant's data."""
    status_code = 403


# =============================================================================
# DISCOUNT REDEMPTION
# =============================================================================

class DiscountCodeNotFound(DomainRuleViolation):
    def __init__(self):
        super().__init__("Invalid discount code")


class DiscountCodeAlreadyUsed(DomainRuleViolation):
    def __init__(self):
        super().__init__("Discount code already used")


class DiscountCodeWrongRestaurant(DomainRuleViolation):
    def __init__(self):
        super().__init__("Invalid discount code for this restaurant")


class MinimumOrderNotMet(DomainRuleViolation):
    def __init__(self, minimum: float, currency_symbol: str = "₹"):
        amount = f"{minimum:.2f}"
        if amount.endswith(".00"):
            amount = amount[:-3]
        super().__init__(f"Minimum order of {currency_symbol}{amount} required")
        self.minimum = minimum
