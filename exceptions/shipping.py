"""
Shipping-related exceptions.
"""

from enums.cart_error_kind import CartErrorKind
from .base import CartEngineException


class ShippingException(CartEngineException):
    """Base exception for shipping-related errors."""
    pass


class ShippingMethodUnavailableException(ShippingException):
    """Raised when the chosen shipping method is not eligible for the current cart."""

    kind = CartErrorKind.SHIPPING_METHOD_UNAVAILABLE

    def __init__(self, method_key: str, zone_id: str | None):
        super().__init__(
            f"Shipping method '{method_key}' is not available for zone {zone_id}",
            details={'method_key': method_key, 'zone_id': zone_id}
        )
        self.method_key = method_key
        self.zone_id = zone_id
