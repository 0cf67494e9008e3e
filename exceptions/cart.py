"""
Cart-related exceptions.
"""

from enums.cart_error_kind import CartErrorKind
from .base import CartEngineException


class CartException(CartEngineException):
    """Base exception for cart mutation errors."""
    pass


class ProductNotFoundException(CartException):
    """Raised when a referenced product does not resolve in the catalog."""

    kind = CartErrorKind.PRODUCT_NOT_FOUND

    def __init__(self, product_id: str):
        super().__init__(
            f"Product {product_id} not found",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class VariantRequiredException(CartException):
    """Raised when a complex product is added without a variant."""

    kind = CartErrorKind.VARIANT_REQUIRED

    def __init__(self, product_id: str):
        super().__init__(
            f"Product {product_id} requires a variant",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class VariantNotFoundException(CartException):
    """Raised when the variant id is not among the product's variants."""

    kind = CartErrorKind.VARIANT_NOT_FOUND

    def __init__(self, product_id: str, variant_id: str | None):
        super().__init__(
            f"Variant {variant_id} not found for product {product_id}",
            details={'product_id': product_id, 'variant_id': variant_id}
        )
        self.product_id = product_id
        self.variant_id = variant_id


class InsufficientStockException(CartException):
    """Raised when the total quantity in cart would exceed tracked inventory."""

    kind = CartErrorKind.INSUFFICIENT_STOCK

    def __init__(self, product_id: str, requested: int, available: int | None, variant_id: str | None = None):
        super().__init__(
            f"Insufficient stock for product {product_id}: requested {requested}, available {available or 0}",
            details={
                'product_id': product_id,
                'variant_id': variant_id,
                'requested': requested,
                'available': available or 0
            }
        )
        self.product_id = product_id
        self.variant_id = variant_id
        self.requested = requested
        self.available = available or 0
