"""
Base exception classes for the cart engine.
"""

from enums.cart_error_kind import CartErrorKind


class CartEngineException(Exception):
    """
    Base exception for all cart engine errors.

    All custom exceptions raised by the cart services inherit from this class.
    This allows catching every request-rejecting failure with a single handler
    (see CartService, which turns them into tagged results).

    Attributes:
        message: Human-readable error message
        details: Optional dict with additional context (product id, variant id, quantities)
        kind: Identifying error kind for callers that render their own messages
    """

    kind: CartErrorKind | None = None

    def __init__(self, message: str, details: dict | None = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            details: Optional dict with additional context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation with context."""
        if self.details:
            details_str = ', '.join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.__class__.__name__}('{self.message}', {details_str})"
        return f"{self.__class__.__name__}('{self.message}')"
