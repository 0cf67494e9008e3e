"""
Custom exceptions for the cart engine.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
CartEngineException (base)
├── CartException
│   ├── ProductNotFoundException
│   ├── VariantRequiredException
│   ├── VariantNotFoundException
│   └── InsufficientStockException
└── ShippingException
    └── ShippingMethodUnavailableException

Usage:
------
Services raise specific exceptions:
    raise ProductNotFoundException(product_id="p-1")

The cart facade catches them and returns a tagged result:
    result = await CartService.add_item(ctx, "cart", candidate, session)
    if not result.success:
        render(result.error, result.details)
"""

from .base import CartEngineException
from .cart import (
    CartException,
    ProductNotFoundException,
    VariantRequiredException,
    VariantNotFoundException,
    InsufficientStockException
)
from .shipping import ShippingException, ShippingMethodUnavailableException

__all__ = [
    # Base
    'CartEngineException',

    # Cart
    'CartException',
    'ProductNotFoundException',
    'VariantRequiredException',
    'VariantNotFoundException',
    'InsufficientStockException',

    # Shipping
    'ShippingException',
    'ShippingMethodUnavailableException',
]
