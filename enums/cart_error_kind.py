from enum import Enum


class CartErrorKind(str, Enum):
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    VARIANT_REQUIRED = "VARIANT_REQUIRED"
    VARIANT_NOT_FOUND = "VARIANT_NOT_FOUND"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    SHIPPING_METHOD_UNAVAILABLE = "SHIPPING_METHOD_UNAVAILABLE"
