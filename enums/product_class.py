from enum import Enum


class ProductClass(str, Enum):
    SIMPLE = "simple"     # Single price and inventory on the product itself
    COMPLEX = "complex"   # Price and inventory live on the variants
