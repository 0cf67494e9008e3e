"""
Models Package

This file ensures all SQLAlchemy models are imported and registered,
which is required for relationships to work correctly.
"""

from models.base import Base
from models.product import Product, Variant
from models.catalog_entry import CatalogEntry, ProductField
from models.customer import Customer, Address

__all__ = [
    'Base',
    'Product',
    'Variant',
    'CatalogEntry',
    'ProductField',
    'Customer',
    'Address',
]
