# Products are owned by the catalog. The cart never writes to these tables; it only
# reads them on every recalculation, so a product edited or deleted after it was put
# into a cart is picked up (or skipped) on the next read.
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, JSON, CheckConstraint
from sqlalchemy.orm import relationship

from enums.product_class import ProductClass
from models.base import Base


class Product(Base):
    __tablename__ = 'products'

    id = Column(String, primary_key=True)
    slug = Column(String, nullable=True)
    title = Column(String, nullable=False, default="")
    product_class = Column(String, nullable=False, default=ProductClass.SIMPLE.value)
    price = Column(Float, nullable=True)  # NULL = no price, item is not counted in totals
    weight = Column(Float, nullable=True)
    track_inventory = Column(Boolean, nullable=False, default=False)
    inventory = Column(Integer, nullable=True)

    # Remaining fieldset values (relation ids, listing fields, descriptions, ...)
    attributes = Column(JSON, nullable=False, default=dict)

    variants = relationship(
        "Variant",
        back_populates="product",
        order_by="Variant.position",
        cascade="all, delete-orphan",
        lazy="selectin"
    )


class Variant(Base):
    __tablename__ = 'variants'

    id = Column(String, primary_key=True)
    product_id = Column(String, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    title = Column(String, nullable=True)
    price = Column(Float, nullable=True)
    inventory = Column(Integer, nullable=True)

    product = relationship("Product", back_populates="variants")

    __table_args__ = (
        CheckConstraint('position >= 0', name='check_variant_position_non_negative'),
    )


def _parse_number(v, cast):
    """Coerce catalog values that may arrive as strings; unparsable values become None."""
    if v is None or v == "" or isinstance(v, bool):
        return None
    try:
        return cast(v)
    except (TypeError, ValueError):
        return None


class VariantDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str | None = None
    price: float | None = None
    inventory: int | None = None

    @field_validator('price', mode='before')
    @classmethod
    def parse_price(cls, v):
        return _parse_number(v, float)

    @field_validator('inventory', mode='before')
    @classmethod
    def parse_inventory(cls, v):
        parsed = _parse_number(v, float)
        return int(parsed) if parsed is not None else None


class ProductDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    slug: str | None = None
    title: str = ""
    product_class: ProductClass = ProductClass.SIMPLE
    price: float | None = None
    weight: float | None = None
    track_inventory: bool = False
    inventory: int | None = None
    variants: list[VariantDTO] = []
    attributes: dict[str, Any] = {}

    @field_validator('price', 'weight', mode='before')
    @classmethod
    def parse_amount(cls, v):
        return _parse_number(v, float)

    @field_validator('attributes', mode='before')
    @classmethod
    def default_attributes(cls, v):
        return v or {}

    @property
    def is_complex(self) -> bool:
        return self.product_class == ProductClass.COMPLEX


class ProductViewDTO(ProductDTO):
    """
    Consumer-facing product payload attached to a cart line.

    Administrative listing fields are stripped from attributes and relation
    fields hold resolved entries (dicts) instead of ids.
    """
    pass
