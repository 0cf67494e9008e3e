from typing import Any

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Column, Integer, String, JSON

from enums.field_cardinality import FieldKind, FieldCardinality
from models.base import Base


# Catalog entries a product relation field can point to (vendor, product type,
# collection, ...). Products store only the ids; the cart resolves them on read.
class CatalogEntry(Base):
    __tablename__ = 'catalog_entries'

    id = Column(String, primary_key=True)
    collection = Column(String, nullable=False)
    slug = Column(String, nullable=True)
    title = Column(String, nullable=False, default="")
    data = Column(JSON, nullable=False, default=dict)


# Fieldset definition of the products collection
class ProductField(Base):
    __tablename__ = 'product_fields'

    name = Column(String, primary_key=True)
    field_type = Column(String, nullable=False)  # "collection" fields hold relations
    max_items = Column(Integer, nullable=True)   # 1 = single relation, NULL/other = many


class CatalogEntryDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    collection: str
    slug: str | None = None
    title: str = ""
    data: dict[str, Any] = {}


class ProductFieldKindDTO(BaseModel):
    """One row of the declarative field-kind table used by the enrichment pass."""
    name: str
    kind: FieldKind = FieldKind.SCALAR
    cardinality: FieldCardinality = FieldCardinality.SINGLE
