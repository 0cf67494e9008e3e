"""
Product Enrichment

Turns a catalog product into the payload attached to a cart line:
- administrative / listing fields are removed so they never reach customers
- relation fields (vendor, type, collections, ...) are replaced by the entries
  they point to, one level deep
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.field_cardinality import FieldKind, FieldCardinality
from models.catalog_entry import CatalogEntryDTO, ProductFieldKindDTO
from models.product import ProductDTO, ProductViewDTO
from services.catalog import CatalogService

logger = logging.getLogger(__name__)

HIDDEN_FIELDS = frozenset({
    'columns', 'products', 'is_entry', 'order', 'order_type',
    'content', 'content_raw',
    'listing_image', 'listing_type', 'listing_vendor', 'listing_inventory',
    'edit_url', 'uri', 'url_path',
})


def strip_hidden_fields(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key not in HIDDEN_FIELDS}


class EnrichmentService:

    @staticmethod
    async def enrich_product(
        product: ProductDTO,
        field_kinds: dict[str, ProductFieldKindDTO],
        session: AsyncSession | Session
    ) -> ProductViewDTO:
        """
        Build the consumer-facing view of a product.

        Single-valued relation fields are replaced by the resolved entry, each
        element of a multi-valued relation field is replaced in place. Ids that
        no longer resolve are kept as they are.

        Args:
            product: Product as returned by the catalog
            field_kinds: Field-kind table from CatalogService.get_product_fields()
            session: Database session

        Returns:
            ProductViewDTO
        """
        attributes = strip_hidden_fields(product.attributes)

        for field_name, field_kind in field_kinds.items():
            if field_kind.kind != FieldKind.RELATION:
                continue
            value = attributes.get(field_name)
            if value is None or value == "" or value == []:
                continue

            if field_kind.cardinality == FieldCardinality.SINGLE:
                attributes[field_name] = await EnrichmentService._resolve_relation(value, session)
            elif isinstance(value, list):
                attributes[field_name] = [
                    await EnrichmentService._resolve_relation(entry_id, session) for entry_id in value
                ]
            else:
                # Multi-valued field holding a single id
                attributes[field_name] = await EnrichmentService._resolve_relation(value, session)

        product_data = product.model_dump(exclude={'attributes'})
        return ProductViewDTO(**product_data, attributes=attributes)

    @staticmethod
    async def _resolve_relation(entry_id: Any, session: AsyncSession | Session) -> Any:
        if not isinstance(entry_id, str):
            return entry_id
        entry = await CatalogService.find_entry(entry_id, session)
        if entry is None:
            logger.debug(f"[Enrichment] Relation {entry_id} not found, keeping id")
            return entry_id
        return EnrichmentService._entry_view(entry)

    @staticmethod
    def _entry_view(entry: CatalogEntryDTO) -> dict[str, Any]:
        entry_view = entry.model_dump(exclude={'data'})
        entry_view.update(strip_hidden_fields(entry.data))
        return entry_view
