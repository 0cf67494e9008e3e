import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.field_cardinality import FieldKind, FieldCardinality
from models.catalog_entry import CatalogEntryDTO, ProductFieldKindDTO
from models.customer import AddressDTO
from models.product import ProductDTO, VariantDTO
from repositories.catalog_entry import CatalogEntryRepository, ProductFieldRepository
from repositories.customer import CustomerRepository
from repositories.product import ProductRepository

logger = logging.getLogger(__name__)

# Fieldset type whose values are ids of other catalog entries
RELATION_FIELD_TYPE = "collection"


class CatalogService:
    """Catalog adapter: the only way cart services read products and customers."""

    @staticmethod
    async def find_product(product_id: str, session: AsyncSession | Session) -> ProductDTO | None:
        return await ProductRepository.get_by_id(product_id, session)

    @staticmethod
    def find_variant(product: ProductDTO, variant_id: str | None) -> VariantDTO | None:
        if not variant_id:
            return None
        for variant in product.variants:
            if variant.id == variant_id:
                return variant
        return None

    @staticmethod
    async def find_entry(entry_id: str, session: AsyncSession | Session) -> CatalogEntryDTO | None:
        return await CatalogEntryRepository.get_by_id(entry_id, session)

    @staticmethod
    async def get_product_fields(session: AsyncSession | Session) -> dict[str, ProductFieldKindDTO]:
        """
        Build the field-kind table of the products fieldset.

        Fields of type "collection" are relations; max_items == 1 makes them
        single-valued, anything else holds a list of ids.

        Returns:
            dict: {field_name: ProductFieldKindDTO}
        """
        fields = await ProductFieldRepository.get_all(session)
        field_kinds = {}
        for field in fields:
            if field.field_type == RELATION_FIELD_TYPE:
                cardinality = FieldCardinality.SINGLE if field.max_items == 1 else FieldCardinality.MANY
                field_kinds[field.name] = ProductFieldKindDTO(
                    name=field.name, kind=FieldKind.RELATION, cardinality=cardinality
                )
            else:
                field_kinds[field.name] = ProductFieldKindDTO(name=field.name)
        return field_kinds

    @staticmethod
    async def find_customer_addresses(
        customer_key: str,
        session: AsyncSession | Session
    ) -> list[AddressDTO] | None:
        customer = await CustomerRepository.get_by_slug_or_key(customer_key, session)
        if customer is None:
            logger.debug("[Catalog] Customer not found for current session")
            return None
        return customer.addresses
