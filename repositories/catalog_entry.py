from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute
from models.catalog_entry import CatalogEntry, CatalogEntryDTO, ProductField


class CatalogEntryRepository:
    @staticmethod
    async def get_by_id(entry_id: str, session: AsyncSession | Session) -> CatalogEntryDTO | None:
        stmt = select(CatalogEntry).where(CatalogEntry.id == entry_id)
        entry = await session_execute(stmt, session)
        entry = entry.scalar()
        if entry is None:
            return None
        return CatalogEntryDTO.model_validate(entry, from_attributes=True)


class ProductFieldRepository:
    @staticmethod
    async def get_all(session: AsyncSession | Session) -> list[ProductField]:
        stmt = select(ProductField).order_by(ProductField.name)
        result = await session_execute(stmt, session)
        return list(result.scalars().all())
