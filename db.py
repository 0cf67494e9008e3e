from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any
import logging

from redis.asyncio import Redis
from sqlalchemy import event, Engine, text, Result, CursorResult
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import Session

import config
from models.base import Base

# Imports of these models are needed to correctly create tables in the database.
from models.product import Product, Variant
from models.catalog_entry import CatalogEntry, ProductField
from models.customer import Customer, Address

logger = logging.getLogger(__name__)

# HARD DISABLE SQL echo - catalog lookups happen on every cart read
sql_echo = False

engine = create_async_engine(config.DB_URL, echo=sql_echo)
session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

_redis: Redis | None = None


def get_redis() -> Redis:
    """
    Get the shared Redis client used as the cart session store.

    The client is created on first use so that importing this module
    has no network side effects.
    """
    global _redis
    if _redis is None:
        _redis = Redis(
            host=config.REDIS_HOST or "localhost",
            port=config.REDIS_PORT,
            password=config.REDIS_PASSWORD,
            db=config.REDIS_DB,
            decode_responses=True
        )
    return _redis


@asynccontextmanager
async def get_db_session() -> AsyncSession:
    session = None
    try:
        async with session_maker() as async_session:
            session = async_session
            yield session
    finally:
        if session is not None:
            await session.close()


async def session_execute(stmt, session: AsyncSession | Session) -> Result[Any] | CursorResult[Any]:
    if isinstance(session, AsyncSession):
        query_result = await session.execute(stmt)
        return query_result
    else:
        query_result = session.execute(stmt)
        return query_result


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def check_all_tables_exist(session: AsyncSession | Session) -> bool:
    for table in Base.metadata.tables.values():
        sql_query = text("SELECT name FROM sqlite_master WHERE type='table' AND name=:name")
        result = await session_execute(sql_query.bindparams(name=table.name), session)
        if result.scalar() is None:
            return False
    return True


async def create_db_and_tables():
    if config.DB_URL.startswith("sqlite+aiosqlite:///data/"):
        data_folder = Path("data")
        if data_folder.exists() is False:
            data_folder.mkdir()

    async with get_db_session() as session:
        if await check_all_tables_exist(session):
            logger.info("[DB] Catalog tables already exist")
            return

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"[DB] Created {len(Base.metadata.tables)} catalog tables")
