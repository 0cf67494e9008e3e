"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import sys
import os
from unittest.mock import patch

# Configure the environment before any project module (config, db) is imported
os.environ.setdefault("RUNTIME_ENVIRONMENT", "TEST")
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SHIPPING_ZONES_FILE", "shipping_zones.json")
os.environ.setdefault("LOG_MASK_SECRETS", "true")

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from enums.product_class import ProductClass
from enums.shipping_zone_type import ShippingZoneType
from models.catalog_entry import CatalogEntry, ProductField
from models.customer import Customer, Address
from models.product import Product, Variant
from models.shipping_zone import ShippingZoneDTO, ShippingMethodDTO
from repositories.session import SessionContext


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine (in-memory SQLite shared by all connections)."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool
    )

    # Import and create all tables
    from db import Base
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine):
    """Create test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


# ============================================================================
# Redis / Session Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def redis_client():
    """Create fake Redis client for testing (no real Redis server needed)."""
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def ctx(redis_client):
    """Anonymous session."""
    return SessionContext(redis_client, "session-1", ttl_seconds=3600)


@pytest.fixture
def customer_ctx(redis_client):
    """Session of the logged-in customer seeded by CatalogSeeder.customer()."""
    return SessionContext(redis_client, "session-2", customer_key="jane@example.com", ttl_seconds=3600)


# ============================================================================
# Catalog Fixtures
# ============================================================================

class CatalogSeeder:
    """Inserts catalog rows into the test database."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def product(
        self,
        product_id: str,
        price: float | None = None,
        weight: float | None = None,
        product_class: ProductClass = ProductClass.SIMPLE,
        track_inventory: bool = False,
        inventory: int | None = None,
        variants: list[dict] | None = None,
        attributes: dict | None = None
    ) -> Product:
        product = Product(
            id=product_id,
            slug=product_id,
            title=f"Product {product_id}",
            product_class=product_class.value,
            price=price,
            weight=weight,
            track_inventory=track_inventory,
            inventory=inventory,
            attributes=attributes or {}
        )
        product.variants = [
            Variant(position=position, **variant) for position, variant in enumerate(variants or [])
        ]
        self.session.add(product)
        await self.session.flush()
        return product

    async def entry(self, entry_id: str, collection: str, title: str, data: dict | None = None) -> CatalogEntry:
        entry = CatalogEntry(id=entry_id, collection=collection, slug=entry_id, title=title, data=data or {})
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def field(self, name: str, field_type: str, max_items: int | None = None) -> ProductField:
        field = ProductField(name=name, field_type=field_type, max_items=max_items)
        self.session.add(field)
        await self.session.flush()
        return field

    async def customer(self, addresses: list[dict], slug: str = "jane@example.com") -> Customer:
        customer = Customer(slug=slug, name="Jane Doe")
        customer.addresses = [
            Address(position=position, **address) for position, address in enumerate(addresses)
        ]
        self.session.add(customer)
        await self.session.flush()
        return customer


@pytest.fixture
def catalog(test_session):
    return CatalogSeeder(test_session)


# ============================================================================
# Shipping Zone Fixtures
# ============================================================================

@pytest.fixture
def us_and_rest_zones():
    """A US zone with price and weight rates plus a catch-all zone."""
    return [
        ShippingZoneDTO(
            id="0",
            name="United States",
            type=ShippingZoneType.COUNTRIES,
            countries=["US"],
            price_rates=[ShippingMethodDTO(name="Standard", min=0, rate=5.0)],
            weight_rates=[ShippingMethodDTO(name="Express", max=10, rate=15.0)]
        ),
        ShippingZoneDTO(
            id="1",
            name="Rest of World",
            type=ShippingZoneType.REST,
            price_rates=[ShippingMethodDTO(name="International", rate=19.0)]
        )
    ]


@pytest.fixture
def configured_zones(us_and_rest_zones):
    """Use us_and_rest_zones as the configured shipping zones."""
    with patch('services.shipping.get_shipping_zones', return_value=us_and_rest_zones):
        yield us_and_rest_zones
