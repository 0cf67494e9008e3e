"""
Session Context

Redis-backed storage for everything the cart engine keeps per user session:
- cart documents, one per instance name ("cart", "wishlist", ...)
- the shipping country chosen for the session
- the selected shipping method key
- the cached default address of the logged-in customer

Every slot is an independent key with the same get/set/forget contract:
    cart:{session_id}:instance:{name}
    cart:{session_id}:shipping_country
    cart:{session_id}:shipping_method
    cart:{session_id}:default_address
"""

import logging
from contextlib import asynccontextmanager

from redis.asyncio import Redis

import config
from models.cart import CartDTO
from models.customer import DefaultAddressDTO
from utils.session_lock import SessionLockRegistry

logger = logging.getLogger(__name__)


class SessionContext:
    """
    Explicit session slots passed into every recalculation / shipping call.

    customer_key identifies the logged-in customer (slug or email) and is None
    for anonymous sessions.
    """

    def __init__(self, redis: Redis, session_id: str, customer_key: str | None = None,
                 ttl_seconds: int | None = None):
        self.redis = redis
        self.session_id = session_id
        self.customer_key = customer_key
        self.ttl_seconds = ttl_seconds or config.SESSION_TTL_SECONDS

    def _key(self, slot: str) -> str:
        return f"cart:{self.session_id}:{slot}"

    async def _get(self, slot: str) -> str | None:
        return await self.redis.get(self._key(slot))

    async def _set(self, slot: str, value: str) -> None:
        await self.redis.set(self._key(slot), value, ex=self.ttl_seconds)

    async def _forget(self, slot: str) -> None:
        await self.redis.delete(self._key(slot))

    @asynccontextmanager
    async def lock(self):
        """Serialize read-modify-write operations for this session."""
        async with SessionLockRegistry.acquire(self.session_id):
            yield self

    # Cart documents

    async def get_cart_document(self, instance: str) -> CartDTO | None:
        raw = await self._get(f"instance:{instance}")
        if raw is None:
            return None
        return CartDTO.model_validate_json(raw)

    async def save_cart_document(self, instance: str, cart: CartDTO) -> None:
        await self._set(f"instance:{instance}", cart.model_dump_json())

    async def delete_cart_document(self, instance: str) -> None:
        await self._forget(f"instance:{instance}")

    # Shipping country

    async def get_shipping_country(self) -> str | None:
        return await self._get("shipping_country")

    async def set_shipping_country(self, country: str) -> None:
        await self._set("shipping_country", country)

    async def forget_shipping_country(self) -> None:
        await self._forget("shipping_country")

    # Selected shipping method

    async def get_shipping_method(self) -> str | None:
        return await self._get("shipping_method")

    async def set_shipping_method(self, method_key: str) -> None:
        await self._set("shipping_method", method_key)

    async def forget_shipping_method(self) -> None:
        await self._forget("shipping_method")

    # Default address cache

    async def get_default_address(self) -> DefaultAddressDTO | None:
        raw = await self._get("default_address")
        if raw is None:
            return None
        return DefaultAddressDTO.model_validate_json(raw)

    async def set_default_address(self, default_address: DefaultAddressDTO) -> None:
        await self._set("default_address", default_address.model_dump_json())

    async def forget_default_address(self) -> None:
        await self._forget("default_address")
