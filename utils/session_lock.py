"""
Per-session locking for cart operations.

A cart document and its session facts are read, changed and written back within
one operation. Requests of the same session must not interleave between the read
and the write, otherwise item changes are lost.

The locks are process-local: all requests of a session must be served by one
worker process.

Usage:
    async with SessionLockRegistry.acquire(session_id):
        cart = await ctx.get_cart_document("cart")
        ...
        await ctx.save_cart_document("cart", cart)
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from weakref import WeakValueDictionary

logger = logging.getLogger(__name__)


class SessionLockRegistry:
    """Process-local registry of one asyncio.Lock per session id."""

    # Locks disappear once no coroutine holds or waits for them
    _locks: "WeakValueDictionary[str, asyncio.Lock]" = WeakValueDictionary()

    @staticmethod
    def get_lock(session_id: str) -> asyncio.Lock:
        lock = SessionLockRegistry._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            SessionLockRegistry._locks[session_id] = lock
        return lock

    @staticmethod
    @asynccontextmanager
    async def acquire(session_id: str) -> AsyncGenerator[None, None]:
        lock = SessionLockRegistry.get_lock(session_id)
        if lock.locked():
            logger.debug(f"[SessionLock] Waiting for session {session_id}")
        async with lock:
            yield
