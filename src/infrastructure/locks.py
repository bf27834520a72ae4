"""
Per-ride mutation guards.

At most one join/leave may be in flight per ride.  A second request for the
same ride is rejected with ``MutationInProgress`` rather than queued, the
same outcome as disabling the button until the first request resolves.

* ``LocalRideLocks``  -- in-process guard (single API process / tests).
* ``RedisRideLocks``  -- cross-process guard built on ``DistributedLock``.

``DistributedLock`` uses SET NX EX for acquire and a Lua script for
atomic check-and-delete on release.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Protocol

import redis.asyncio as aioredis

from src.domain.errors import MutationInProgress

logger = logging.getLogger(__name__)


class RideLocks(Protocol):
    def hold(self, ride_id: str) -> AsyncContextManager[None]: ...


class LocalRideLocks:
    def __init__(self) -> None:
        self._in_flight: set[str] = set()

    def is_held(self, ride_id: str) -> bool:
        return ride_id in self._in_flight

    @asynccontextmanager
    async def hold(self, ride_id: str) -> AsyncIterator[None]:
        # check-and-add has no await in between, so it is atomic on the loop
        if ride_id in self._in_flight:
            logger.debug("Ride %s already has a change in flight", ride_id)
            raise MutationInProgress(ride_id)
        self._in_flight.add(ride_id)
        try:
            yield
        finally:
            self._in_flight.discard(ride_id)


class DistributedLock:
    def __init__(
        self, client: aioredis.Redis, key: str, ttl_seconds: int = 30
    ):
        self.redis = client
        self.key = f"lock:{key}"
        self.ttl = ttl_seconds
        self.token = str(uuid.uuid4())

    async def acquire(self) -> bool:
        """Try to acquire. Returns True on success."""
        return bool(
            await self.redis.set(self.key, self.token, nx=True, ex=self.ttl)
        )

    async def release(self) -> None:
        """Release only if we still own the lock (atomic via Lua)."""
        lua = """
        if redis.call("get", KEYS[1]) == ARGV[1] then
            return redis.call("del", KEYS[1])
        else
            return 0
        end
        """
        await self.redis.eval(lua, 1, self.key, self.token)


class RedisRideLocks:
    def __init__(self, client: aioredis.Redis, ttl_seconds: int = 30):
        self.redis = client
        self.ttl = ttl_seconds

    @asynccontextmanager
    async def hold(self, ride_id: str) -> AsyncIterator[None]:
        lock = DistributedLock(self.redis, f"ride:{ride_id}", self.ttl)
        if not await lock.acquire():
            logger.debug("Lock for ride %s held by another process", ride_id)
            raise MutationInProgress(ride_id)
        try:
            yield
        finally:
            await lock.release()
