"""Cache providers shared by symbol resolution and the preference ledger.

Both implementations speak JSON strings and degrade to a miss/no-op on
failure, so callers never see a storage error.
"""

import logging
import time
from collections.abc import Callable
from typing import Protocol

import redis.asyncio as aioredis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

DEFAULT_KEY_NAMESPACE = "folio:"


class CacheProvider(Protocol):
    """Protocol for string key/value stores with per-key TTL."""

    async def get(self, key: str) -> str | None:
        """Return the stored value, or None on miss or error."""
        ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value for ``ttl_seconds``."""
        ...

    async def delete(self, key: str) -> None: ...

    async def clear(self) -> None: ...


class InMemoryCacheProvider:
    """Process-local provider; expiry is checked when a key is read."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._store: dict[str, tuple[str, float]] = {}

    async def get(self, key: str) -> str | None:
        item = self._store.get(key)
        if item is None:
            return None
        value, expires_at = item
        if self._clock() >= expires_at:
            del self._store[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._store[key] = (value, self._clock() + ttl_seconds)

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)

    async def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


class RedisCacheProvider:
    """Redis-backed provider with namespaced keys and a lazily created client."""

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        namespace: str = DEFAULT_KEY_NAMESPACE,
        client: aioredis.Redis | None = None,
    ) -> None:
        self.url = url
        self.namespace = namespace
        self._client = client

    @property
    def client(self) -> aioredis.Redis:
        if self._client is None:
            self._client = aioredis.from_url(self.url, decode_responses=True)
        return self._client

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    async def get(self, key: str) -> str | None:
        try:
            raw = await self.client.get(self._key(key))
        except RedisError:
            logger.warning("Redis get failed for %s", key)
            return None
        if raw is None:
            return None
        return raw if isinstance(raw, str) else raw.decode("utf-8", "replace")

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self.client.set(self._key(key), value, ex=max(1, ttl_seconds))
        except RedisError:
            logger.warning("Redis set failed for %s", key)

    async def delete(self, key: str) -> None:
        try:
            await self.client.delete(self._key(key))
        except RedisError:
            logger.warning("Redis delete failed for %s", key)

    async def clear(self) -> None:
        """Delete every key under this provider's namespace."""
        try:
            async for key in self.client.scan_iter(match=f"{self.namespace}*"):
                await self.client.delete(key)
        except RedisError:
            logger.warning("Redis clear failed for namespace %s", self.namespace)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
