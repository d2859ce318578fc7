"""
ItemDeck Cache — Redis backend for distributed caching.

String values under a key prefix, TTL via SETEX. Every driver error is
raised as a CacheBackendFault so the caller can log and degrade.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..core import CacheBackend, CacheStats
from ..faults import CacheBackendFault, CacheConnectionFault

logger = logging.getLogger("itemdeck.cache.redis")


class RedisBackend(CacheBackend):
    """
    Redis-backed cache using redis-py's asyncio client.

    A pre-built client may be passed in; otherwise one is created from
    ``url`` in :meth:`initialize`.
    """

    __slots__ = (
        "_url",
        "_key_prefix",
        "_socket_timeout",
        "_connect_timeout",
        "_redis",
        "_owns_client",
        "_stats",
        "_initialized",
        "_closed",
    )

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        key_prefix: str = "itemdeck:",
        socket_timeout: float = 5.0,
        connect_timeout: float = 5.0,
        client: Any = None,
    ):
        self._url = url
        self._key_prefix = key_prefix
        self._socket_timeout = socket_timeout
        self._connect_timeout = connect_timeout
        self._redis = client
        self._owns_client = client is None
        self._stats = CacheStats(backend="redis")
        self._initialized = False
        self._closed = False

    @property
    def name(self) -> str:
        return "redis"

    @property
    def is_distributed(self) -> bool:
        return True

    async def initialize(self) -> None:
        """
        Connect to Redis and verify the connection.

        Raises:
            CacheConnectionFault: ping failed; the next operation retries
        """
        if self._initialized:
            return
        self._closed = False

        if self._redis is None:
            import redis.asyncio as aioredis

            self._redis = aioredis.from_url(
                self._url,
                socket_timeout=self._socket_timeout,
                socket_connect_timeout=self._connect_timeout,
                decode_responses=True,
            )

        try:
            await self._redis.ping()
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise CacheConnectionFault(self.name, str(e)) from e

        self._initialized = True
        logger.info(f"Redis cache connected: {self._url}")

    async def shutdown(self) -> None:
        """Close the connection pool if this backend created it."""
        if self._redis is not None and self._owns_client:
            await self._redis.aclose()
            self._redis = None
        self._initialized = False
        self._closed = True

    def _full_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    async def _client(self, operation: str):
        """
        Connected client, connecting on first use.

        A failed connect is retried on the next call, so the tier comes
        back on its own once Redis is reachable again.
        """
        if self._closed:
            self._stats.errors += 1
            raise CacheConnectionFault(self.name, f"backend shut down ({operation})")
        if not self._initialized:
            try:
                await self.initialize()
            except CacheConnectionFault:
                self._stats.errors += 1
                raise
        return self._redis

    async def get(self, key: str) -> Optional[str]:
        client = await self._client("get")
        try:
            raw = await client.get(self._full_key(key))
        except Exception as e:
            self._stats.errors += 1
            raise CacheBackendFault(self.name, "get", str(e)) from e

        if raw is None:
            self._stats.misses += 1
            return None
        self._stats.hits += 1
        return raw.decode("utf-8") if isinstance(raw, bytes) else raw

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        client = await self._client("set")
        try:
            if ttl and ttl > 0:
                await client.setex(self._full_key(key), ttl, value)
            else:
                await client.set(self._full_key(key), value)
        except Exception as e:
            self._stats.errors += 1
            raise CacheBackendFault(self.name, "set", str(e)) from e
        self._stats.sets += 1

    async def delete(self, key: str) -> bool:
        client = await self._client("delete")
        try:
            removed = await client.delete(self._full_key(key))
        except Exception as e:
            self._stats.errors += 1
            raise CacheBackendFault(self.name, "delete", str(e)) from e
        if removed:
            self._stats.deletes += 1
        return bool(removed)

    async def clear(self) -> int:
        """Delete every key under this backend's prefix."""
        client = await self._client("clear")
        count = 0
        try:
            async for full_key in client.scan_iter(match=f"{self._key_prefix}*"):
                count += await client.delete(full_key)
        except Exception as e:
            self._stats.errors += 1
            raise CacheBackendFault(self.name, "clear", str(e)) from e
        logger.info(f"Cleared {count} Redis cache entries")
        return count

    async def stats(self) -> CacheStats:
        return self._stats
