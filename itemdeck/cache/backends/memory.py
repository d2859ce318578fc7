"""
ItemDeck Cache — In-process memory backend.

Process-scoped primary cache used when no distributed cache is configured.
Entries expire on an injectable monotonic clock; capacity is bounded with
LRU eviction via OrderedDict. Concurrent access is serialized by an
asyncio.Lock.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import Optional

from ..core import CacheBackend, CacheEntry, CacheStats, Clock, monotonic_clock

logger = logging.getLogger("itemdeck.cache.memory")


class MemoryBackend(CacheBackend):
    """
    In-memory cache backend.

    Expired entries are dropped lazily on access; there is no background
    sweeper, so the backend owns no tasks.
    """

    __slots__ = (
        "_max_size",
        "_store",
        "_lock",
        "_stats",
        "_clock",
        "_initialized",
    )

    def __init__(self, max_size: int = 10000, clock: Optional[Clock] = None):
        """
        Args:
            max_size: Maximum number of entries before LRU eviction
            clock: Monotonic seconds source (``time.monotonic`` by default)
        """
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self._max_size = max_size
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = asyncio.Lock()
        self._stats = CacheStats(max_size=max_size, backend="memory")
        self._clock = clock or monotonic_clock
        self._initialized = False

    @property
    def name(self) -> str:
        return "memory"

    async def initialize(self) -> None:
        self._initialized = True

    async def shutdown(self) -> None:
        async with self._lock:
            self._store.clear()
            self._stats.size = 0
        self._initialized = False

    async def get(self, key: str) -> Optional[str]:
        """O(1) lookup with LRU promotion."""
        async with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._stats.misses += 1
                return None

            if entry.is_expired(self._clock()):
                del self._store[key]
                self._stats.size = len(self._store)
                self._stats.misses += 1
                return None

            self._store.move_to_end(key)
            self._stats.hits += 1
            return entry.value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        async with self._lock:
            now = self._clock()
            self._store.pop(key, None)

            while len(self._store) >= self._max_size:
                evicted, _ = self._store.popitem(last=False)
                self._stats.evictions += 1
                logger.debug(f"Evicted '{evicted}' (capacity {self._max_size})")

            expires_at = now + ttl if ttl is not None and ttl > 0 else None
            self._store[key] = CacheEntry(
                key=key,
                value=value,
                created_at=now,
                expires_at=expires_at,
            )
            self._stats.sets += 1
            self._stats.size = len(self._store)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            if key in self._store:
                del self._store[key]
                self._stats.deletes += 1
                self._stats.size = len(self._store)
                return True
            return False

    async def clear(self) -> int:
        async with self._lock:
            count = len(self._store)
            self._store.clear()
            self._stats.size = 0
            return count

    async def stats(self) -> CacheStats:
        return self._stats
