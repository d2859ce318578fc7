"""
ItemDeck Storage — Read-through / write-invalidate caching repository.

Stacks three tiers behind the :class:`ItemStore` contract::

    primary cache (memory | redis)  →  file cache  →  backing store

Reads:
- ``get_by_id`` probes every tier in order and fills the tiers above the
  one that answered.
- ``get_all`` probes only the primary cache, then the store.

Writes go to the store first, then drop every cached copy they could have
made stale; the collection key is dropped on every successful mutation.

Each key carries a generation that every invalidation bumps. A read only
fills the caches if the generation it saw before going to a lower tier is
still current, so a read racing a write cannot put the old value back.
Fills and invalidations are serialized by one lock.

Cache tiers are best-effort: any failure there is logged and absorbed.
Store failures propagate untouched.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Optional

from ..cache.core import ALL_ITEMS_KEY, CacheBackend, item_key
from ..cache.file_cache import FileCache
from ..cache.serializers import RecordSerializer
from .core import ItemStore, Record

logger = logging.getLogger("itemdeck.storage.caching")


class CachingItemRepository(ItemStore):
    """
    Caching decorator around a backing store.

    Fully substitutable for the store it wraps.
    """

    def __init__(
        self,
        store: ItemStore,
        cache: CacheBackend,
        file_cache: FileCache,
        cache_duration_minutes: int = 10,
    ):
        self._store = store
        self._cache = cache
        self._file_cache = file_cache
        self._ttl = cache_duration_minutes * 60
        self._serializer = RecordSerializer()
        self._generations: Dict[str, int] = {}
        self._fill_lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return f"{self._store.name} (with caching)"

    @property
    def store(self) -> ItemStore:
        return self._store

    async def initialize(self) -> None:
        """Start the store; a cache that cannot connect yet is not fatal."""
        await self._store.initialize()
        await self._guard("initialize", self._cache.name, self._cache.initialize())

    async def shutdown(self) -> None:
        await self._cache.shutdown()
        await self._store.shutdown()

    # ── Reads ────────────────────────────────────────────────────────

    async def get_by_id(self, item_id: int) -> Optional[Record]:
        key = item_key(item_id)
        generation = self._generation(key)

        cached = await self._cache_get(key)
        if cached is not None:
            record = self._decode(key, cached)
            if record is not None:
                logger.info(f"Cache HIT for ID: {item_id} (source: {self._cache.name})")
                return record

        logger.debug(f"Cache MISS for ID: {item_id}")

        record = await self._file_cache.get(item_id)
        if record is not None:
            logger.info(f"File cache HIT for ID: {item_id}")
            async with self._fill_lock:
                if self._is_current(key, generation):
                    await self._cache_set(key, self._serializer.dumps(record))
            return record

        logger.debug(f"File cache MISS for ID: {item_id}")

        record = await self._store.get_by_id(item_id)
        if record is not None:
            logger.info(f"Store HIT for ID: {item_id}")
            async with self._fill_lock:
                if self._is_current(key, generation):
                    await self._file_cache.set(item_id, record)
                    await self._cache_set(key, self._serializer.dumps(record))
            return record

        logger.info(f"Complete MISS for ID: {item_id} (cache, file, store)")
        return None

    async def get_all(self) -> List[Record]:
        generation = self._generation(ALL_ITEMS_KEY)

        cached = await self._cache_get(ALL_ITEMS_KEY)
        if cached is not None:
            records = self._decode_many(cached)
            if records is not None:
                logger.info(f"Cache HIT for all items (source: {self._cache.name})")
                return records

        logger.debug("Cache MISS for all items")

        records = await self._store.get_all()
        logger.info(f"Store query for all items returned {len(records)} items")
        async with self._fill_lock:
            if self._is_current(ALL_ITEMS_KEY, generation):
                await self._cache_set(ALL_ITEMS_KEY, self._serializer.dumps_many(records))
        return records

    async def exists(self, item_id: int) -> bool:
        return await self._store.exists(item_id)

    # ── Writes ───────────────────────────────────────────────────────

    async def create(self, record: Record) -> Record:
        created = await self._store.create(record)
        await self._invalidate()
        logger.info(f"Created item with ID: {created.id} and invalidated caches")
        return created

    async def update(self, item_id: int, record: Record) -> Optional[Record]:
        updated = await self._store.update(item_id, record)
        if updated is None:
            return None
        await self._invalidate(item_id)
        logger.info(f"Updated item with ID: {item_id} and invalidated caches")
        return updated

    async def delete(self, item_id: int) -> bool:
        deleted = await self._store.delete(item_id)
        if deleted:
            await self._invalidate(item_id)
            logger.info(f"Deleted item with ID: {item_id} and invalidated caches")
        return deleted

    # ── Cache plumbing ───────────────────────────────────────────────

    def _generation(self, key: str) -> int:
        return self._generations.get(key, 0)

    def _is_current(self, key: str, generation: int) -> bool:
        if self._generation(key) == generation:
            return True
        logger.debug(f"Skipping cache fill for '{key}': invalidated during read")
        return False

    def _bump(self, key: str) -> None:
        self._generations[key] = self._generation(key) + 1

    async def _invalidate(self, item_id: Optional[int] = None) -> None:
        """
        Drop cached copies made stale by a mutation.

        Must run after the store write has completed. The collection is
        always dropped in both tiers. ``FileCache.remove`` already takes the
        file snapshot with it, so ``remove_all`` is only needed when no
        single item is involved.
        """
        async with self._fill_lock:
            self._bump(ALL_ITEMS_KEY)
            if item_id is not None:
                key = item_key(item_id)
                self._bump(key)
                await self._cache_delete(key)
                await self._file_cache.remove(item_id)
            else:
                await self._file_cache.remove_all()
            await self._cache_delete(ALL_ITEMS_KEY)
        logger.debug(f"Invalidated caches for ID: {item_id}")

    async def _guard(self, operation: str, key: str, call: Awaitable[Any]) -> Any:
        try:
            return await call
        except Exception as e:
            logger.error(f"Error during cache {operation} for key '{key}': {e}")
            return None

    async def _cache_get(self, key: str) -> Optional[str]:
        return await self._guard("get", key, self._cache.get(key))

    async def _cache_set(self, key: str, value: str) -> None:
        await self._guard("set", key, self._cache.set(key, value, ttl=self._ttl))

    async def _cache_delete(self, key: str) -> None:
        await self._guard("delete", key, self._cache.delete(key))

    def _decode(self, key: str, data: str) -> Optional[Record]:
        try:
            return self._serializer.loads(data, key=key)
        except Exception as e:
            logger.error(f"Discarding unreadable cache entry '{key}': {e}")
            return None

    def _decode_many(self, data: str) -> Optional[List[Record]]:
        try:
            return self._serializer.loads_many(data, key=ALL_ITEMS_KEY)
        except Exception as e:
            logger.error(f"Discarding unreadable cache entry '{ALL_ITEMS_KEY}': {e}")
            return None
