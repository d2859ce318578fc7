"""
ItemDeck Cache — Secondary on-disk cache.

One JSON file per entry. The file name embeds the entry's absolute UTC
expiry, truncated to the minute::

    item_<id>_<yyyyMMddHHmm>.json
    all_items_<yyyyMMddHHmm>.json

An entry whose stamp is in the past (or unreadable) is deleted on lookup
and reported as a miss. Every failure degrades to a miss or a no-op; the
file cache is never a hard dependency.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, List, Optional

import aiofiles

from ..storage.core import Record, utcnow
from .serializers import RecordSerializer

logger = logging.getLogger("itemdeck.cache.file")

STAMP_FORMAT = "%Y%m%d%H%M"
ALL_ITEMS_PREFIX = "all_items"


class FileCache:
    """
    File-based cache tier between the primary cache and the backing store.

    Example:
        >>> cache = FileCache("/tmp/itemdeck-cache", duration_minutes=30)
        >>> await cache.set(1, record)
        >>> await cache.get(1)
    """

    def __init__(
        self,
        path: str | Path,
        duration_minutes: int = 30,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            path: Cache directory (created if missing)
            duration_minutes: Lifetime of each written entry
            clock: Source of aware UTC "now" (wall clock by default)
        """
        self.directory = Path(path)
        self.duration = timedelta(minutes=duration_minutes)
        self._clock = clock or utcnow
        self._serializer = RecordSerializer(indent=2)
        self._lock = asyncio.Lock()
        self.directory.mkdir(parents=True, exist_ok=True)

    # ── Naming ───────────────────────────────────────────────────────

    @staticmethod
    def _item_prefix(item_id: int) -> str:
        return f"item_{item_id}"

    def _entries(self, prefix: str) -> List[Path]:
        return list(self.directory.glob(f"{prefix}_*.json"))

    @staticmethod
    def expiry_of(path: Path) -> Optional[datetime]:
        """Embedded expiry of an entry file, or None if it cannot be parsed."""
        stamp = path.stem.rsplit("_", 1)[-1]
        try:
            return datetime.strptime(stamp, STAMP_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            return None

    def _path_for(self, prefix: str) -> Path:
        expires = self._clock() + self.duration
        return self.directory / f"{prefix}_{expires.strftime(STAMP_FORMAT)}.json"

    # ── Raw I/O ──────────────────────────────────────────────────────

    async def _read_live(self, prefix: str) -> Optional[str]:
        """Contents of the freshest unexpired entry; expired ones are removed."""
        now = self._clock()
        live = []
        async with self._lock:
            for path in self._entries(prefix):
                expires = self.expiry_of(path)
                if expires is None or now > expires:
                    path.unlink(missing_ok=True)
                    logger.debug(f"File cache entry expired: {path.name}")
                    continue
                live.append((expires, path))

            if not live:
                return None

            _, newest = max(live)
            async with aiofiles.open(newest, "r", encoding="utf-8") as f:
                return await f.read()

    async def _write(self, prefix: str, data: str) -> None:
        async with self._lock:
            for stale in self._entries(prefix):
                stale.unlink(missing_ok=True)

            path = self._path_for(prefix)
            temp_path = path.with_suffix(".tmp")
            async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
                await f.write(data)
            temp_path.replace(path)

    async def _delete(self, prefix: str) -> int:
        async with self._lock:
            removed = 0
            for path in self._entries(prefix):
                path.unlink(missing_ok=True)
                removed += 1
            return removed

    # ── Public API ───────────────────────────────────────────────────

    async def get(self, item_id: int) -> Optional[Record]:
        prefix = self._item_prefix(item_id)
        try:
            data = await self._read_live(prefix)
            if data is None:
                logger.debug(f"File cache miss for ID: {item_id}")
                return None
            record = self._serializer.loads(data, key=prefix)
            logger.debug(f"File cache hit for ID: {item_id}")
            return record
        except Exception as e:
            logger.error(f"Error reading from file cache for ID {item_id}: {e}")
            return None

    async def get_all(self) -> Optional[List[Record]]:
        try:
            data = await self._read_live(ALL_ITEMS_PREFIX)
            if data is None:
                logger.debug("File cache miss for all items")
                return None
            records = self._serializer.loads_many(data, key=ALL_ITEMS_PREFIX)
            logger.debug("File cache hit for all items")
            return records
        except Exception as e:
            logger.error(f"Error reading all items from file cache: {e}")
            return None

    async def set(self, item_id: int, record: Record) -> None:
        try:
            await self._write(self._item_prefix(item_id), self._serializer.dumps(record))
            logger.debug(f"Saved item to file cache with ID: {item_id}")
        except Exception as e:
            logger.error(f"Error writing to file cache for ID {item_id}: {e}")

    async def set_all(self, records: List[Record]) -> None:
        try:
            await self._write(ALL_ITEMS_PREFIX, self._serializer.dumps_many(records))
            logger.debug(f"Saved {len(records)} items to file cache")
        except Exception as e:
            logger.error(f"Error writing all items to file cache: {e}")

    async def remove(self, item_id: int) -> None:
        """Drop an item entry and, with it, the collection snapshot."""
        try:
            if await self._delete(self._item_prefix(item_id)):
                logger.debug(f"Removed item from file cache with ID: {item_id}")
            if await self._delete(ALL_ITEMS_PREFIX):
                logger.debug("Invalidated all items file cache due to item change")
        except Exception as e:
            logger.error(f"Error removing from file cache for ID {item_id}: {e}")

    async def remove_all(self) -> None:
        """Drop only the collection snapshot."""
        try:
            if await self._delete(ALL_ITEMS_PREFIX):
                logger.debug("Invalidated all items file cache")
        except Exception as e:
            logger.error(f"Error invalidating all items file cache: {e}")

    async def clear(self) -> None:
        try:
            async with self._lock:
                for path in self.directory.iterdir():
                    if path.is_file() and path.suffix in (".json", ".tmp"):
                        path.unlink(missing_ok=True)
            logger.debug("Cleared file cache")
        except Exception as e:
            logger.error(f"Error clearing file cache: {e}")
