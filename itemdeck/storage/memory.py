"""
ItemDeck Storage — Transient in-process store.

Records live in a list in insertion order. Id assignment and every
mutation happen under one asyncio.Lock, so concurrent creates never
share an id and deleted ids are never handed out again.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from .core import ItemStore, Record, utcnow

logger = logging.getLogger("itemdeck.storage.memory")


class MemoryItemStore(ItemStore):
    """In-memory record storage for development and testing."""

    def __init__(self, seed: int = 1):
        if seed < 1:
            raise ValueError("Id seed must be positive")
        self._records: List[Record] = []
        self._next_id = seed
        self._lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return "memory"

    def _find(self, item_id: int) -> Optional[Record]:
        for record in self._records:
            if record.id == item_id:
                return record
        return None

    async def get_by_id(self, item_id: int) -> Optional[Record]:
        record = self._find(item_id)
        return record.copy() if record else None

    async def get_all(self) -> List[Record]:
        return [record.copy() for record in self._records]

    async def create(self, record: Record) -> Record:
        async with self._lock:
            assigned = self._next_id
            self._next_id += 1
            stored = Record(id=assigned, value=record.value, created_at=utcnow())
            self._records.append(stored)

        logger.debug(f"Stored item {assigned}")
        return stored.copy()

    async def update(self, item_id: int, record: Record) -> Optional[Record]:
        async with self._lock:
            existing = self._find(item_id)
            if existing is None:
                return None
            existing.value = record.value
            return existing.copy()

    async def delete(self, item_id: int) -> bool:
        async with self._lock:
            existing = self._find(item_id)
            if existing is None:
                return False
            self._records.remove(existing)
            return True

    async def exists(self, item_id: int) -> bool:
        return self._find(item_id) is not None

    @property
    def next_id(self) -> int:
        """Id the next create will receive."""
        return self._next_id
