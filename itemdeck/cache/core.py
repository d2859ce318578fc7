"""
ItemDeck Cache — Core types and the primary-cache contract.

Primary caches hold serialized strings keyed by name. Two key shapes are
used by the caching repository: ``item:<id>`` and ``items:all``.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional


ITEM_KEY_PREFIX = "item:"
ALL_ITEMS_KEY = "items:all"


def item_key(item_id: int) -> str:
    """Cache key for a single record."""
    return f"{ITEM_KEY_PREFIX}{item_id}"


# ============================================================================
# Cache Entry
# ============================================================================

@dataclass(slots=True)
class CacheEntry:
    """
    Single in-process cache entry.

    ``expires_at`` is on the backend's monotonic clock; ``None`` never expires.
    """
    key: str
    value: str
    created_at: float
    expires_at: Optional[float] = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


# ============================================================================
# Cache Stats
# ============================================================================

@dataclass
class CacheStats:
    """Aggregate cache statistics for observability."""
    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0
    evictions: int = 0
    errors: int = 0
    size: int = 0
    max_size: int = 0
    backend: str = "unknown"

    @property
    def hit_rate(self) -> float:
        """Cache hit rate as a percentage."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return (self.hits / total) * 100.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "deletes": self.deletes,
            "evictions": self.evictions,
            "errors": self.errors,
            "hit_rate": round(self.hit_rate, 2),
            "size": self.size,
            "max_size": self.max_size,
            "backend": self.backend,
        }


# ============================================================================
# Cache Backend
# ============================================================================

Clock = Callable[[], float]


class CacheBackend(ABC):
    """
    Abstract primary cache: string values with a per-entry TTL.

    Backends raise ``CacheFault`` subclasses on failure; absorbing those
    failures is the caller's job.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize backend resources (connection pools, etc.)."""
        ...

    @abstractmethod
    async def shutdown(self) -> None:
        """Clean up backend resources."""
        ...

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored string, or None if missing or expired."""
        ...

    @abstractmethod
    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """
        Store a value.

        Args:
            key: Cache key
            value: Serialized value
            ttl: Time-to-live in seconds (None or <= 0 = no expiry)
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete entry by key. Returns True if the key existed."""
        ...

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    @abstractmethod
    async def clear(self) -> int:
        """Remove every entry owned by this backend; returns the count."""
        ...

    @abstractmethod
    async def stats(self) -> CacheStats:
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name for diagnostics."""
        ...

    @property
    def is_distributed(self) -> bool:
        """Whether entries are shared across processes."""
        return False


def monotonic_clock() -> float:
    return time.monotonic()
