"""
ItemDeck Cache — primary and secondary cache tiers.

- **Primary**: in-process memory backend or Redis, holding serialized
  records under ``item:<id>`` and ``items:all``
- **Secondary**: on-disk JSON snapshots with the expiry in the file name
- **Faults**: typed cache faults; cache failures are never fatal

The tiers are stitched together with the backing store by
``itemdeck.storage.caching.CachingItemRepository``.
"""

from .core import (
    ALL_ITEMS_KEY,
    CacheBackend,
    CacheEntry,
    CacheStats,
    item_key,
)
from .backends.memory import MemoryBackend
from .backends.redis import RedisBackend
from .file_cache import FileCache
from .serializers import RecordSerializer
from .providers import create_cache_backend, create_file_cache
from .faults import (
    CacheFault,
    CacheConnectionFault,
    CacheSerializationFault,
    CacheBackendFault,
)

__all__ = [
    "ALL_ITEMS_KEY",
    "CacheBackend",
    "CacheEntry",
    "CacheStats",
    "item_key",
    "MemoryBackend",
    "RedisBackend",
    "FileCache",
    "RecordSerializer",
    "create_cache_backend",
    "create_file_cache",
    "CacheFault",
    "CacheConnectionFault",
    "CacheSerializationFault",
    "CacheBackendFault",
]
