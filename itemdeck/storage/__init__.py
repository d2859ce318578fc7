"""
ItemDeck Storage — records and backing stores.

- ``MemoryItemStore``: transient, process-local
- ``DocumentItemStore``: MongoDB collection
- ``CachingItemRepository`` (``itemdeck.storage.caching``): the tiered
  cache in front of either store
"""

from .core import ItemStore, Record, StorageBackend, utcnow
from .memory import MemoryItemStore
from .factory import create_item_store, describe_storage

__all__ = [
    "ItemStore",
    "Record",
    "StorageBackend",
    "utcnow",
    "MemoryItemStore",
    "create_item_store",
    "describe_storage",
]
