"""
ItemDeck Storage — Store construction from settings.

The configured backend name is parsed into :class:`StorageBackend` once;
everything after that dispatches on the enum.
"""

from __future__ import annotations

import logging

from ..config import StorageSettings
from .core import ItemStore, StorageBackend
from .memory import MemoryItemStore

logger = logging.getLogger("itemdeck.storage.factory")


def create_item_store(settings: StorageSettings) -> ItemStore:
    """
    Build the backing store named by ``settings.backend``.

    Raises:
        ConfigFault: unknown backend name
    """
    backend = StorageBackend.parse(settings.backend)

    if backend is StorageBackend.DOCUMENT:
        from .document import DocumentItemStore

        logger.info(f"Backing store: document-db ({settings.database}.{settings.collection})")
        return DocumentItemStore(
            url=settings.mongo_url,
            database=settings.database,
            collection_name=settings.collection,
        )

    logger.info("Backing store: memory")
    return MemoryItemStore()


def describe_storage(settings: StorageSettings) -> str:
    """Human-readable storage description for health reporting."""
    return f"{StorageBackend.parse(settings.backend).value} (with caching)"
