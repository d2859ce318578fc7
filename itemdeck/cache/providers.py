"""
ItemDeck Cache — Backend construction from settings.
"""

from __future__ import annotations

import logging

from ..config import CacheSettings
from .core import CacheBackend
from .backends.memory import MemoryBackend
from .file_cache import FileCache

logger = logging.getLogger("itemdeck.cache.providers")


def create_cache_backend(settings: CacheSettings) -> CacheBackend:
    """
    Primary cache for the configured mode: Redis when a distributed cache
    is requested, the in-process memory backend otherwise.
    """
    if settings.use_distributed_cache:
        from .backends.redis import RedisBackend

        logger.info("Primary cache: redis")
        return RedisBackend(url=settings.redis_url, key_prefix=settings.key_prefix)

    logger.info("Primary cache: memory")
    return MemoryBackend(max_size=settings.max_entries)


def create_file_cache(settings: CacheSettings) -> FileCache:
    return FileCache(
        settings.file_cache_path,
        duration_minutes=settings.file_cache_duration_minutes,
    )
