"""
ItemDeck Application — composition root.

Builds every component from :class:`~itemdeck.config.Settings`::

    settings = load_settings(env_file=".env")
    app = build_application(settings)
    await app.startup()
    try:
        result = await app.auth.login("admin", "admin123")
        item = await app.items.create(CreateItemRequest(value="hello"))
    finally:
        await app.shutdown()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .auth.hashing import PasswordHasher
from .auth.manager import AuthManager
from .auth.stores import MemoryUserStore, UserStore
from .auth.tokens import TokenService
from .cache.core import CacheBackend
from .cache.file_cache import FileCache
from .cache.providers import create_cache_backend, create_file_cache
from .config import Settings
from .services.instrumentation import instrument_service
from .services.items import ItemService
from .storage.caching import CachingItemRepository
from .storage.core import ItemStore
from .storage.factory import create_item_store, describe_storage

logger = logging.getLogger("itemdeck.app")


@dataclass
class Application:
    """Wired components plus their lifecycle."""
    settings: Settings
    store: ItemStore
    cache: CacheBackend
    file_cache: FileCache
    repository: CachingItemRepository
    items: ItemService
    users: UserStore
    tokens: TokenService
    auth: AuthManager
    _started: bool = field(default=False, repr=False)

    async def startup(self) -> None:
        """Connect the backing store and primary cache. Idempotent."""
        if self._started:
            return
        await self.repository.initialize()
        self._started = True
        logger.info(f"Started with storage: {self.repository.name}, cache: {self.cache.name}")

    async def shutdown(self) -> None:
        if not self._started:
            return
        await self.repository.shutdown()
        self._started = False
        logger.info("Shut down")

    def describe(self) -> Dict[str, Any]:
        """Health/diagnostic summary."""
        return {
            "storage": describe_storage(self.settings.storage),
            "cache": self.cache.name,
            "distributed_cache": self.cache.is_distributed,
            "file_cache": str(self.file_cache.directory),
            "started": self._started,
        }


def build_application(
    settings: Settings,
    *,
    store: Optional[ItemStore] = None,
    cache: Optional[CacheBackend] = None,
    users: Optional[UserStore] = None,
    password_hasher: Optional[PasswordHasher] = None,
) -> Application:
    """
    Wire the application from settings.

    ``store``, ``cache``, ``users`` and ``password_hasher`` replace the
    components settings would build (tests, embedding).

    Raises:
        ConfigFault: unknown storage backend
        TokenSecretFault: missing or short token secret
    """
    tokens = TokenService(settings.jwt)
    hasher = password_hasher or PasswordHasher()

    store = store or create_item_store(settings.storage)
    cache = cache or create_cache_backend(settings.cache)
    file_cache = create_file_cache(settings.cache)
    repository = CachingItemRepository(
        store,
        cache,
        file_cache,
        cache_duration_minutes=settings.cache.cache_duration_minutes,
    )

    users = users or MemoryUserStore(password_hasher=hasher)

    return Application(
        settings=settings,
        store=store,
        cache=cache,
        file_cache=file_cache,
        repository=repository,
        items=instrument_service(ItemService(repository)),
        users=users,
        tokens=tokens,
        auth=AuthManager(users, tokens, password_hasher=hasher),
    )
