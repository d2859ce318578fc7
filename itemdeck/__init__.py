"""
ItemDeck - Cached record storage with token authentication.

A CRUD core for keyed records:
- Three-tier read path: primary cache (memory or Redis), file cache, backing store
- Write-invalidate on every mutation
- HS256 tokens, Argon2id password hashing, login/registration
"""

__version__ = "0.1.0"

from .config import ConfigError, ConfigLoader, Settings, load_settings
from .faults import ConfigFault, Fault, FaultDomain, Severity, StorageFault
from .storage import ItemStore, MemoryItemStore, Record, StorageBackend
from .storage.caching import CachingItemRepository
from .cache import CacheBackend, FileCache, MemoryBackend, RedisBackend
from .auth import AuthManager, LoginResult, TokenService, User, UserRole
from .services import CreateItemRequest, ItemResponse, ItemService, UpdateItemRequest
from .app import Application, build_application

__all__ = [
    "__version__",
    # Config
    "ConfigError",
    "ConfigLoader",
    "Settings",
    "load_settings",
    # Faults
    "ConfigFault",
    "Fault",
    "FaultDomain",
    "Severity",
    "StorageFault",
    # Storage
    "ItemStore",
    "MemoryItemStore",
    "Record",
    "StorageBackend",
    "CachingItemRepository",
    # Cache
    "CacheBackend",
    "FileCache",
    "MemoryBackend",
    "RedisBackend",
    # Auth
    "AuthManager",
    "LoginResult",
    "TokenService",
    "User",
    "UserRole",
    # Services
    "CreateItemRequest",
    "ItemResponse",
    "ItemService",
    "UpdateItemRequest",
    # Application
    "Application",
    "build_application",
]
