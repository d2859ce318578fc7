"""
Shared test fixtures and fakes for the ItemDeck test suite.
"""

from __future__ import annotations

import fnmatch
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from itemdeck.auth.hashing import fast_hasher
from itemdeck.cache.backends.memory import MemoryBackend
from itemdeck.cache.file_cache import FileCache
from itemdeck.config import CacheSettings, JwtSettings, Settings, StorageSettings
from itemdeck.storage.memory import MemoryItemStore

SECRET = "test-secret-key-that-is-long-enough-0123456789"


# ============================================================================
# Clocks
# ============================================================================


class MutableClock:
    """Aware-UTC clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class MonotonicClock:
    """Float seconds clock for the memory backend."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ============================================================================
# Fake Redis
# ============================================================================


class FakeRedis:
    """Subset of redis.asyncio.Redis used by RedisBackend."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.fail = False
        self.closed = False

    def _check(self):
        if self.fail:
            raise ConnectionError("redis unavailable")

    async def ping(self):
        self._check()
        return True

    async def get(self, key):
        self._check()
        return self.data.get(key)

    async def set(self, key, value):
        self._check()
        self.data[key] = value
        self.ttls.pop(key, None)
        return True

    async def setex(self, key, ttl, value):
        self._check()
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys):
        self._check()
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def scan_iter(self, match="*"):
        self._check()
        for key in list(self.data):
            if fnmatch.fnmatch(key, match):
                yield key

    async def aclose(self):
        self.closed = True


# ============================================================================
# Fake Mongo collection
# ============================================================================


class FakeCursor:
    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents

    async def to_list(self, length=None):
        return list(self._documents if length is None else self._documents[:length])


class FakeCollection:
    """Subset of pymongo's AsyncCollection used by DocumentItemStore."""

    def __init__(self, documents: Optional[List[Dict[str, Any]]] = None):
        self.documents: List[Dict[str, Any]] = [dict(d) for d in documents or []]
        self.error: Optional[Exception] = None

    def _check(self):
        if self.error is not None:
            raise self.error

    def _matching(self, flt: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            d for d in self.documents
            if all(d.get(k) == v for k, v in flt.items())
        ]

    @staticmethod
    def _sorted(documents, sort):
        for field, direction in reversed(sort or []):
            documents = sorted(documents, key=lambda d: d.get(field, 0), reverse=direction < 0)
        return documents

    async def find_one(self, flt, projection=None, sort=None):
        self._check()
        found = self._sorted(self._matching(flt), sort)
        return dict(found[0]) if found else None

    def find(self, flt, sort=None):
        self._check()
        return FakeCursor([dict(d) for d in self._sorted(self._matching(flt), sort)])

    async def insert_one(self, document):
        self._check()
        self.documents.append(dict(document, _id=len(self.documents) + 1))
        return SimpleNamespace(inserted_id=len(self.documents))

    async def update_one(self, flt, update):
        self._check()
        found = self._matching(flt)
        modified = 0
        if found:
            changes = update["$set"]
            if any(found[0].get(k) != v for k, v in changes.items()):
                modified = 1
            found[0].update(changes)
        return SimpleNamespace(matched_count=len(found[:1]), modified_count=modified)

    async def delete_one(self, flt):
        self._check()
        found = self._matching(flt)
        if found:
            self.documents.remove(found[0])
        return SimpleNamespace(deleted_count=len(found[:1]))

    async def count_documents(self, flt, limit=0):
        self._check()
        count = len(self._matching(flt))
        return min(count, limit) if limit else count


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def clock():
    return MutableClock()


@pytest.fixture
def monotonic():
    return MonotonicClock()


@pytest.fixture
def hasher():
    return fast_hasher()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def fake_collection():
    return FakeCollection()


@pytest.fixture
def memory_store():
    return MemoryItemStore()


@pytest.fixture
def memory_cache(monotonic):
    return MemoryBackend(max_size=100, clock=monotonic)


@pytest.fixture
def file_cache(tmp_path, clock):
    return FileCache(tmp_path / "FileCache", duration_minutes=30, clock=clock)


@pytest.fixture
def jwt_settings():
    return JwtSettings(
        secret_key=SECRET,
        issuer="itemdeck-tests",
        audience="itemdeck-test-clients",
        expiration_minutes=60,
    )


@pytest.fixture
def settings(tmp_path, jwt_settings):
    return Settings(
        cache=CacheSettings(file_cache_path=str(tmp_path / "FileCache")),
        storage=StorageSettings(backend="memory"),
        jwt=jwt_settings,
    )
