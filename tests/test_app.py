"""
End-to-end tests for application wiring.
"""

from __future__ import annotations

from dataclasses import replace
from unittest.mock import AsyncMock

import pytest

import itemdeck
from itemdeck.app import Application, build_application
from itemdeck.auth import TokenSecretFault
from itemdeck.cache import MemoryBackend, RedisBackend
from itemdeck.faults import ConfigFault
from itemdeck.services import CreateItemRequest, UpdateItemRequest
from itemdeck.storage import ItemStore, MemoryItemStore


@pytest.fixture
def app(settings, hasher):
    return build_application(settings, password_hasher=hasher)


class TestBuild:
    def test_default_wiring(self, app, settings):
        assert isinstance(app, Application)
        assert isinstance(app.store, MemoryItemStore)
        assert isinstance(app.cache, MemoryBackend)
        assert app.repository.store is app.store
        assert app.file_cache.directory.is_dir()

    def test_distributed_cache_selected(self, settings, hasher):
        distributed = replace(settings, cache=replace(settings.cache, use_distributed_cache=True))
        app = build_application(distributed, password_hasher=hasher)
        assert isinstance(app.cache, RedisBackend)

    def test_short_secret_fails_fast(self, settings):
        bad = replace(settings, jwt=replace(settings.jwt, secret_key="short"))
        with pytest.raises(TokenSecretFault):
            build_application(bad)

    def test_unknown_storage_fails_fast(self, settings, hasher):
        bad = replace(settings, storage=replace(settings.storage, backend="cassandra"))
        with pytest.raises(ConfigFault):
            build_application(bad, password_hasher=hasher)

    def test_describe(self, app):
        info = app.describe()
        assert info["storage"] == "memory (with caching)"
        assert info["cache"] == "memory"
        assert info["distributed_cache"] is False
        assert info["started"] is False

    def test_package_exports(self):
        assert itemdeck.build_application is build_application
        assert itemdeck.__version__


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_startup_and_shutdown_are_idempotent(self, settings, hasher):
        store = AsyncMock(spec=ItemStore)
        app = build_application(settings, store=store, password_hasher=hasher)

        await app.startup()
        await app.startup()
        assert app.describe()["started"] is True
        store.initialize.assert_awaited_once()

        await app.shutdown()
        await app.shutdown()
        store.shutdown.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_startup_survives_unreachable_redis(self, settings, hasher, fake_redis):
        fake_redis.fail = True
        app = build_application(settings, cache=RedisBackend(client=fake_redis), password_hasher=hasher)

        await app.startup()
        try:
            assert app.describe()["started"] is True
            created = await app.items.create(CreateItemRequest(value="served"))
            assert (await app.items.get_by_id(created.id)).value == "served"
        finally:
            await app.shutdown()

    @pytest.mark.asyncio
    async def test_redis_startup_with_injected_client(self, settings, hasher, fake_redis):
        app = build_application(settings, cache=RedisBackend(client=fake_redis), password_hasher=hasher)
        await app.startup()
        try:
            created = await app.items.create(CreateItemRequest(value="shared"))
            await app.items.get_by_id(created.id)
            assert f"itemdeck:item:{created.id}" in fake_redis.data
        finally:
            await app.shutdown()


class TestScenarios:
    @pytest.mark.asyncio
    async def test_item_lifecycle(self, app):
        await app.startup()
        try:
            a = await app.items.create(CreateItemRequest(value="A"))
            assert [i.value for i in await app.items.get_all()] == ["A"]

            b = await app.items.create(CreateItemRequest(value="B"))
            assert b.id == a.id + 1
            assert [i.value for i in await app.items.get_all()] == ["A", "B"]

            await app.items.update(a.id, UpdateItemRequest(value="A2"))
            assert (await app.items.get_by_id(a.id)).value == "A2"

            assert await app.items.delete(b.id) is True
            assert await app.items.get_by_id(b.id) is None
            assert [i.value for i in await app.items.get_all()] == ["A2"]
        finally:
            await app.shutdown()

    @pytest.mark.asyncio
    async def test_login_and_validate(self, app):
        result = await app.auth.login("admin", "admin123")
        claims = app.tokens.validate(result.token)
        user = await app.auth.get_user_by_id(claims.subject_id)
        assert user.username == "admin"
        assert user.password_hash == ""

    @pytest.mark.asyncio
    async def test_register_and_login(self, app):
        assert await app.auth.register("newbie", "pass1234") is not None
        assert await app.auth.login("newbie", "pass1234") is not None
        assert await app.auth.register("NEWBIE", "other") is None
