"""
Tests for records, backing stores and store selection.
"""

import asyncio
from datetime import datetime, timezone

import pytest
from pymongo.errors import PyMongoError

from itemdeck.config import StorageSettings
from itemdeck.faults import ConfigFault, FaultDomain, StorageFault
from itemdeck.storage import (
    MemoryItemStore,
    Record,
    StorageBackend,
    create_item_store,
    describe_storage,
)
from itemdeck.storage.document import DocumentItemStore


# ============================================================================
# Record
# ============================================================================


class TestRecord:
    def test_wire_shape(self):
        created = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
        record = Record(id=3, value="hello", created_at=created)
        assert record.to_dict() == {
            "id": 3,
            "value": "hello",
            "createdAt": "2024-01-15T12:00:00+00:00",
        }

    def test_from_dict_accepts_z_suffix(self):
        record = Record.from_dict({"id": "7", "value": "x", "createdAt": "2024-01-15T12:00:00Z"})
        assert record.id == 7
        assert record.created_at.tzinfo is not None
        assert record.created_at.hour == 12

    def test_from_dict_naive_timestamp_is_utc(self):
        record = Record.from_dict({"id": 1, "value": "x", "createdAt": "2024-01-15T12:00:00"})
        assert record.created_at.utcoffset().total_seconds() == 0

    def test_copy_is_independent(self):
        record = Record(id=1, value="a")
        other = record.copy(value="b")
        assert record.value == "a"
        assert other.value == "b"
        assert other.id == 1


# ============================================================================
# Store selection
# ============================================================================


class TestStorageBackend:
    @pytest.mark.parametrize("name,expected", [
        ("memory", StorageBackend.MEMORY),
        ("InMemory", StorageBackend.MEMORY),
        ("document-db", StorageBackend.DOCUMENT),
        ("MongoDB", StorageBackend.DOCUMENT),
        (" mongo ", StorageBackend.DOCUMENT),
    ])
    def test_parse(self, name, expected):
        assert StorageBackend.parse(name) is expected

    def test_unknown_backend_is_config_fault(self):
        with pytest.raises(ConfigFault) as exc:
            StorageBackend.parse("sqlite")
        assert exc.value.domain == FaultDomain.CONFIG
        assert "sqlite" in exc.value.message

    def test_factory_builds_memory_store(self):
        store = create_item_store(StorageSettings(backend="memory"))
        assert isinstance(store, MemoryItemStore)

    def test_factory_builds_document_store(self):
        store = create_item_store(StorageSettings(backend="mongodb", database="db", collection="c"))
        assert isinstance(store, DocumentItemStore)
        assert store.name == "document-db"

    def test_factory_rejects_unknown(self):
        with pytest.raises(ConfigFault):
            create_item_store(StorageSettings(backend="postgres"))

    def test_describe_storage(self):
        assert describe_storage(StorageSettings(backend="inmemory")) == "memory (with caching)"
        assert describe_storage(StorageSettings(backend="mongo")) == "document-db (with caching)"


# ============================================================================
# MemoryItemStore
# ============================================================================


class TestMemoryItemStore:
    @pytest.mark.asyncio
    async def test_create_assigns_sequential_ids(self, memory_store):
        a = await memory_store.create(Record(value="A"))
        b = await memory_store.create(Record(value="B"))
        assert (a.id, b.id) == (1, 2)
        assert a.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_get_all_in_insertion_order(self, memory_store):
        for value in ("x", "y", "z"):
            await memory_store.create(Record(value=value))
        assert [r.value for r in await memory_store.get_all()] == ["x", "y", "z"]

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, memory_store):
        assert await memory_store.get_by_id(99) is None

    @pytest.mark.asyncio
    async def test_update_keeps_id_and_created_at(self, memory_store):
        created = await memory_store.create(Record(value="old"))
        updated = await memory_store.update(created.id, Record(id=555, value="new"))
        assert updated.id == created.id
        assert updated.value == "new"
        assert updated.created_at == created.created_at

    @pytest.mark.asyncio
    async def test_update_missing_returns_none(self, memory_store):
        assert await memory_store.update(4, Record(value="v")) is None

    @pytest.mark.asyncio
    async def test_delete(self, memory_store):
        created = await memory_store.create(Record(value="v"))
        assert await memory_store.delete(created.id) is True
        assert await memory_store.delete(created.id) is False
        assert await memory_store.exists(created.id) is False

    @pytest.mark.asyncio
    async def test_ids_not_reused_after_delete(self, memory_store):
        first = await memory_store.create(Record(value="a"))
        await memory_store.delete(first.id)
        second = await memory_store.create(Record(value="b"))
        assert second.id == first.id + 1

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, memory_store):
        created = await memory_store.create(Record(value="original"))
        created.value = "tampered"
        fetched = await memory_store.get_by_id(created.id)
        fetched.value = "tampered again"
        assert (await memory_store.get_by_id(created.id)).value == "original"

    @pytest.mark.asyncio
    async def test_concurrent_creates_get_distinct_ids(self, memory_store):
        created = await asyncio.gather(*(memory_store.create(Record(value=str(i))) for i in range(50)))
        ids = [r.id for r in created]
        assert sorted(ids) == list(range(1, 51))
        assert memory_store.next_id == 51

    def test_seed_must_be_positive(self):
        with pytest.raises(ValueError):
            MemoryItemStore(seed=0)

    @pytest.mark.asyncio
    async def test_custom_seed(self):
        store = MemoryItemStore(seed=100)
        assert (await store.create(Record(value="v"))).id == 100


# ============================================================================
# DocumentItemStore
# ============================================================================


def _doc(numeric_id, value="v"):
    return {
        "numericId": numeric_id,
        "value": value,
        "createdAt": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }


class TestDocumentItemStore:
    @pytest.mark.asyncio
    async def test_initialize_seeds_counter_from_max(self, fake_collection):
        fake_collection.documents = [_doc(3), _doc(9), _doc(5)]
        store = DocumentItemStore(fake_collection)
        await store.initialize()

        created = await store.create(Record(value="next"))
        assert created.id == 10

    @pytest.mark.asyncio
    async def test_empty_collection_starts_at_one(self, fake_collection):
        store = DocumentItemStore(fake_collection)
        await store.initialize()
        assert (await store.create(Record(value="first"))).id == 1

    @pytest.mark.asyncio
    async def test_crud_round_trip(self, fake_collection):
        store = DocumentItemStore(fake_collection)
        await store.initialize()

        created = await store.create(Record(value="hello"))
        assert fake_collection.documents[0]["numericId"] == created.id

        fetched = await store.get_by_id(created.id)
        assert fetched.value == "hello"
        assert await store.exists(created.id)

        updated = await store.update(created.id, Record(value="world"))
        assert updated.value == "world"
        assert updated.id == created.id

        assert await store.delete(created.id) is True
        assert await store.get_by_id(created.id) is None
        assert await store.exists(created.id) is False

    @pytest.mark.asyncio
    async def test_update_with_same_value_is_a_hit(self, fake_collection):
        fake_collection.documents = [_doc(1, "same")]
        store = DocumentItemStore(fake_collection)
        await store.initialize()
        updated = await store.update(1, Record(value="same"))
        assert updated is not None
        assert updated.value == "same"

    @pytest.mark.asyncio
    async def test_missing_ids(self, fake_collection):
        store = DocumentItemStore(fake_collection)
        await store.initialize()
        assert await store.get_by_id(42) is None
        assert await store.update(42, Record(value="v")) is None
        assert await store.delete(42) is False

    @pytest.mark.asyncio
    async def test_get_all_sorted_by_id(self, fake_collection):
        fake_collection.documents = [_doc(2, "b"), _doc(1, "a"), _doc(3, "c")]
        store = DocumentItemStore(fake_collection)
        await store.initialize()
        assert [r.value for r in await store.get_all()] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_naive_timestamps_are_treated_as_utc(self, fake_collection):
        fake_collection.documents = [{"numericId": 1, "value": "v", "createdAt": datetime(2024, 1, 1)}]
        store = DocumentItemStore(fake_collection)
        await store.initialize()
        record = await store.get_by_id(1)
        assert record.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_driver_errors_become_storage_faults(self, fake_collection):
        store = DocumentItemStore(fake_collection)
        await store.initialize()
        fake_collection.error = PyMongoError("connection reset")

        with pytest.raises(StorageFault) as exc:
            await store.get_by_id(1)
        assert exc.value.metadata["operation"] == "get_by_id"
        assert exc.value.domain == FaultDomain.STORAGE

        with pytest.raises(StorageFault):
            await store.create(Record(value="v"))

    @pytest.mark.asyncio
    async def test_requires_initialize(self, fake_collection):
        store = DocumentItemStore(fake_collection)
        with pytest.raises(StorageFault):
            await store.get_all()

    @pytest.mark.asyncio
    async def test_concurrent_creates_get_distinct_ids(self, fake_collection):
        store = DocumentItemStore(fake_collection)
        await store.initialize()
        created = await asyncio.gather(*(store.create(Record(value=str(i))) for i in range(20)))
        assert sorted(r.id for r in created) == list(range(1, 21))
