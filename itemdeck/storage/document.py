"""
ItemDeck Storage — MongoDB-backed persistent store.

Documents carry their own sequential ``numericId`` next to Mongo's
``_id``; the numeric id is the only identifier exposed to callers.
The counter is seeded once in :meth:`DocumentItemStore.initialize` from
the largest stored ``numericId`` and advanced under an asyncio.Lock.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timezone
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from ..faults import StorageFault
from .core import ItemStore, Record, utcnow

logger = logging.getLogger("itemdeck.storage.document")


class DocumentItemStore(ItemStore):
    """
    Record storage on a MongoDB collection.

    Either pass a ready collection (any object with the async collection
    API) or a connection URL; in the latter case the client is created in
    :meth:`initialize` and closed in :meth:`shutdown`.
    """

    def __init__(
        self,
        collection: Any = None,
        *,
        url: str = "mongodb://localhost:27017",
        database: str = "itemdeck",
        collection_name: str = "data_items",
    ):
        self._collection = collection
        self._url = url
        self._database = database
        self._collection_name = collection_name
        self._client = None
        self._next_id = 1
        self._lock = asyncio.Lock()
        self._initialized = False

    @property
    def name(self) -> str:
        return "document-db"

    async def initialize(self) -> None:
        """Connect (if needed) and seed the id counter."""
        if self._initialized:
            return

        if self._collection is None:
            from pymongo import AsyncMongoClient

            self._client = AsyncMongoClient(self._url, tz_aware=True)
            self._collection = self._client[self._database][self._collection_name]
            logger.info(f"Document store connected: {self._database}.{self._collection_name}")

        try:
            newest = await self._collection.find_one(
                {},
                projection={"numericId": 1},
                sort=[("numericId", DESCENDING)],
            )
        except PyMongoError as e:
            raise StorageFault(self.name, "initialize", str(e)) from e

        max_id = int(newest.get("numericId", 0)) if newest else 0
        self._next_id = max(max_id + 1, 1)
        self._initialized = True
        logger.info(f"Document store id counter seeded at {self._next_id}")

    async def shutdown(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._collection = None
        self._initialized = False

    def _require_collection(self, operation: str):
        if self._collection is None or not self._initialized:
            raise StorageFault(self.name, operation, "store not initialized")
        return self._collection

    @staticmethod
    def _to_record(document: Dict[str, Any]) -> Record:
        created = document.get("createdAt") or utcnow()
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return Record(
            id=int(document["numericId"]),
            value=document.get("value", ""),
            created_at=created,
        )

    async def get_by_id(self, item_id: int) -> Optional[Record]:
        collection = self._require_collection("get_by_id")
        try:
            document = await collection.find_one({"numericId": item_id})
        except PyMongoError as e:
            raise StorageFault(self.name, "get_by_id", str(e)) from e
        return self._to_record(document) if document else None

    async def get_all(self) -> List[Record]:
        collection = self._require_collection("get_all")
        try:
            cursor = collection.find({}, sort=[("numericId", ASCENDING)])
            documents = await cursor.to_list(None)
        except PyMongoError as e:
            raise StorageFault(self.name, "get_all", str(e)) from e
        return [self._to_record(d) for d in documents]

    async def create(self, record: Record) -> Record:
        collection = self._require_collection("create")
        async with self._lock:
            assigned = self._next_id
            self._next_id += 1

        stored = Record(id=assigned, value=record.value, created_at=utcnow())
        try:
            await collection.insert_one({
                "numericId": stored.id,
                "value": stored.value,
                "createdAt": stored.created_at,
            })
        except PyMongoError as e:
            raise StorageFault(self.name, "create", str(e)) from e
        return stored

    async def update(self, item_id: int, record: Record) -> Optional[Record]:
        collection = self._require_collection("update")
        try:
            result = await collection.update_one(
                {"numericId": item_id},
                {"$set": {"value": record.value}},
            )
        except PyMongoError as e:
            raise StorageFault(self.name, "update", str(e)) from e

        # matched, not modified: writing the same value is still a hit
        if result.matched_count == 0:
            return None
        return await self.get_by_id(item_id)

    async def delete(self, item_id: int) -> bool:
        collection = self._require_collection("delete")
        try:
            result = await collection.delete_one({"numericId": item_id})
        except PyMongoError as e:
            raise StorageFault(self.name, "delete", str(e)) from e
        return result.deleted_count > 0

    async def exists(self, item_id: int) -> bool:
        collection = self._require_collection("exists")
        try:
            count = await collection.count_documents({"numericId": item_id}, limit=1)
        except PyMongoError as e:
            raise StorageFault(self.name, "exists", str(e)) from e
        return count > 0
