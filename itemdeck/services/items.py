"""
ItemDeck Services — Record service.

Maps request/response DTOs to records and delegates to whatever
:class:`~itemdeck.storage.core.ItemStore` it is given (usually the
caching repository).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..storage.core import ItemStore, Record


@dataclass
class CreateItemRequest:
    value: str = ""


@dataclass
class UpdateItemRequest:
    value: str = ""


@dataclass
class ItemResponse:
    id: int
    value: str
    created_at: datetime

    @classmethod
    def from_record(cls, record: Record) -> "ItemResponse":
        return cls(id=record.id, value=record.value, created_at=record.created_at)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "value": self.value,
            "createdAt": self.created_at.isoformat(),
        }


class ItemService:
    """CRUD operations over records, in DTO terms."""

    def __init__(self, repository: ItemStore):
        self.repository = repository

    async def get_by_id(self, item_id: int) -> Optional[ItemResponse]:
        record = await self.repository.get_by_id(item_id)
        return ItemResponse.from_record(record) if record else None

    async def get_all(self) -> List[ItemResponse]:
        return [ItemResponse.from_record(r) for r in await self.repository.get_all()]

    async def create(self, request: CreateItemRequest) -> ItemResponse:
        created = await self.repository.create(Record(value=request.value))
        return ItemResponse.from_record(created)

    async def update(self, item_id: int, request: UpdateItemRequest) -> Optional[ItemResponse]:
        updated = await self.repository.update(item_id, Record(id=item_id, value=request.value))
        return ItemResponse.from_record(updated) if updated else None

    async def delete(self, item_id: int) -> bool:
        return await self.repository.delete(item_id)

    async def exists(self, item_id: int) -> bool:
        return await self.repository.exists(item_id)
