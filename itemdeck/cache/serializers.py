"""
ItemDeck Cache — Record serialization.

Records are cached in their wire shape (``{"id", "value", "createdAt"}``)
as JSON text, so a distributed cache can be read by any client.
"""

from __future__ import annotations

import json
import logging
from typing import List

from ..storage.core import Record
from .faults import CacheSerializationFault

logger = logging.getLogger("itemdeck.cache.serializers")


class RecordSerializer:
    """JSON serializer for one record or a list of records."""

    def __init__(self, indent: int | None = None):
        self.indent = indent

    def dumps(self, record: Record) -> str:
        return json.dumps(record.to_dict(), ensure_ascii=False, indent=self.indent)

    def dumps_many(self, records: List[Record]) -> str:
        return json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=self.indent)

    def loads(self, data: str, key: str = "") -> Record:
        try:
            return Record.from_dict(json.loads(data))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Record deserialization failed for '{key}': {e}")
            raise CacheSerializationFault(key, "deserialize", str(e)) from e

    def loads_many(self, data: str, key: str = "") -> List[Record]:
        try:
            payload = json.loads(data)
            if not isinstance(payload, list):
                raise TypeError(f"expected a list, got {type(payload).__name__}")
            return [Record.from_dict(item) for item in payload]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Record list deserialization failed for '{key}': {e}")
            raise CacheSerializationFault(key, "deserialize", str(e)) from e
