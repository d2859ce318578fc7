"""
ItemDeck Storage — Core types and the record-access contract.

Every backing store, and the caching repository layered on top of them,
implements :class:`ItemStore`, so callers never know which one they hold.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from ..faults import ConfigFault


def utcnow() -> datetime:
    """Timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, assuming UTC when no offset is given."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ============================================================================
# Record
# ============================================================================

@dataclass
class Record:
    """
    A single data item.

    ``id`` and ``created_at`` are assigned by the backing store on create;
    records built by callers carry ``id=0`` until then.
    """
    id: int = 0
    value: str = ""
    created_at: datetime = field(default_factory=utcnow)

    def copy(self, **changes: Any) -> "Record":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape: ``{"id", "value", "createdAt"}``."""
        return {
            "id": self.id,
            "value": self.value,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        created = data.get("createdAt")
        return cls(
            id=int(data["id"]),
            value=data["value"],
            created_at=parse_timestamp(created) if created else utcnow(),
        )


# ============================================================================
# Store selection
# ============================================================================

class StorageBackend(str, Enum):
    """Backing store implementations, resolved once at startup."""
    MEMORY = "memory"
    DOCUMENT = "document-db"

    @classmethod
    def parse(cls, name: str) -> "StorageBackend":
        """
        Resolve a configured backend name.

        Accepts the canonical values plus the spellings older
        configurations used (``inmemory``, ``mongodb``, ``mongo``).
        """
        normalized = (name or "").strip().lower()
        backend = _BACKEND_ALIASES.get(normalized)
        if backend is None:
            raise ConfigFault(
                f"Storage type '{name}' is not supported",
                options=[b.value for b in cls],
            )
        return backend


_BACKEND_ALIASES = {
    "memory": StorageBackend.MEMORY,
    "inmemory": StorageBackend.MEMORY,
    "in-memory": StorageBackend.MEMORY,
    "document-db": StorageBackend.DOCUMENT,
    "documentdb": StorageBackend.DOCUMENT,
    "mongodb": StorageBackend.DOCUMENT,
    "mongo": StorageBackend.DOCUMENT,
}


# ============================================================================
# Store contract
# ============================================================================

class ItemStore(ABC):
    """
    Keyed record storage.

    ``get_by_id`` and ``update`` return ``None`` for a missing id;
    ``delete`` returns ``False``. Failures are raised, never masked.
    """

    async def initialize(self) -> None:
        """Acquire resources (connections, id seeds)."""

    async def shutdown(self) -> None:
        """Release resources."""

    @abstractmethod
    async def get_by_id(self, item_id: int) -> Optional[Record]:
        ...

    @abstractmethod
    async def get_all(self) -> List[Record]:
        ...

    @abstractmethod
    async def create(self, record: Record) -> Record:
        """Persist a new record, assigning ``id`` and ``created_at``."""
        ...

    @abstractmethod
    async def update(self, item_id: int, record: Record) -> Optional[Record]:
        """Replace the value of an existing record."""
        ...

    @abstractmethod
    async def delete(self, item_id: int) -> bool:
        ...

    @abstractmethod
    async def exists(self, item_id: int) -> bool:
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Store name for diagnostics."""
        ...
