"""
ItemDeck Services — record service and its logging instrumentation.
"""

from .items import CreateItemRequest, ItemResponse, ItemService, UpdateItemRequest
from .instrumentation import instrument_service, instrumented

__all__ = [
    "CreateItemRequest",
    "UpdateItemRequest",
    "ItemResponse",
    "ItemService",
    "instrument_service",
    "instrumented",
]
