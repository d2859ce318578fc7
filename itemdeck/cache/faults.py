"""
ItemDeck Cache — Fault types.

Cache faults are never fatal: the caching repository logs and absorbs
them, then carries on against the next tier.
"""

from __future__ import annotations

from typing import Any, Optional

from itemdeck.faults.core import Fault, FaultDomain, Severity


class CacheFault(Fault):
    """Base class for all cache faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.WARN,
        retryable: bool = True,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CACHE,
            severity=severity,
            retryable=retryable,
            public=False,
            metadata=metadata,
        )


class CacheConnectionFault(CacheFault):
    """Failed to connect to cache backend."""

    def __init__(self, backend: str, reason: str):
        super().__init__(
            code="CACHE_CONNECTION_FAILED",
            message=f"Cache backend '{backend}' connection failed: {reason}",
            severity=Severity.ERROR,
            retryable=True,
            metadata={"backend": backend, "reason": reason},
        )


class CacheSerializationFault(CacheFault):
    """Failed to serialize/deserialize a cached value."""

    def __init__(self, key: str, operation: str, reason: str):
        super().__init__(
            code="CACHE_SERIALIZATION_FAILED",
            message=f"Cache {operation} failed for key '{key}': {reason}",
            severity=Severity.WARN,
            retryable=False,
            metadata={"key": key, "operation": operation, "reason": reason},
        )


class CacheBackendFault(CacheFault):
    """Generic cache backend error."""

    def __init__(self, backend: str, operation: str, reason: str):
        super().__init__(
            code="CACHE_BACKEND_ERROR",
            message=f"Cache backend '{backend}' error during {operation}: {reason}",
            severity=Severity.ERROR,
            retryable=True,
            metadata={"backend": backend, "operation": operation, "reason": reason},
        )
