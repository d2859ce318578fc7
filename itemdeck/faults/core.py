"""
ItemDeck Faults - Core types and fault taxonomy.

Defines:
- Fault base class (structured fault objects)
- FaultDomain (explicit fault domains)
- Severity levels
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


# ============================================================================
# Severity & Domain
# ============================================================================

class Severity(str, Enum):
    """
    Fault severity levels.

    Determines logging level and whether the caller can degrade around it.
    """
    INFO = "info"       # Informational, no action needed
    WARN = "warn"       # Warning, should be reviewed
    ERROR = "error"     # Error, immediate attention
    FATAL = "fatal"     # Fatal, unrecoverable, abort


class FaultDomain:
    """
    Fault domains (taxonomy).

    Identifies the functional area where a fault occurred.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.value = name
        self.description = description

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FaultDomain(name='{self.name}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return self.name == other.name
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(self.name)


# Standard Domains
FaultDomain.CONFIG = FaultDomain("config", "Configuration errors")
FaultDomain.SECURITY = FaultDomain("security", "Security and auth")
FaultDomain.CACHE = FaultDomain("cache", "Cache tier faults")
FaultDomain.STORAGE = FaultDomain("storage", "Backing store faults")


# Domain defaults
DOMAIN_DEFAULTS = {
    FaultDomain.CONFIG: {"severity": Severity.FATAL, "retryable": False},
    FaultDomain.SECURITY: {"severity": Severity.WARN, "retryable": False},
    FaultDomain.CACHE: {"severity": Severity.WARN, "retryable": True},
    FaultDomain.STORAGE: {"severity": Severity.ERROR, "retryable": True},
}


# ============================================================================
# Fault - Base Class
# ============================================================================

class Fault(Exception):
    """
    Base fault class - structured, typed fault object.

    A fault carries:
    - Stable machine-readable code
    - Human-readable message
    - Severity level
    - Domain classification
    - Retry semantics
    - Public exposure control

    Subclasses may declare ``code``, ``message`` and ``domain`` as class
    attributes instead of passing them to ``__init__``.

    Example:
        ```python
        raise Fault(
            code="STORE_UNAVAILABLE",
            message="Document store did not answer",
            domain=FaultDomain.STORAGE,
        )
        ```
    """

    def __init__(
        self,
        code: str | None = None,
        message: str | None = None,
        *,
        domain: FaultDomain | None = None,
        severity: Optional[Severity] = None,
        retryable: Optional[bool] = None,
        public: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        # Fallback to class attributes if not provided
        self.code = code if code is not None else getattr(self, "code", None)
        self.message = message if message is not None else getattr(self, "message", None)
        self.domain = domain if domain is not None else getattr(self, "domain", None)

        if self.code is None or self.message is None or self.domain is None:
            raise TypeError(f"{self.__class__.__name__} missing required code, message, or domain")

        super().__init__(self.message)

        defaults = DOMAIN_DEFAULTS.get(self.domain, {"severity": Severity.ERROR, "retryable": False})
        class_severity = getattr(type(self), "severity", None)
        class_retryable = getattr(type(self), "retryable", None)
        self.severity = severity or class_severity or defaults["severity"]
        if retryable is not None:
            self.retryable = retryable
        elif isinstance(class_retryable, bool):
            self.retryable = class_retryable
        else:
            self.retryable = defaults["retryable"]

        self.public = public
        self.metadata = metadata or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"Fault(code={self.code!r}, domain={self.domain.value}, "
            f"severity={self.severity.value}, public={self.public})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logs and diagnostics."""
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "metadata": self.metadata,
        }


# ============================================================================
# Cross-cutting faults
# ============================================================================

class ConfigFault(Fault):
    """Configuration invariant violated; raised before serving anything."""

    def __init__(self, reason: str, **metadata: Any):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Invalid configuration: {reason}",
            domain=FaultDomain.CONFIG,
            severity=Severity.FATAL,
            retryable=False,
            metadata={"reason": reason, **metadata},
        )


class StorageFault(Fault):
    """Backing store failure. Always propagated to the caller."""

    def __init__(self, backend: str, operation: str, reason: str):
        super().__init__(
            code="STORAGE_FAILED",
            message=f"Storage backend '{backend}' failed during {operation}: {reason}",
            domain=FaultDomain.STORAGE,
            severity=Severity.ERROR,
            retryable=True,
            metadata={"backend": backend, "operation": operation, "reason": reason},
        )
