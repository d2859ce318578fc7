"""
ItemDeck Faults - typed fault signals.

Faults are exceptions with a stable code, a domain and a severity.
Subsystems define their own subclasses next to the code that raises them
(``itemdeck.cache.faults``, ``itemdeck.auth.faults``).
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
    ConfigFault,
    StorageFault,
)

__all__ = [
    "Fault",
    "FaultDomain",
    "Severity",
    "ConfigFault",
    "StorageFault",
]
