"""
ItemDeck Auth - Core Types

Users, roles, token claims and login results.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from ..storage.core import utcnow


class UserRole(str, Enum):
    """Role carried by a user and by every token issued for them."""
    USER = "User"
    ADMIN = "Admin"

    @classmethod
    def parse(cls, value: "str | UserRole") -> "UserRole":
        """Case-insensitive lookup by value or name."""
        if isinstance(value, cls):
            return value
        for role in cls:
            if value.lower() in (role.value.lower(), role.name.lower()):
                return role
        raise ValueError(f"Unknown role: {value}")


@dataclass
class User:
    """
    Account record held by the user store.

    ``password_hash`` must be cleared (see :meth:`without_secret`) before a
    user leaves the auth layer.
    """
    id: int = 0
    username: str = ""
    password_hash: str = ""
    role: UserRole = UserRole.USER
    created_at: datetime = field(default_factory=utcnow)

    def without_secret(self) -> "User":
        return replace(self, password_hash="")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role.value,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class TokenClaims:
    """Identity decoded from a valid token."""
    subject_id: int
    username: str
    role: UserRole
    token_id: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class LoginResult:
    """Successful login: a token and who it was issued to."""
    token: str
    username: str
    role: UserRole
    expires_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Wire shape: ``{"token", "username", "role", "expiresAt"}``."""
        return {
            "token": self.token,
            "username": self.username,
            "role": self.role.value,
            "expiresAt": self.expires_at.isoformat(),
        }
