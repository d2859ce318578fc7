"""
ItemDeck Auth - User Stores

In-memory user storage with case-insensitive username lookup.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from ..storage.core import utcnow
from .core import User, UserRole
from .hashing import PasswordHasher

logger = logging.getLogger("itemdeck.auth.stores")

# Development accounts created by a seeded store: (username, password, role)
DEFAULT_USERS = (
    ("admin", "admin123", UserRole.ADMIN),
    ("user", "user123", UserRole.USER),
)


class UserStore(Protocol):
    """User persistence consumed by the auth manager."""

    async def get_by_username(self, username: str) -> User | None:
        ...

    async def get_by_id(self, user_id: int) -> User | None:
        ...

    async def create(self, user: User) -> User:
        ...

    async def exists_by_username(self, username: str) -> bool:
        ...


class MemoryUserStore:
    """In-memory user storage for development/testing."""

    def __init__(
        self,
        seed_defaults: bool = True,
        password_hasher: PasswordHasher | None = None,
    ):
        self._users: dict[int, User] = {}
        self._by_username: dict[str, int] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

        if seed_defaults:
            hasher = password_hasher or PasswordHasher()
            for username, password, role in DEFAULT_USERS:
                self._insert(User(
                    username=username,
                    password_hash=hasher.hash(password),
                    role=role,
                ))

    def _insert(self, user: User) -> User:
        key = user.username.casefold()
        if key in self._by_username:
            raise ValueError(f"User {user.username} already exists")

        stored = User(
            id=self._next_id,
            username=user.username,
            password_hash=user.password_hash,
            role=user.role,
            created_at=utcnow(),
        )
        self._next_id += 1
        self._users[stored.id] = stored
        self._by_username[key] = stored.id
        return stored

    async def get_by_username(self, username: str) -> User | None:
        user_id = self._by_username.get(username.casefold())
        return self._users.get(user_id) if user_id is not None else None

    async def get_by_id(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    async def create(self, user: User) -> User:
        """Create new user; raises ValueError on a taken username."""
        async with self._lock:
            stored = self._insert(user)
        logger.debug(f"Stored user {stored.id} ({stored.username})")
        return stored

    async def exists_by_username(self, username: str) -> bool:
        return username.casefold() in self._by_username
