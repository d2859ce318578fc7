"""
ItemDeck Auth - token-based authentication.

Components:
- TokenService: HS256 token issuance and validation
- AuthManager: login / register / user lookup
- PasswordHasher: Argon2id password hashing
- MemoryUserStore: user storage seeded with development accounts
"""

from .core import LoginResult, TokenClaims, User, UserRole
from .faults import (
    AUTH_INVALID_CREDENTIALS,
    AUTH_TOKEN_EXPIRED,
    AUTH_TOKEN_INVALID,
    TokenSecretFault,
)
from .hashing import PasswordHasher
from .manager import AuthManager
from .stores import DEFAULT_USERS, MemoryUserStore, UserStore
from .tokens import TokenService

__all__ = [
    "LoginResult",
    "TokenClaims",
    "User",
    "UserRole",
    "AUTH_INVALID_CREDENTIALS",
    "AUTH_TOKEN_EXPIRED",
    "AUTH_TOKEN_INVALID",
    "TokenSecretFault",
    "PasswordHasher",
    "AuthManager",
    "DEFAULT_USERS",
    "MemoryUserStore",
    "UserStore",
    "TokenService",
]
