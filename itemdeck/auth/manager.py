"""
ItemDeck Auth - Authentication Manager

Verifies credentials against the user store and issues tokens.
"""

from __future__ import annotations

import logging
import secrets

from .core import LoginResult, User, UserRole
from .faults import AUTH_INVALID_CREDENTIALS
from .hashing import PasswordHasher
from .stores import UserStore
from .tokens import TokenService

logger = logging.getLogger("itemdeck.auth.manager")


class AuthManager:
    """
    Central authentication manager.

    - ``login``: credentials → token, or None
    - ``register``: new account, or None if the name is taken
    - ``get_user_by_id``: account lookup

    Users returned from here never carry a password hash.
    """

    def __init__(
        self,
        user_store: UserStore,
        token_service: TokenService,
        password_hasher: PasswordHasher | None = None,
    ):
        self.user_store = user_store
        self.token_service = token_service
        self.password_hasher = password_hasher or PasswordHasher()
        # Unknown usernames are checked against this so both failure paths cost the same
        self._decoy_hash = self.password_hasher.hash(secrets.token_urlsafe(16))

    async def login(self, username: str, password: str) -> LoginResult | None:
        """
        Authenticate using username/password.

        Unknown user, wrong password and internal errors all return None;
        the caller cannot tell them apart.
        """
        try:
            user = await self._verify_credentials(username, password)
            token, expires_at = self.token_service.issue_with_expiry(user)
        except AUTH_INVALID_CREDENTIALS:
            return None
        except Exception as e:
            logger.error(f"Error during login for user {username}: {e}")
            return None

        logger.info(f"User logged in successfully: {user.username} with role: {user.role.value}")
        return LoginResult(
            token=token,
            username=user.username,
            role=user.role,
            expires_at=expires_at,
        )

    async def _verify_credentials(self, username: str, password: str) -> User:
        user = await self.user_store.get_by_username(username)
        if user is None:
            self.password_hasher.verify(self._decoy_hash, password)
            logger.warning(f"Login attempt failed - user not found: {username}")
            raise AUTH_INVALID_CREDENTIALS()

        if not self.password_hasher.verify(user.password_hash, password):
            logger.warning(f"Login attempt failed - invalid password for user: {username}")
            raise AUTH_INVALID_CREDENTIALS()

        return user

    async def register(
        self,
        username: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> User | None:
        """Create an account; None if the username (any case) is taken."""
        try:
            if await self.user_store.exists_by_username(username):
                logger.warning(f"Registration failed - username already exists: {username}")
                return None

            created = await self.user_store.create(User(
                username=username,
                password_hash=self.password_hasher.hash(password),
                role=UserRole.parse(role),
            ))
        except Exception as e:
            logger.error(f"Error during registration for user {username}: {e}")
            return None

        logger.info(f"User registered successfully: {created.username} with role: {created.role.value}")
        return created.without_secret()

    async def get_user_by_id(self, user_id: int) -> User | None:
        user = await self.user_store.get_by_id(user_id)
        return user.without_secret() if user else None
