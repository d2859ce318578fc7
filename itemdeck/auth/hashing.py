"""
ItemDeck Auth - Password Hashing

Argon2id (salted, memory-hard) via argon2-cffi.
"""

import logging

from argon2 import PasswordHasher as Argon2PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

logger = logging.getLogger("itemdeck.auth.hashing")


class PasswordHasher:
    """
    Password hasher using Argon2id.

    Security parameters (defaults):
    - time_cost=2, memory_cost=65536 (64MB), parallelism=4
    """

    def __init__(
        self,
        time_cost: int = 2,
        memory_cost: int = 65536,
        parallelism: int = 4,
        hash_len: int = 32,
        salt_len: int = 16,
    ):
        self.hasher = Argon2PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=hash_len,
            salt_len=salt_len,
        )

    def hash(self, password: str) -> str:
        """
        Hash password.

        Example output:
            $argon2id$v=19$m=65536,t=2,p=4$saltbase64$hashbase64
        """
        return self.hasher.hash(password)

    def verify(self, password_hash: str, password: str) -> bool:
        """
        Verify password against hash.

        Returns False for a mismatch and for anything that is not a valid
        Argon2 hash (including the empty string); never raises.
        """
        if not password_hash or not password_hash.startswith("$argon2"):
            return False
        try:
            return self.hasher.verify(password_hash, password)
        except VerifyMismatchError:
            return False
        except (VerificationError, InvalidHashError) as e:
            logger.warning(f"Password hash could not be verified: {e}")
            return False

    def check_needs_rehash(self, password_hash: str) -> bool:
        """True if the hash was made with different parameters."""
        try:
            return self.hasher.check_needs_rehash(password_hash)
        except InvalidHashError:
            return True


def fast_hasher() -> PasswordHasher:
    """Low-cost parameters for seeding fixtures and tests."""
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)
