"""
ItemDeck Auth - Token Service

HS256 JWT issuance and validation with a shared secret.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

from ..config import JwtSettings
from ..storage.core import utcnow
from .core import TokenClaims, User, UserRole
from .faults import AUTH_TOKEN_EXPIRED, AUTH_TOKEN_INVALID, TokenSecretFault

logger = logging.getLogger("itemdeck.auth.tokens")

MIN_SECRET_LENGTH = 32
ALGORITHM = "HS256"


class TokenService:
    """
    Stateless token lifecycle.

    Responsibilities:
    - Issue signed, expiring access tokens for a user
    - Validate signature, issuer, audience and lifetime (zero clock skew)

    Tokens are never stored; validity is decided from the token alone.
    """

    def __init__(
        self,
        settings: JwtSettings,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not settings.secret_key or len(settings.secret_key) < MIN_SECRET_LENGTH:
            raise TokenSecretFault(MIN_SECRET_LENGTH)

        self.settings = settings
        self._key = settings.secret_key.encode("utf-8")
        self._clock = clock or utcnow

        logger.info(
            f"TokenService initialized with issuer: {settings.issuer}, "
            f"audience: {settings.audience}"
        )

    @property
    def lifetime(self) -> timedelta:
        return timedelta(minutes=self.settings.expiration_minutes)

    # ── Issue ────────────────────────────────────────────────────────

    def issue(self, user: User) -> str:
        """Issue a signed access token for ``user``."""
        token, _ = self.issue_with_expiry(user)
        return token

    def issue_with_expiry(self, user: User) -> tuple[str, datetime]:
        """
        Issue a token and report its exact expiry.

        Format: header.payload.signature
        - header: {"alg": "HS256", "typ": "JWT"}
        - payload: {"iss": ..., "aud": ..., "sub": "42", "role": "Admin", ...}
        - signature: HMAC-SHA256(header + "." + payload, secret)
        """
        now = int(self._clock().timestamp())
        expires = now + int(self.lifetime.total_seconds())
        role = user.role.value

        payload = {
            "iss": self.settings.issuer,
            "aud": self.settings.audience,
            "sub": str(user.id),
            "nameid": str(user.id),
            "unique_name": user.username,
            "username": user.username,
            "roles": [role],
            "role": role,
            "jti": str(uuid.uuid4()),
            "iat": now,
            "nbf": now,
            "exp": expires,
        }

        token = self._sign(payload)
        logger.info(f"Issued token for user: {user.username} with role: {role}")
        return token, datetime.fromtimestamp(expires, tz=timezone.utc)

    # ── Validate ─────────────────────────────────────────────────────

    def validate(self, token: str | None) -> Optional[TokenClaims]:
        """
        Validate a token.

        Returns the decoded identity, or None for any failure (blank,
        malformed, bad signature, wrong issuer/audience, expired).
        """
        if token is None or not token.strip():
            logger.warning("Token validation failed: token is empty")
            return None

        try:
            claims = self.decode(token)
        except (AUTH_TOKEN_INVALID, AUTH_TOKEN_EXPIRED) as fault:
            logger.warning(f"Token validation failed: {fault.message}")
            return None

        logger.debug(f"Token validated for user: {claims.username}")
        return claims

    def decode(self, token: str) -> TokenClaims:
        """
        Verify and decode a token.

        Checks:
        1. Format (3 parts) and header algorithm
        2. Signature
        3. Issuer and audience
        4. Expiration and not-before

        Raises:
            AUTH_TOKEN_INVALID: malformed, forged, or not for us
            AUTH_TOKEN_EXPIRED: past its expiry
        """
        parts = token.strip().split(".")
        if len(parts) != 3:
            raise AUTH_TOKEN_INVALID(message="Malformed token: expected 3 parts")
        header_b64, payload_b64, signature_b64 = parts

        try:
            header = self._base64_decode_json(header_b64)
            signature = self._base64_decode(signature_b64)
        except ValueError as e:
            raise AUTH_TOKEN_INVALID(message=f"Malformed token: {e}") from e

        if header.get("alg") != ALGORITHM:
            raise AUTH_TOKEN_INVALID(message=f"Unsupported algorithm: {header.get('alg')}")

        message = f"{header_b64}.{payload_b64}".encode()
        if not self._verify_signature(message, signature):
            raise AUTH_TOKEN_INVALID(message="Invalid signature")

        try:
            payload = self._base64_decode_json(payload_b64)
        except ValueError as e:
            raise AUTH_TOKEN_INVALID(message=f"Malformed payload: {e}") from e

        if payload.get("iss") != self.settings.issuer:
            raise AUTH_TOKEN_INVALID(message="Invalid issuer")

        audience = payload.get("aud")
        audiences = audience if isinstance(audience, list) else [audience]
        if self.settings.audience not in audiences:
            raise AUTH_TOKEN_INVALID(message="Invalid audience")

        now = int(self._clock().timestamp())
        exp = payload.get("exp")
        if not isinstance(exp, int):
            raise AUTH_TOKEN_INVALID(message="Missing expiration")
        if now >= exp:
            raise AUTH_TOKEN_EXPIRED()

        nbf = payload.get("nbf", 0)
        if isinstance(nbf, int) and nbf > now:
            raise AUTH_TOKEN_INVALID(message="Token not yet valid")

        try:
            return TokenClaims(
                subject_id=int(payload["sub"]),
                username=payload["username"],
                role=UserRole.parse(payload["role"]),
                token_id=payload.get("jti", ""),
                issued_at=datetime.fromtimestamp(payload.get("iat", now), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise AUTH_TOKEN_INVALID(message=f"Missing identity claims: {e}") from e

    # ── Signing helpers ──────────────────────────────────────────────

    def _sign(self, payload: dict[str, Any]) -> str:
        header = {"alg": ALGORITHM, "typ": "JWT"}
        header_b64 = self._base64_encode_json(header)
        payload_b64 = self._base64_encode_json(payload)

        message = f"{header_b64}.{payload_b64}".encode()
        signature_b64 = self._base64_encode(self._create_signature(message))
        return f"{header_b64}.{payload_b64}.{signature_b64}"

    def _create_signature(self, message: bytes) -> bytes:
        h = hmac.HMAC(self._key, hashes.SHA256())
        h.update(message)
        return h.finalize()

    def _verify_signature(self, message: bytes, signature: bytes) -> bool:
        """Constant-time HMAC comparison."""
        h = hmac.HMAC(self._key, hashes.SHA256())
        h.update(message)
        try:
            h.verify(signature)
            return True
        except InvalidSignature:
            return False

    @staticmethod
    def _base64_encode(data: bytes) -> str:
        """URL-safe base64 encode without padding."""
        return base64.urlsafe_b64encode(data).rstrip(b"=").decode()

    @staticmethod
    def _base64_decode(data: str) -> bytes:
        """URL-safe base64 decode; raises ValueError on garbage."""
        padding = 4 - (len(data) % 4)
        if padding != 4:
            data += "=" * padding
        try:
            return base64.urlsafe_b64decode(data.encode("ascii"))
        except (UnicodeEncodeError, binascii.Error) as e:
            raise ValueError(str(e)) from e

    def _base64_encode_json(self, data: dict) -> str:
        return self._base64_encode(json.dumps(data, separators=(",", ":")).encode())

    def _base64_decode_json(self, data: str) -> dict:
        try:
            decoded = json.loads(self._base64_decode(data))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ValueError(str(e)) from e
        if not isinstance(decoded, dict):
            raise ValueError("expected a JSON object")
        return decoded
