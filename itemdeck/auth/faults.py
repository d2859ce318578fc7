"""
ItemDeck Auth - Authentication Faults

Raised inside the auth layer; the public operations turn them into an
absent result so callers only ever see "unauthenticated".
"""

from itemdeck.faults import ConfigFault, Fault, FaultDomain, Severity


class AUTH_INVALID_CREDENTIALS(Fault):
    """Invalid username or password."""
    domain = FaultDomain.SECURITY
    code = "AUTH_001"
    severity = Severity.WARN
    message = "Invalid credentials"
    retryable = False


class AUTH_TOKEN_INVALID(Fault):
    """Invalid or malformed token."""
    domain = FaultDomain.SECURITY
    code = "AUTH_002"
    severity = Severity.WARN
    message = "Invalid token"
    retryable = False


class AUTH_TOKEN_EXPIRED(Fault):
    """Token has expired."""
    domain = FaultDomain.SECURITY
    code = "AUTH_003"
    severity = Severity.WARN
    message = "Token expired"
    retryable = False


class TokenSecretFault(ConfigFault):
    """Signing secret missing or too short."""

    def __init__(self, min_length: int):
        super().__init__(
            f"JWT secret key must be at least {min_length} characters long",
            min_length=min_length,
        )
