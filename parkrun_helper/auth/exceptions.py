"""Token verification failures.

Every failure kind carries a human-readable ``reason`` that the HTTP layer
surfaces in its 401 response.
"""


class AuthError(Exception):
    """Base class for bearer token verification failures."""

    default_reason = "Unauthorized access"

    def __init__(self, reason: str = None):
        self.reason = reason or self.default_reason
        super().__init__(self.reason)


class MissingTokenError(AuthError):
    default_reason = "Missing bearer token"


class MalformedTokenError(AuthError):
    default_reason = "Invalid token format"


class UnknownSigningKeyError(AuthError):
    default_reason = "Unknown signing key"


class BadSignatureError(AuthError):
    default_reason = "Invalid token signature"


class AudienceMismatchError(AuthError):
    default_reason = "Invalid token audience"


class TokenExpiredError(AuthError):
    default_reason = "Token has expired"


class MissingClaimsError(AuthError):
    default_reason = "Token missing required claims"


class KeyNotFoundError(Exception):
    """Raised by the key resolver when a key id cannot be resolved."""

    def __init__(self, key_id: str, detail: str = "not present in key set"):
        super().__init__(f"Signing key {key_id}: {detail}")
        self.key_id = key_id
        self.detail = detail


class RateLimitExceededError(Exception):
    """Raised when the JWKS request budget is exhausted past the wait bound."""
