"""Azure AD bearer token verification."""

from .exceptions import (
    AuthError,
    AudienceMismatchError,
    BadSignatureError,
    KeyNotFoundError,
    MalformedTokenError,
    MissingClaimsError,
    MissingTokenError,
    RateLimitExceededError,
    TokenExpiredError,
    UnknownSigningKeyError,
)
from .keys import KeyCache, RequestRateLimiter, SigningKeyResolver
from .models import SigningKey, VerifiedIdentity
from .verifier import TokenVerifier

__all__ = [
    "AuthError",
    "AudienceMismatchError",
    "BadSignatureError",
    "KeyNotFoundError",
    "MalformedTokenError",
    "MissingClaimsError",
    "MissingTokenError",
    "RateLimitExceededError",
    "TokenExpiredError",
    "UnknownSigningKeyError",
    "KeyCache",
    "RequestRateLimiter",
    "SigningKeyResolver",
    "SigningKey",
    "VerifiedIdentity",
    "TokenVerifier",
]
