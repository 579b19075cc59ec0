"""Bearer token verification against Azure AD signing keys."""

import base64
import binascii
import json
import time
from typing import Any, Callable, Dict, Optional, Tuple

import jwt

from ..config import AuthConfig
from .exceptions import (
    AudienceMismatchError,
    BadSignatureError,
    KeyNotFoundError,
    MalformedTokenError,
    MissingClaimsError,
    TokenExpiredError,
    UnknownSigningKeyError,
)
from .keys import KeyCache, RequestRateLimiter, SigningKeyResolver
from .models import VerifiedIdentity

ALGORITHM = "RS256"

# Signature only; claims are checked explicitly below in a fixed order.
_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
    "require": [],
}


def _b64url_json(segment: str) -> Dict[str, Any]:
    padded = segment + "=" * (-len(segment) % 4)
    value = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    if not isinstance(value, dict):
        raise ValueError("segment is not a JSON object")
    return value


def decode_segments(raw_token: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Decode header and payload without verifying anything.

    Raises:
        MalformedTokenError: If the token is not three base64url JSON segments
    """
    parts = raw_token.split(".")
    if len(parts) != 3:
        raise MalformedTokenError("Invalid token format")

    try:
        return _b64url_json(parts[0]), _b64url_json(parts[1])
    except (ValueError, binascii.Error, UnicodeError):
        raise MalformedTokenError("Failed to decode token")


class TokenVerifier:
    """Validate signature, issuer, audience and expiry of RS256 bearer tokens."""

    def __init__(
        self,
        key_resolver: SigningKeyResolver,
        issuer: str,
        audience: str,
        now: Callable[[], float] = time.time,
    ):
        self.key_resolver = key_resolver
        self.issuer = issuer
        self.audience = audience
        self._now = now

    @classmethod
    def from_config(cls, config: AuthConfig, key_resolver: Optional[SigningKeyResolver] = None) -> "TokenVerifier":
        if key_resolver is None:
            key_resolver = SigningKeyResolver(
                config.resolved_jwks_uri,
                cache=KeyCache(ttl=config.cache_max_age),
                rate_limiter=RequestRateLimiter(
                    max_requests=config.jwks_requests_per_minute,
                    max_wait=config.rate_limit_max_wait,
                ),
                timeout=config.request_timeout,
            )
        return cls(key_resolver, issuer=config.issuer, audience=config.client_id)

    async def verify(self, raw_token: str) -> VerifiedIdentity:
        """Verify a raw bearer token and extract the caller identity.

        Raises:
            AuthError: One of the specific failure kinds
        """
        header, payload = decode_segments(raw_token)

        kid = header.get("kid")
        if not kid or not isinstance(kid, str):
            raise MalformedTokenError("Token missing kid in header")

        try:
            signing_key = await self.key_resolver.get_signing_key(kid)
        except KeyNotFoundError as e:
            raise UnknownSigningKeyError(f"Failed to get signing key: {e.detail}")

        if header.get("alg") != ALGORITHM:
            raise BadSignatureError(f"Unsupported token algorithm: {header.get('alg')}")

        try:
            jwt.decode(
                raw_token,
                key=signing_key.public_key,
                algorithms=[ALGORITHM],
                options=_DECODE_OPTIONS,
            )
        except jwt.InvalidTokenError:
            raise BadSignatureError()

        if payload.get("iss") != self.issuer:
            raise AudienceMismatchError("Invalid token issuer")

        audience = payload.get("aud")
        if audience is not None and not self._audience_matches(audience):
            raise AudienceMismatchError("Invalid token audience")

        if not payload.get("sub") or not audience:
            raise MissingClaimsError()

        exp = payload.get("exp")
        if exp is not None:
            if isinstance(exp, bool) or not isinstance(exp, (int, float)):
                raise MalformedTokenError("Invalid exp claim")
            if exp <= self._now():
                raise TokenExpiredError()

        return self._build_identity(payload)

    def _audience_matches(self, audience: Any) -> bool:
        if isinstance(audience, list):
            return self.audience in audience
        return audience == self.audience

    @staticmethod
    def _build_identity(payload: Dict[str, Any]) -> VerifiedIdentity:
        scopes = payload.get("scp")
        roles = payload.get("roles")
        if isinstance(roles, str):
            roles = [roles]
        elif not isinstance(roles, list):
            roles = []
        return VerifiedIdentity(
            user_id=str(payload["sub"]),
            email=payload.get("email") or payload.get("preferred_username"),
            name=payload.get("name"),
            roles=[role for role in roles if isinstance(role, str)],
            scopes=scopes.split() if isinstance(scopes, str) else [],
        )
