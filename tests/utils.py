"""Test utilities for parkrun-helper tests."""
import base64
import json
import time
from typing import Any, Dict, Optional

import jwt
from jwt.algorithms import RSAAlgorithm

from parkrun_helper.auth import KeyNotFoundError, SigningKey

TENANT_ID = "test-tenant"
CLIENT_ID = "test-client-id"
ISSUER = f"https://login.microsoftonline.com/{TENANT_ID}/v2.0"
KEY_ID = "test-key-1"


def make_claims(**overrides) -> Dict[str, Any]:
    """Valid claim set for the test tenant; pass ``name=None`` to drop a claim."""
    now = int(time.time())
    claims = {
        "sub": "user-123",
        "aud": CLIENT_ID,
        "iss": ISSUER,
        "iat": now,
        "exp": now + 3600,
        "email": "organiser@example.com",
        "name": "Test Organiser",
        "roles": ["Organiser"],
        "scp": "access_as_user Helpers.Read",
    }
    claims.update(overrides)
    return {k: v for k, v in claims.items() if v is not None}


def sign_token(private_key, claims: Dict[str, Any], kid: Optional[str] = KEY_ID, algorithm: str = "RS256") -> str:
    headers = {"kid": kid} if kid is not None else {}
    return jwt.encode(claims, private_key, algorithm=algorithm, headers=headers)


def public_jwk(private_key, kid: str = KEY_ID) -> Dict[str, Any]:
    jwk = RSAAlgorithm.to_jwk(private_key.public_key(), as_dict=True)
    jwk.update({"kid": kid, "use": "sig", "alg": "RS256"})
    return jwk


def b64url(data: Dict[str, Any]) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()


class StaticKeyResolver:
    """Key resolver stand-in serving a fixed set of keys."""

    def __init__(self, keys: Dict[str, Any]):
        self.keys = keys
        self.calls = []

    async def get_signing_key(self, key_id: str) -> SigningKey:
        self.calls.append(key_id)
        if key_id not in self.keys:
            raise KeyNotFoundError(key_id)
        return SigningKey(key_id=key_id, public_key=self.keys[key_id])
