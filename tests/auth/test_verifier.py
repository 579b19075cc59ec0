"""Tests for bearer token verification."""

import time

import pytest

from parkrun_helper.auth import (
    AudienceMismatchError,
    BadSignatureError,
    MalformedTokenError,
    MissingClaimsError,
    TokenExpiredError,
    TokenVerifier,
    UnknownSigningKeyError,
)
from parkrun_helper.config import AuthConfig
from tests.utils import CLIENT_ID, ISSUER, TENANT_ID, b64url, make_claims, sign_token


@pytest.mark.asyncio
async def test_valid_token_returns_identity(token_verifier, rsa_private_key):
    token = sign_token(rsa_private_key, make_claims(sub="user-42"))

    identity = await token_verifier.verify(token)

    assert identity.user_id == "user-42"
    assert identity.email == "organiser@example.com"
    assert identity.name == "Test Organiser"
    assert identity.roles == ["Organiser"]
    assert identity.scopes == ["access_as_user", "Helpers.Read"]


@pytest.mark.asyncio
async def test_identity_defaults(token_verifier, rsa_private_key):
    claims = make_claims(email=None, roles=None, scp=None, preferred_username="someone@example.com")
    identity = await token_verifier.verify(sign_token(rsa_private_key, claims))

    assert identity.email == "someone@example.com"
    assert identity.roles == []
    assert identity.scopes == []
    assert identity.model_dump(by_alias=True)["userId"] == "user-123"


@pytest.mark.asyncio
@pytest.mark.parametrize("roles, expected", [
    ("Admin", ["Admin"]),
    (["Admin", 7, None, "Organiser"], ["Admin", "Organiser"]),
    ({"role": "Admin"}, []),
    (42, []),
])
async def test_roles_claim_is_normalized(token_verifier, rsa_private_key, roles, expected):
    identity = await token_verifier.verify(sign_token(rsa_private_key, make_claims(roles=roles)))

    assert identity.roles == expected


@pytest.mark.asyncio
async def test_audience_list_is_accepted(token_verifier, rsa_private_key):
    token = sign_token(rsa_private_key, make_claims(aud=["other-api", CLIENT_ID]))
    identity = await token_verifier.verify(token)
    assert identity.user_id == "user-123"


@pytest.mark.asyncio
@pytest.mark.parametrize("offset", [-1, -3600, 0])
async def test_expired_token(token_verifier, rsa_private_key, offset):
    token = sign_token(rsa_private_key, make_claims(exp=int(time.time()) + offset))
    with pytest.raises(TokenExpiredError):
        await token_verifier.verify(token)


@pytest.mark.asyncio
async def test_expiry_checked_against_injected_clock(key_resolver, rsa_private_key):
    verifier = TokenVerifier(key_resolver, issuer=ISSUER, audience=CLIENT_ID, now=lambda: 2_000_000_000)
    token = sign_token(rsa_private_key, make_claims(exp=1_999_999_999))
    with pytest.raises(TokenExpiredError):
        await verifier.verify(token)


@pytest.mark.asyncio
async def test_token_without_exp_is_accepted(token_verifier, rsa_private_key):
    identity = await token_verifier.verify(sign_token(rsa_private_key, make_claims(exp=None)))
    assert identity.user_id == "user-123"


@pytest.mark.asyncio
async def test_unknown_kid(token_verifier, rsa_private_key):
    token = sign_token(rsa_private_key, make_claims(), kid="not-in-key-set")
    with pytest.raises(UnknownSigningKeyError) as exc_info:
        await token_verifier.verify(token)
    assert exc_info.value.reason.startswith("Failed to get signing key")


@pytest.mark.asyncio
async def test_unknown_kid_wins_over_expiry(token_verifier, rsa_private_key):
    token = sign_token(rsa_private_key, make_claims(exp=int(time.time()) - 60), kid="not-in-key-set")
    with pytest.raises(UnknownSigningKeyError):
        await token_verifier.verify(token)


@pytest.mark.asyncio
async def test_missing_kid(token_verifier, rsa_private_key):
    token = sign_token(rsa_private_key, make_claims(), kid=None)
    with pytest.raises(MalformedTokenError):
        await token_verifier.verify(token)


@pytest.mark.asyncio
@pytest.mark.parametrize("raw_token", [
    "",
    "only.two",
    "a.b.c.d",
    "!!!.???.***",
    f"{b64url({'kid': 'x'})}.bm90LWpzb24.sig",
])
async def test_malformed_tokens(token_verifier, raw_token):
    with pytest.raises(MalformedTokenError):
        await token_verifier.verify(raw_token)


@pytest.mark.asyncio
async def test_signature_from_untrusted_key(token_verifier, other_private_key):
    token = sign_token(other_private_key, make_claims())
    with pytest.raises(BadSignatureError):
        await token_verifier.verify(token)


@pytest.mark.asyncio
async def test_tampered_payload(token_verifier, rsa_private_key):
    header, _, signature = sign_token(rsa_private_key, make_claims()).split(".")
    forged = f"{header}.{b64url(make_claims(sub='admin'))}.{signature}"
    with pytest.raises(BadSignatureError):
        await token_verifier.verify(forged)


@pytest.mark.asyncio
async def test_non_rs256_algorithm(token_verifier):
    token = sign_token("shared-secret-that-is-long-enough-for-hs256", make_claims(), algorithm="HS256")
    with pytest.raises(BadSignatureError):
        await token_verifier.verify(token)


@pytest.mark.asyncio
async def test_wrong_issuer(token_verifier, rsa_private_key):
    token = sign_token(rsa_private_key, make_claims(iss="https://login.microsoftonline.com/other/v2.0"))
    with pytest.raises(AudienceMismatchError) as exc_info:
        await token_verifier.verify(token)
    assert exc_info.value.reason == "Invalid token issuer"


@pytest.mark.asyncio
async def test_wrong_audience(token_verifier, rsa_private_key):
    token = sign_token(rsa_private_key, make_claims(aud="some-other-api"))
    with pytest.raises(AudienceMismatchError):
        await token_verifier.verify(token)


@pytest.mark.asyncio
@pytest.mark.parametrize("dropped", ["sub", "aud"])
async def test_missing_claims(token_verifier, rsa_private_key, dropped):
    token = sign_token(rsa_private_key, make_claims(**{dropped: None}))
    with pytest.raises(MissingClaimsError):
        await token_verifier.verify(token)


@pytest.mark.asyncio
async def test_non_numeric_exp(token_verifier, rsa_private_key):
    token = sign_token(rsa_private_key, make_claims(exp="tomorrow"))
    with pytest.raises(MalformedTokenError):
        await token_verifier.verify(token)


def test_from_config_uses_tenant_issuer_and_client_audience():
    config = AuthConfig(tenant_id=TENANT_ID, client_id=CLIENT_ID)
    verifier = TokenVerifier.from_config(config)

    assert verifier.issuer == ISSUER
    assert verifier.audience == CLIENT_ID
    assert verifier.key_resolver.jwks_uri == (
        f"https://login.microsoftonline.com/{TENANT_ID}/discovery/v2.0/keys"
    )
    assert verifier.key_resolver.timeout == 10.0
