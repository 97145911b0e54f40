"""Shared fixtures for Google identity tests."""

import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt

from src.accounts.auth.jwks import JWKSCache
from src.accounts.auth.jwt_validator import JWTValidator

CLIENT_ID = "test-client-id.apps.googleusercontent.com"
ISSUERS = ["https://accounts.google.com", "accounts.google.com"]
KID = "test-key-1"


def _generate_key_pair() -> tuple[str, str]:
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


@pytest.fixture(scope="session")
def rsa_key_pair() -> tuple[str, str]:
    """Provide a (private PEM, public PEM) fixture key pair."""
    return _generate_key_pair()


@pytest.fixture(scope="session")
def other_rsa_key_pair() -> tuple[str, str]:
    """Provide a second key pair that Google never published."""
    return _generate_key_pair()


@pytest.fixture
def jwks_document(rsa_key_pair) -> dict[str, Any]:
    """Provide a JWKS document publishing the fixture public key."""
    _, public_pem = rsa_key_pair
    key_dict = jwk.construct(public_pem, algorithm="RS256").to_dict()
    key_dict.update({"kid": KID, "use": "sig"})
    return {"keys": [key_dict]}


@pytest.fixture
def google_claims() -> dict[str, Any]:
    """Provide the claims Google puts in an id_token."""
    now = int(time.time())
    return {
        "iss": "https://accounts.google.com",
        "azp": CLIENT_ID,
        "aud": CLIENT_ID,
        "sub": "110169484474386276334",
        "email": "jane@example.com",
        "email_verified": True,
        "given_name": "Jane",
        "family_name": "Doe",
        "iat": now,
        "exp": now + 3600,
    }


@pytest.fixture
def make_id_token(rsa_key_pair) -> Callable[..., str]:
    """Provide a factory signing claims with the fixture private key."""
    private_pem, _ = rsa_key_pair

    def _make(
        claims: dict[str, Any],
        kid: str | None = KID,
        key: str | None = None,
        access_token: str | None = None,
    ) -> str:
        headers = {"kid": kid} if kid else None
        return jwt.encode(
            claims,
            key or private_pem,
            algorithm="RS256",
            headers=headers,
            access_token=access_token,
        )

    return _make


@pytest.fixture
def loaded_jwks_cache(rsa_key_pair) -> JWKSCache:
    """Provide a JWKS cache pre-populated with the fixture public key."""
    _, public_pem = rsa_key_pair
    cache = JWKSCache("https://www.googleapis.com/oauth2/v3/certs")
    cache._keys = {KID: jwk.construct(public_pem, algorithm="RS256")}
    cache._last_refresh = datetime.now(UTC)
    return cache


@pytest.fixture
def validator(loaded_jwks_cache) -> JWTValidator:
    """Provide a validator configured like production for Google tokens."""
    return JWTValidator(jwks_cache=loaded_jwks_cache, issuer=ISSUERS, audience=CLIENT_ID)
