"""Google identity exchange and ID token verification."""

from src.accounts.auth.exceptions import (
    IdentityError,
    InvalidToken,
    MissingEmail,
    MissingToken,
    UnverifiedEmail,
    UpstreamExchangeFailure,
)
from src.accounts.auth.google import GoogleOAuthClient
from src.accounts.auth.jwks import JWKSCache
from src.accounts.auth.jwt_validator import JWTValidator
from src.accounts.auth.models import IdentityClaims

__all__ = [
    "GoogleOAuthClient",
    "JWKSCache",
    "JWTValidator",
    "IdentityClaims",
    "IdentityError",
    "InvalidToken",
    "MissingEmail",
    "MissingToken",
    "UnverifiedEmail",
    "UpstreamExchangeFailure",
]
