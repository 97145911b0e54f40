"""Google ID token verification using JWKS for signature validation."""

import logging
from typing import Any

import httpx
from jose import JWTError, jwt

from src.accounts.auth.jwks import JWKSCache

logger = logging.getLogger(__name__)


class JWTValidator:
    """
    Verifies Google-issued ID tokens.

    Uses cached JWKS to verify RS256 signatures cryptographically and
    validates expiration, issuer, audience and (when an access token is
    supplied) the at_hash claim.

    Attributes:
        jwks_cache: JWKS cache instance for fetching signing keys
        issuer: Accepted issuer(s) (iss claim)
        audience: Expected audience (aud claim), the OAuth client id
        leeway: Clock skew tolerance in seconds (default: 10)

    Example:
        >>> validator = JWTValidator(jwks_cache, ["https://accounts.google.com"], client_id)
        >>> claims = await validator.verify_token(id_token)
        >>> email = claims["email"]
    """

    def __init__(
        self,
        jwks_cache: JWKSCache,
        issuer: str | list[str],
        audience: str,
        leeway: int = 10,
    ):
        self.jwks_cache = jwks_cache
        self.issuer = issuer
        self.audience = audience
        self.leeway = leeway

    async def verify_token(
        self,
        token: str,
        *,
        audience: str | None = None,
        issuer: str | list[str] | None = None,
        access_token: str | None = None,
    ) -> dict[str, Any]:
        """
        Verify an ID token and return its claims.

        Performs the following validations:
        1. Decode JWT header to extract key ID (kid)
        2. Fetch signing key from JWKS cache
        3. Verify signature, expiration, issuer and audience
        4. Verify at_hash against the access token if one is given

        Args:
            token: Encoded ID token
            audience: Overrides the configured audience
            issuer: Overrides the configured issuer(s)
            access_token: Access token returned alongside the ID token

        Returns:
            Dictionary of verified claims (sub, email, given_name, family_name, ...)

        Raises:
            JWTError: If token is invalid, expired, or signature verification fails
            httpx.HTTPError: If the JWKS document cannot be fetched
        """
        try:
            unverified_header = jwt.get_unverified_header(token)
            kid = unverified_header.get("kid")

            if not kid:
                raise JWTError("JWT header missing 'kid' (key ID)")

            try:
                signing_key = await self.jwks_cache.get_signing_key(kid)
            except ValueError as e:
                raise JWTError(str(e)) from e

            claims = jwt.decode(
                token,
                signing_key,
                algorithms=["RS256"],
                audience=audience or self.audience,
                issuer=issuer or self.issuer,
                access_token=access_token,
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_iat": True,
                    "verify_aud": True,
                    "verify_iss": True,
                    "verify_at_hash": access_token is not None,
                    "require_exp": True,
                    "require_iat": True,
                    "leeway": self.leeway,
                },
            )

            logger.debug(
                "ID token verified",
                extra={"subject": claims.get("sub"), "kid": kid, "exp": claims.get("exp")},
            )

            return claims

        except JWTError as e:
            logger.warning(
                f"ID token verification failed: {e}",
                extra={"error_type": "jwt_verification_failed", "error": str(e)},
            )
            raise

        except httpx.HTTPError:
            raise

        except Exception as e:
            logger.error(
                f"Unexpected error during ID token verification: {e}",
                exc_info=True,
                extra={"error_type": "jwt_verification_error"},
            )
            raise JWTError(f"JWT verification error: {e}") from e
