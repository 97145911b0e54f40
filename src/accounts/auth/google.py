"""Google authorization code exchange."""

import logging
from typing import Any

import httpx
from jose import JWTError

from src.accounts.auth.exceptions import (
    InvalidToken,
    MissingEmail,
    MissingToken,
    UnverifiedEmail,
    UpstreamExchangeFailure,
)
from src.accounts.auth.jwt_validator import JWTValidator
from src.accounts.auth.models import IdentityClaims
from src.accounts.exceptions import UpstreamTimeout

logger = logging.getLogger(__name__)


class GoogleOAuthClient:
    """
    Trades a Google authorization code for verified identity claims.

    Makes exactly one call to the token endpoint per exchange. The returned
    id_token is verified by the injected validator (signature, audience,
    issuer, expiry) before any claim is read.

    Example:
        >>> client = GoogleOAuthClient(http_client, validator, client_id, client_secret)
        >>> claims = await client.identify(code, redirect_uri="postmessage")
        >>> claims.email
        'jane@example.com'
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        validator: JWTValidator,
        client_id: str,
        client_secret: str,
        token_url: str = "https://oauth2.googleapis.com/token",
        default_redirect_uri: str = "postmessage",
    ) -> None:
        self._http_client = http_client
        self._validator = validator
        self.client_id = client_id
        self._client_secret = client_secret
        self.token_url = token_url
        self.default_redirect_uri = default_redirect_uri

    async def exchange_code(self, code: str, redirect_uri: str | None = None) -> dict[str, Any]:
        """
        POST the code to Google's token endpoint.

        Args:
            code: Authorization code from the browser
            redirect_uri: Must match the URI used to obtain the code; defaults
                to the popup-flow sentinel

        Returns:
            Token response payload (id_token, access_token, ...)

        Raises:
            UpstreamExchangeFailure: If Google answers with a non-2xx status
            MissingToken: If the payload has no id_token
            UpstreamTimeout: If Google does not answer in time
        """
        try:
            response = await self._http_client.post(
                self.token_url,
                data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self._client_secret,
                    "redirect_uri": redirect_uri or self.default_redirect_uri,
                    "grant_type": "authorization_code",
                },
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Google token endpoint timed out: {e}", extra={"error_type": "google_timeout"})
            raise UpstreamTimeout() from e

        token_data = _json_or_text(response)

        if not response.is_success:
            logger.warning(
                f"Google token exchange failed with status {response.status_code}",
                extra={"error_type": "google_exchange_failed", "details": token_data},
            )
            raise UpstreamExchangeFailure(details=token_data)

        if not isinstance(token_data, dict) or not token_data.get("id_token"):
            raise MissingToken(details=token_data)

        return token_data

    async def identify(self, code: str, redirect_uri: str | None = None) -> IdentityClaims:
        """
        Exchange the code and return the claims of the verified id_token.

        Raises:
            InvalidToken: If verification fails
            MissingEmail: If the token carries no email
            UnverifiedEmail: If Google has not verified that email
        """
        token_data = await self.exchange_code(code, redirect_uri)

        try:
            claims = await self._validator.verify_token(
                token_data["id_token"],
                audience=self.client_id,
                access_token=token_data.get("access_token"),
            )
        except JWTError as e:
            raise InvalidToken(details=str(e)) from e
        except httpx.TimeoutException as e:
            raise UpstreamTimeout() from e

        if not claims.get("email"):
            raise MissingEmail()

        # Customers are linked by email alone, so the address must be proven
        if claims.get("email_verified") not in (True, "true"):
            logger.warning(
                "Rejected id_token with unverified email",
                extra={"error_type": "email_not_verified"},
            )
            raise UnverifiedEmail()

        return IdentityClaims.from_token_claims(claims)


def _json_or_text(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
