"""Tests for the Google authorization code exchange."""

from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from jose import JWTError

from src.accounts.auth.exceptions import (
    InvalidToken,
    MissingEmail,
    MissingToken,
    UnverifiedEmail,
    UpstreamExchangeFailure,
)
from src.accounts.auth.google import GoogleOAuthClient
from src.accounts.auth.models import IdentityClaims
from src.accounts.exceptions import UpstreamTimeout

CLIENT_ID = "test-client-id.apps.googleusercontent.com"
TOKEN_URL = "https://oauth2.googleapis.com/token"


@pytest.fixture
def http_client() -> Mock:
    """Provide a stand-in for the shared httpx client."""
    client = Mock(spec=httpx.AsyncClient)
    client.post = AsyncMock()
    return client


@pytest.fixture
def mock_validator() -> Mock:
    """Provide a validator that accepts any token."""
    validator = Mock()
    validator.verify_token = AsyncMock(
        return_value={
            "sub": "110169484474386276334",
            "email": "jane@example.com",
            "email_verified": True,
            "given_name": "Jane",
            "family_name": "Doe",
        }
    )
    return validator


def _client(http_client, validator) -> GoogleOAuthClient:
    return GoogleOAuthClient(
        http_client=http_client,
        validator=validator,
        client_id=CLIENT_ID,
        client_secret="shh",
        token_url=TOKEN_URL,
    )


@pytest.mark.asyncio
class TestExchangeCode:
    """Tests for GoogleOAuthClient.exchange_code."""

    async def test_posts_form_to_token_endpoint(self, http_client, mock_validator):
        """Test the token request carries every OAuth field."""
        http_client.post.return_value = httpx.Response(200, json={"id_token": "a.b.c"})

        await _client(http_client, mock_validator).exchange_code("4/0AX-code", "https://shop.example")

        http_client.post.assert_called_once_with(
            TOKEN_URL,
            data={
                "code": "4/0AX-code",
                "client_id": CLIENT_ID,
                "client_secret": "shh",
                "redirect_uri": "https://shop.example",
                "grant_type": "authorization_code",
            },
        )

    async def test_defaults_to_popup_redirect_uri(self, http_client, mock_validator):
        """Test popup flows send the postmessage sentinel."""
        http_client.post.return_value = httpx.Response(200, json={"id_token": "a.b.c"})

        await _client(http_client, mock_validator).exchange_code("4/0AX-code")

        assert http_client.post.call_args.kwargs["data"]["redirect_uri"] == "postmessage"

    async def test_rejected_code_raises_with_details(self, http_client, mock_validator):
        """Test a non-2xx response surfaces Google's error body."""
        error_body = {"error": "invalid_grant", "error_description": "Bad Request"}
        http_client.post.return_value = httpx.Response(400, json=error_body)

        with pytest.raises(UpstreamExchangeFailure) as exc_info:
            await _client(http_client, mock_validator).exchange_code("used-code")

        assert exc_info.value.status_code == 400
        assert exc_info.value.to_body() == {"error": "Google exchange failed", "details": error_body}

    async def test_non_json_error_body_kept_as_text(self, http_client, mock_validator):
        """Test an HTML error page is passed through as text."""
        http_client.post.return_value = httpx.Response(502, text="<html>Bad Gateway</html>")

        with pytest.raises(UpstreamExchangeFailure) as exc_info:
            await _client(http_client, mock_validator).exchange_code("code")

        assert exc_info.value.details == "<html>Bad Gateway</html>"

    @pytest.mark.parametrize("status_code", [200, 201])
    async def test_missing_id_token_raises(self, http_client, mock_validator, status_code):
        """Test a successful response without id_token is rejected."""
        http_client.post.return_value = httpx.Response(
            status_code, json={"access_token": "ya29.x", "token_type": "Bearer"}
        )

        with pytest.raises(MissingToken) as exc_info:
            await _client(http_client, mock_validator).exchange_code("code")

        assert exc_info.value.error == "No id_token returned by Google"
        assert exc_info.value.details["access_token"] == "ya29.x"

    async def test_timeout_raises_upstream_timeout(self, http_client, mock_validator):
        """Test a token endpoint timeout maps to a retryable error."""
        http_client.post.side_effect = httpx.ReadTimeout("timed out")

        with pytest.raises(UpstreamTimeout) as exc_info:
            await _client(http_client, mock_validator).exchange_code("code")

        assert exc_info.value.to_body()["retryable"] is True


@pytest.mark.asyncio
class TestIdentify:
    """Tests for GoogleOAuthClient.identify."""

    async def test_returns_identity_claims(self, http_client, mock_validator):
        """Test verified claims are mapped to IdentityClaims."""
        http_client.post.return_value = httpx.Response(
            200, json={"id_token": "a.b.c", "access_token": "ya29.x"}
        )

        claims = await _client(http_client, mock_validator).identify("code")

        assert claims == IdentityClaims(
            email="jane@example.com",
            given_name="Jane",
            family_name="Doe",
            subject="110169484474386276334",
        )
        mock_validator.verify_token.assert_called_once_with(
            "a.b.c", audience=CLIENT_ID, access_token="ya29.x"
        )

    async def test_missing_names_default_to_empty(self, http_client, mock_validator):
        """Test accounts without a profile name still resolve."""
        http_client.post.return_value = httpx.Response(200, json={"id_token": "a.b.c"})
        mock_validator.verify_token.return_value = {
            "sub": "1",
            "email": "x@example.com",
            "email_verified": True,
        }

        claims = await _client(http_client, mock_validator).identify("code")

        assert claims.given_name == ""
        assert claims.family_name == ""

    async def test_missing_email_raises(self, http_client, mock_validator):
        """Test a token without email is rejected."""
        http_client.post.return_value = httpx.Response(200, json={"id_token": "a.b.c"})
        mock_validator.verify_token.return_value = {"sub": "1"}

        with pytest.raises(MissingEmail):
            await _client(http_client, mock_validator).identify("code")

    @pytest.mark.parametrize("email_verified", [False, "false", None])
    async def test_unverified_email_raises(self, http_client, mock_validator, email_verified):
        """Test an address Google has not verified cannot claim a customer."""
        http_client.post.return_value = httpx.Response(200, json={"id_token": "a.b.c"})
        claims = {"sub": "1", "email": "victim@example.com"}
        if email_verified is not None:
            claims["email_verified"] = email_verified
        mock_validator.verify_token.return_value = claims

        with pytest.raises(UnverifiedEmail) as exc_info:
            await _client(http_client, mock_validator).identify("code")

        assert exc_info.value.to_body() == {"error": "Email not verified by Google"}

    async def test_verification_failure_raises_invalid_token(self, http_client, mock_validator):
        """Test validator errors become InvalidToken."""
        http_client.post.return_value = httpx.Response(200, json={"id_token": "a.b.c"})
        mock_validator.verify_token.side_effect = JWTError("Invalid audience")

        with pytest.raises(InvalidToken) as exc_info:
            await _client(http_client, mock_validator).identify("code")

        assert exc_info.value.status_code == 400
        assert exc_info.value.details == "Invalid audience"

    async def test_end_to_end_with_signed_token(
        self, http_client, validator, make_id_token, google_claims
    ):
        """Test a real signed id_token flows through verification."""
        token = make_id_token(google_claims, access_token="ya29.x")
        http_client.post.return_value = httpx.Response(
            200, json={"id_token": token, "access_token": "ya29.x"}
        )

        claims = await _client(http_client, validator).identify("code")

        assert claims.email == "jane@example.com"
        assert claims.subject == "110169484474386276334"
