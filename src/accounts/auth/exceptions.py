"""Exceptions raised while exchanging a Google authorization code."""

from src.accounts.exceptions import ExchangeError


class IdentityError(ExchangeError):
    """Base exception for malformed or untrustworthy identity data."""

    status_code = 400


class UpstreamExchangeFailure(IdentityError):
    """Raised when Google rejects the authorization code. Needs a fresh code."""

    error = "Google exchange failed"


class MissingToken(IdentityError):
    """Raised when the token response carries no id_token."""

    error = "No id_token returned by Google"


class MissingEmail(IdentityError):
    """Raised when the verified id_token has no email claim."""

    error = "No email in id_token"


class InvalidToken(IdentityError):
    """Raised when the id_token fails signature, audience, issuer or expiry checks."""

    error = "Invalid id_token"


class UnverifiedEmail(IdentityError):
    """Raised when Google has not verified the email in the id_token."""

    error = "Email not verified by Google"
