"""Data models for Google identity."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class IdentityClaims(BaseModel):
    """
    Identity extracted from a verified Google ID token.

    Lives for the duration of one request; nothing here is persisted.

    Attributes:
        email: Google account email (required)
        given_name: First name, empty when Google does not share it
        family_name: Last name, empty when Google does not share it
        subject: Stable Google account id ('sub' claim)

    Example:
        >>> IdentityClaims.from_token_claims({"email": "a@b.com", "sub": "1234"})
        IdentityClaims(email='a@b.com', given_name='', family_name='', subject='1234')
    """

    model_config = ConfigDict(frozen=True)

    email: str
    given_name: str = ""
    family_name: str = ""
    subject: str = ""

    @classmethod
    def from_token_claims(cls, claims: dict[str, Any]) -> "IdentityClaims":
        return cls(
            email=claims["email"],
            given_name=claims.get("given_name") or "",
            family_name=claims.get("family_name") or "",
            subject=str(claims.get("sub") or ""),
        )
