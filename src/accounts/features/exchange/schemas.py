"""Pydantic models for the Google code exchange endpoint."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExtraProfile(BaseModel):
    """Optional profile fields collected by the storefront sign-up form."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    company: str | None = None
    vat: str | None = None
    phone: str | None = None


class ExchangeRequest(BaseModel):
    """Request body for POST /exchange."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    code: str | None = Field(None, description="Google authorization code")
    redirect_uri: str | None = Field(
        None, description="Redirect URI used to obtain the code; popup flows omit it"
    )
    extra: ExtraProfile | None = None


class ExchangeResponse(BaseModel):
    """Response body for a successful exchange."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "ok": True,
                "email": "jane@example.com",
                "customerId": "gid://shopify/Customer/7391727321",
                "firstName": "Jane",
                "lastName": "Doe",
                "exists": False,
                "nextUrl": "/account",
            }
        },
    )

    ok: bool = True
    email: str
    customer_id: str = Field(description="Shopify customer GID")
    first_name: str | None = None
    last_name: str | None = None
    exists: bool = Field(description="True when the customer already existed in Shopify")
    next_url: str | None = None


class ErrorResponse(BaseModel):
    """Error body returned for every failed exchange."""

    error: str
    details: dict | list | str | None = None
    retryable: bool | None = None
