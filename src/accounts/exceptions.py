"""Base exceptions shared across the exchange flow."""

from typing import Any


class ExchangeError(Exception):
    """
    Base exception for errors surfaced to the caller of /exchange.

    Attributes:
        status_code: HTTP status returned to the caller
        error: Public error message placed in the response body
        details: Optional upstream payload placed in the response body
    """

    status_code: int = 500
    error: str = "Server error"

    def __init__(self, error: str | None = None, details: Any = None) -> None:
        self.error = error or self.error
        self.details = details
        super().__init__(self.error)

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class MissingInput(ExchangeError):
    """Raised when the request lacks a required field."""

    status_code = 400
    error = "Missing code"


class UpstreamTimeout(ExchangeError):
    """Raised when Google or Shopify does not answer in time. Safe to retry."""

    status_code = 504
    error = "Upstream timeout"

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        body["retryable"] = True
        return body
