"""Exceptions for the Shopify customer directory."""

from src.accounts.exceptions import ExchangeError


class DirectoryError(ExchangeError):
    """Raised when the Shopify Admin API call fails or returns top-level errors."""

    status_code = 500
    error = "Shopify request failed"


class DirectoryValidationError(DirectoryError):
    """
    Raised when a mutation reports userErrors.

    The message is the first reported user error, e.g. "Email has already been taken".
    """

    def __init__(self, error: str, field: list[str] | None = None) -> None:
        super().__init__(error)
        self.field = field or []
