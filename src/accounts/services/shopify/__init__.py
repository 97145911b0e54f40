"""Shopify Admin API customer directory."""

from src.accounts.services.shopify.client import ShopifyAdminClient
from src.accounts.services.shopify.customers import CustomerDirectory
from src.accounts.services.shopify.exceptions import DirectoryError, DirectoryValidationError
from src.accounts.services.shopify.models import CustomerRecord, MetafieldEntry

__all__ = [
    "ShopifyAdminClient",
    "CustomerDirectory",
    "CustomerRecord",
    "MetafieldEntry",
    "DirectoryError",
    "DirectoryValidationError",
]
