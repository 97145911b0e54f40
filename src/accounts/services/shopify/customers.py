"""Shopify customer lookup, creation and metafield updates."""

import logging
from typing import Any

from src.accounts.services.shopify.client import ShopifyAdminClient
from src.accounts.services.shopify.exceptions import DirectoryValidationError
from src.accounts.services.shopify.models import CustomerRecord, MetafieldEntry

logger = logging.getLogger(__name__)

FIND_CUSTOMER_QUERY = """
query findCustomer($query: String!) {
    customers(first: 10, query: $query) {
        edges {
            node {
                id
                email
            }
        }
    }
}
"""

CREATE_CUSTOMER_MUTATION = """
mutation customerCreate($input: CustomerInput!) {
    customerCreate(input: $input) {
        customer {
            id
            email
        }
        userErrors {
            field
            message
        }
    }
}
"""

SET_METAFIELDS_MUTATION = """
mutation metafieldsSet($metafields: [MetafieldsSetInput!]!) {
    metafieldsSet(metafields: $metafields) {
        metafields {
            key
            namespace
        }
        userErrors {
            field
            message
        }
    }
}
"""


class CustomerDirectory:
    """
    Customer operations against the Shopify Admin API.

    Each method is a single GraphQL call; there is no local state and no
    retry. Uniqueness of email is enforced by Shopify, not here.
    """

    def __init__(self, client: ShopifyAdminClient) -> None:
        self._client = client

    async def find_by_email(self, email: str) -> CustomerRecord | None:
        """
        Return the customer whose email equals `email`, or None.

        Shopify search is fuzzy, so hits are compared case-insensitively and
        anything else counts as "not found", as do zero results.
        """
        data = await self._client.graphql(FIND_CUSTOMER_QUERY, {"query": f"email:{_quote(email)}"})
        edges = (data.get("customers") or {}).get("edges") or []
        wanted = email.strip().lower()
        for edge in edges:
            node = edge.get("node") or {}
            if (node.get("email") or "").strip().lower() == wanted:
                return CustomerRecord(id=node["id"], email=node["email"])
        return None

    async def create(self, email: str, first_name: str = "", last_name: str = "") -> CustomerRecord:
        """
        Create a customer with a verified email.

        Raises:
            DirectoryValidationError: With the first userError Shopify reports
        """
        data = await self._client.graphql(
            CREATE_CUSTOMER_MUTATION,
            {
                "input": {
                    "email": email,
                    "firstName": first_name,
                    "lastName": last_name,
                    "verifiedEmail": True,
                }
            },
        )
        result = data.get("customerCreate") or {}
        _raise_first_user_error(result)

        customer = result.get("customer")
        if not customer or not customer.get("id"):
            raise DirectoryValidationError("customerCreate returned no customer")

        logger.info("Created Shopify customer", extra={"customer_id": customer["id"]})
        return CustomerRecord(id=customer["id"], email=customer.get("email") or email)

    async def set_metafields(
        self, customer_id: str, values: dict[str, str], namespace: str = "profile"
    ) -> None:
        """
        Upsert text metafields on an existing customer.

        Blank values are skipped since Shopify rejects empty metafield values.

        Args:
            customer_id: Customer GID
            values: key -> value
            namespace: Metafield namespace

        Raises:
            DirectoryValidationError: With the first userError Shopify reports
        """
        entries = [
            MetafieldEntry(owner_id=customer_id, namespace=namespace, key=key, value=str(value))
            for key, value in values.items()
            if value is not None and str(value).strip()
        ]
        if not entries:
            return

        data = await self._client.graphql(
            SET_METAFIELDS_MUTATION, {"metafields": [entry.to_input() for entry in entries]}
        )
        _raise_first_user_error(data.get("metafieldsSet") or {})


def _raise_first_user_error(result: dict[str, Any]) -> None:
    user_errors = result.get("userErrors") or []
    if user_errors:
        first = user_errors[0]
        raise DirectoryValidationError(str(first.get("message")), field=first.get("field"))


def _quote(value: str) -> str:
    # Shopify search syntax treats spaces and colons as separators
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
