"""Shopify Admin GraphQL client."""

import logging
from typing import Any

import httpx

from src.accounts.exceptions import UpstreamTimeout
from src.accounts.services.shopify.exceptions import DirectoryError

logger = logging.getLogger(__name__)


class ShopifyAdminClient:
    """Thin async wrapper over the Admin GraphQL endpoint of one shop."""

    def __init__(self, http_client: httpx.AsyncClient, graphql_url: str, access_token: str) -> None:
        self._http_client = http_client
        self.graphql_url = graphql_url
        self._access_token = access_token

    async def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Run a query or mutation and return its `data` object.

        Raises:
            DirectoryError: On non-2xx status or a top-level `errors` array,
                or when the connection fails
            UpstreamTimeout: If Shopify does not answer in time
        """
        try:
            response = await self._http_client.post(
                self.graphql_url,
                json={"query": query, "variables": variables or {}},
                headers={
                    "Content-Type": "application/json",
                    "X-Shopify-Access-Token": self._access_token,
                },
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Shopify GraphQL timed out: {e}", extra={"error_type": "shopify_timeout"})
            raise UpstreamTimeout() from e
        except httpx.HTTPError as e:
            logger.warning(f"Shopify GraphQL transport error: {e}", extra={"error_type": "shopify_transport"})
            raise DirectoryError(f"Shopify request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise DirectoryError(
                f"Shopify returned a non-JSON response (status {response.status_code})"
            ) from e

        if payload.get("errors"):
            logger.error(
                "Shopify GraphQL returned errors",
                extra={"error_type": "shopify_graphql_errors", "errors": payload["errors"]},
            )
            raise DirectoryError(_format_errors(payload["errors"]))

        if not response.is_success:
            raise DirectoryError(f"Shopify request failed with status {response.status_code}")

        return payload.get("data") or {}


def _format_errors(errors: Any) -> str:
    if isinstance(errors, list):
        messages = [str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors]
        return "; ".join(messages)
    return str(errors)
