"""PostHog analytics service for sign-in event tracking."""

import posthog

from src.accounts.config import settings


class PostHogService:
    """Service for tracking analytics events via PostHog."""

    def __init__(self) -> None:
        """Initialize PostHog service."""
        if settings.posthog_api_key:
            posthog.api_key = settings.posthog_api_key
            posthog.host = settings.posthog_host

    def capture(self, distinct_id: str, event: str, properties: dict | None = None) -> None:
        """
        Track an event.

        Args:
            distinct_id: Customer GID, or "anonymous" before identity is known
            event: Event name (e.g., "customer_created", "google_exchange_failed")
            properties: Optional event properties

        Example:
            >>> service = PostHogService()
            >>> service.capture("gid://shopify/Customer/1", "customer_signed_in", {"exists": True})
        """
        if not settings.posthog_api_key:
            return

        posthog.capture(distinct_id=distinct_id, event=event, properties=properties or {})
