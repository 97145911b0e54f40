"""Shared services module for external integrations."""

from src.accounts.services.analytics.posthog import PostHogService

__all__ = [
    "PostHogService",
]
