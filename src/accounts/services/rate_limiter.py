"""Rate limiting service for API endpoints."""

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address

from src.accounts.config import settings

logger = logging.getLogger(__name__)


# Callers are anonymous until the code is exchanged, so limits are per IP
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],
    storage_uri="memory://",  # In-memory storage for single-instance deployment
    enabled=settings.rate_limit_enabled,
)


class RateLimitTiers:
    """Rate limit tiers for different endpoint categories."""

    # Code exchange: each call hits Google and Shopify
    EXCHANGE = ["20 per minute", "200 per hour"]


exchange_rate_limit = limiter.limit(";".join(RateLimitTiers.EXCHANGE))
