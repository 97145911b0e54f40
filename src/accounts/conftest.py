"""Pytest configuration and shared fixtures."""

import pytest
from fastapi.testclient import TestClient

from src.accounts.main import app
from src.accounts.services.rate_limiter import limiter


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Every test starts with empty rate limit buckets."""
    limiter.reset()
    yield


@pytest.fixture
def client() -> TestClient:
    """
    Provide FastAPI test client for API testing.

    The lifespan is not entered, so no outbound clients are built; tests
    install an ExchangeService through `set_exchange_service` or
    `app.dependency_overrides` instead.

    Example:
        >>> def test_health(client):
        >>>     response = client.get("/health")
        >>>     assert response.status_code == 200
    """
    return TestClient(app)
