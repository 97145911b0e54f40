"""Fixtures for exchange flow tests."""

from unittest.mock import AsyncMock, Mock

import pytest

from src.accounts.auth.models import IdentityClaims
from src.accounts.features.exchange.service import ExchangeService
from src.accounts.services.shopify.exceptions import DirectoryValidationError
from src.accounts.services.shopify.models import CustomerRecord


class InMemoryDirectory:
    """Customer directory that keeps state between calls and enforces unique emails."""

    def __init__(self) -> None:
        self.customers: dict[str, CustomerRecord] = {}
        self.metafields: dict[str, dict[str, str]] = {}
        self.find_calls = 0
        self.create_calls = 0

    async def find_by_email(self, email: str) -> CustomerRecord | None:
        self.find_calls += 1
        return self.customers.get(email)

    async def create(self, email: str, first_name: str = "", last_name: str = "") -> CustomerRecord:
        self.create_calls += 1
        if email in self.customers:
            raise DirectoryValidationError("Email has already been taken", field=["email"])
        record = CustomerRecord(id=f"gid://shopify/Customer/{len(self.customers) + 1}", email=email)
        self.customers[email] = record
        return record

    async def set_metafields(self, customer_id: str, values: dict[str, str], namespace: str = "profile") -> None:
        self.metafields.setdefault(customer_id, {}).update(
            {f"{namespace}.{key}": value for key, value in values.items() if value}
        )


@pytest.fixture
def claims() -> IdentityClaims:
    return IdentityClaims(
        email="jane@example.com",
        given_name="Jane",
        family_name="Doe",
        subject="110169484474386276334",
    )


@pytest.fixture
def identity(claims) -> Mock:
    """Provide a Google client that always resolves to `claims`."""
    identity = Mock()
    identity.identify = AsyncMock(return_value=claims)
    return identity


@pytest.fixture
def directory() -> InMemoryDirectory:
    return InMemoryDirectory()


@pytest.fixture
def analytics() -> Mock:
    return Mock()


@pytest.fixture
def service(identity, directory, analytics) -> ExchangeService:
    return ExchangeService(
        identity=identity,
        directory=directory,
        metafield_namespace="profile",
        signup_source="google",
        next_url="/account",
        analytics=analytics,
    )
