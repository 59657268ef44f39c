"""Shared test fixtures."""

import os

# Settings() requires JWT_SECRET; set it before anything imports config.settings
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("LEDGER_TIMEZONE", "UTC")

from datetime import UTC, date, datetime  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.main import app  # noqa: E402
from src.re_property.domain.models import Property  # noqa: E402


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def prop() -> Property:
    """Property due 2025-01-10, rent 15000, deposit 50000."""
    return Property(
        id="prop-1",
        owner_id="owner-1",
        name="Lakeview 2B",
        address="12 Lake Rd",
        rent_amount=15000,
        security_deposit=50000,
        due_date=date(2025, 1, 10),
        owner_payout_id="owner@upi",
        property_code="AB12CD",
        created_at=datetime(2024, 12, 1, tzinfo=UTC),
    )
