"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the entire test session.
"""

import uuid
from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.re_common.database import async_session_factory
from src.re_property.infrastructure.db_models import PropertyORM


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncIterator[AsyncClient]:  # type: ignore[override]
    """Session-scoped async HTTP client: keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session")
async def property_row() -> dict[str, object]:
    """A freshly registered property that fell due three days ago."""
    suffix = uuid.uuid4().hex[:6].upper()
    row: dict[str, object] = {
        "id": f"prop-{suffix}",
        "owner_id": f"owner-{suffix}",
        "name": "Integration Flat",
        "address": "1 Test St",
        "rent_amount": 15000,
        "security_deposit": 50000,
        "due_date": datetime.now(UTC).date() - timedelta(days=3),
        "owner_payout_id": "owner@upi",
        "property_code": suffix,
    }
    async with async_session_factory() as session:
        session.add(PropertyORM(**row))
        await session.commit()
    return row
