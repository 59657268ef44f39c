"""Route-level tests: auth, envelope and error mapping, with the service mocked."""

from collections.abc import AsyncIterator, Iterator
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from src.main import app
from src.re_common.database import get_db_session
from src.re_common.errors import (
    ConcurrencyConflictError,
    InvalidCodeError,
    NotLinkedError,
    NotPropertyOwnerError,
)
from src.re_fine.calculator import FineEstimate
from src.re_gateway.auth.jwt_handler import ROLE_OWNER, ROLE_PAYER, create_access_token
from src.re_ledger.api.deps import get_ledger_service
from src.re_ledger.application.schemas import (
    FineEstimateResponse,
    PropertyTenantsResponse,
    TenantSummaryItem,
    UnlinkResponse,
)
from src.re_ledger.domain.ledger import open_ledger
from src.re_ledger.domain.models import PaymentResult
from src.re_property.domain.models import Property

LINKED_AT = datetime(2025, 1, 10, 9, 0, tzinfo=UTC)


def _auth(user_id: str, role: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}


PAYER = _auth("tenant-1", ROLE_PAYER)
OWNER = _auth("owner-1", ROLE_OWNER)


@pytest.fixture
def service() -> Iterator[AsyncMock]:
    mock_service = AsyncMock()
    db = AsyncMock()

    async def _db() -> AsyncIterator[AsyncMock]:
        yield db

    app.dependency_overrides[get_ledger_service] = lambda: mock_service
    app.dependency_overrides[get_db_session] = _db
    yield mock_service
    app.dependency_overrides.clear()


class TestAuth:
    async def test_missing_token_is_401(self, client: AsyncClient, service: AsyncMock) -> None:
        resp = await client.get("/api/v1/tenant/ledger")
        assert resp.status_code == 401
        service.get_ledger_view.assert_not_awaited()

    async def test_owner_cannot_pay(self, client: AsyncClient, service: AsyncMock) -> None:
        resp = await client.post("/api/v1/tenant/payments", headers=OWNER)
        assert resp.status_code == 403
        assert resp.json()["code"] == 1002
        service.process_payment.assert_not_awaited()

    async def test_payer_cannot_list_tenants(self, client: AsyncClient, service: AsyncMock) -> None:
        resp = await client.get("/api/v1/owner/properties/prop-1/tenants", headers=PAYER)
        assert resp.status_code == 403


class TestTenantRoutes:
    async def test_link(self, client: AsyncClient, service: AsyncMock, prop: Property) -> None:
        service.link.return_value = open_ledger("tenant-1", prop, LINKED_AT)

        resp = await client.post(
            "/api/v1/tenant/link", json={"property_code": "ab12cd"}, headers=PAYER
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["current_deposit"] == 50000
        assert body["data"]["fine_history"] == []
        assert body["request_id"] == resp.headers["X-Request-ID"]
        service.link.assert_awaited_once()
        assert service.link.await_args.args[1:] == ("tenant-1", "ab12cd")

    async def test_link_invalid_code(self, client: AsyncClient, service: AsyncMock) -> None:
        service.link.side_effect = InvalidCodeError("NOPE")

        resp = await client.post(
            "/api/v1/tenant/link", json={"property_code": "nope"}, headers=PAYER
        )

        assert resp.status_code == 404
        assert resp.json()["code"] == 3001
        assert resp.json()["message"] == "Invalid Property Code: NOPE"
        assert resp.json()["data"] is None

    async def test_link_requires_code(self, client: AsyncClient, service: AsyncMock) -> None:
        resp = await client.post("/api/v1/tenant/link", json={"property_code": ""}, headers=PAYER)
        assert resp.status_code == 422

    async def test_fine_estimate(self, client: AsyncClient, service: AsyncMock) -> None:
        service.get_fine_view.return_value = FineEstimateResponse.from_estimate(
            FineEstimate(fine=400, days_late=3, cycle_day=4), 50000
        )

        resp = await client.get("/api/v1/tenant/fine-estimate", headers=PAYER)

        data = resp.json()["data"]
        assert data == {
            "fine": 400,
            "days_late": 3,
            "cycle_day": 4,
            "next_fine": 800,
            "current_deposit": 50000,
            "projected_deposit": 49600,
        }

    async def test_not_linked(self, client: AsyncClient, service: AsyncMock) -> None:
        service.get_ledger_view.side_effect = NotLinkedError("tenant-1")
        resp = await client.get("/api/v1/tenant/ledger", headers=PAYER)
        assert resp.status_code == 404
        assert resp.json()["code"] == 2001

    async def test_payment(self, client: AsyncClient, service: AsyncMock) -> None:
        service.process_payment.return_value = PaymentResult(
            fine_charged=400, current_deposit=49600, transaction_id="UPI42"
        )

        resp = await client.post("/api/v1/tenant/payments", headers=PAYER)

        assert resp.status_code == 200
        assert resp.json()["data"] == {
            "fine_charged": 400,
            "current_deposit": 49600,
            "transaction_id": "UPI42",
        }

    async def test_payment_conflict(self, client: AsyncClient, service: AsyncMock) -> None:
        service.process_payment.side_effect = ConcurrencyConflictError("tenant-1")
        resp = await client.post("/api/v1/tenant/payments", headers=PAYER)
        assert resp.status_code == 409
        assert resp.json()["code"] == 9003


class TestOwnerRoutes:
    async def test_list_tenants(self, client: AsyncClient, service: AsyncMock) -> None:
        service.list_property_tenants.return_value = PropertyTenantsResponse(
            property_id="prop-1",
            items=[
                TenantSummaryItem(
                    tenant_id="tenant-1",
                    current_deposit=50000,
                    last_payment_date=LINKED_AT,
                    move_in_date=LINKED_AT,
                    days_late=3,
                    pending_fine=400,
                    fines_collected=0,
                )
            ],
            total_fines_collected=0,
            total_pending_fines=400,
        )

        resp = await client.get("/api/v1/owner/properties/prop-1/tenants", headers=OWNER)

        data = resp.json()["data"]
        assert data["total_pending_fines"] == 400
        assert data["items"][0]["pending_fine"] == 400
        assert service.list_property_tenants.await_args.args[1:] == ("owner-1", "prop-1")

    async def test_not_owner(self, client: AsyncClient, service: AsyncMock) -> None:
        service.list_property_tenants.side_effect = NotPropertyOwnerError("prop-1")
        resp = await client.get("/api/v1/owner/properties/prop-1/tenants", headers=OWNER)
        assert resp.status_code == 403
        assert resp.json()["code"] == 3003

    async def test_remove_tenant(self, client: AsyncClient, service: AsyncMock) -> None:
        service.remove_tenant.return_value = UnlinkResponse(tenant_id="tenant-1", removed=True)
        resp = await client.delete("/api/v1/owner/tenants/tenant-1", headers=OWNER)
        assert resp.json()["data"] == {"tenant_id": "tenant-1", "removed": True}


class TestPublicRoutes:
    async def test_schedule(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/fines/schedule", params={"days": 3})
        assert resp.status_code == 200
        assert resp.json()["data"]["rows"] == [
            {"cycle_day": 1, "days_late": 0, "fine": 0},
            {"cycle_day": 2, "days_late": 1, "fine": 100},
            {"cycle_day": 3, "days_late": 2, "fine": 200},
        ]

    async def test_schedule_bounds(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/fines/schedule", params={"days": 0})
        assert resp.status_code == 422

    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.json()["status"] == "ok"
