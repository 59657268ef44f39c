"""Repository Protocol: dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.

Mutating calls run inside the caller's transaction; lock_ledger must hold an
exclusive per-tenant lock until that transaction ends.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.re_ledger.domain.models import PaymentPosting, TenantLedger


class LedgerRepositoryProtocol(Protocol):
    async def get_ledger(
        self, db: AsyncSession, tenant_id: str
    ) -> TenantLedger | None: ...

    async def lock_ledger(
        self, db: AsyncSession, tenant_id: str
    ) -> TenantLedger | None: ...

    async def insert_ledger(
        self, db: AsyncSession, ledger: TenantLedger
    ) -> TenantLedger | None:
        """Returns None when a ledger for the tenant already exists."""
        ...

    async def record_payment(
        self, db: AsyncSession, ledger: TenantLedger, posting: PaymentPosting
    ) -> None: ...

    async def delete_ledger(
        self, db: AsyncSession, tenant_id: str
    ) -> bool: ...

    async def list_ledgers_for_property(
        self, db: AsyncSession, property_id: str
    ) -> list[TenantLedger]: ...
