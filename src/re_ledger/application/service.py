"""LedgerApplicationService: the deposit ledger's operations.

Read path (estimate_fine, ledger views) runs without locking and never writes.
Mutating path (process_payment, link, unlink) runs under two per-tenant
exclusions: an in-process asyncio.Lock (bounded wait) and the row lock taken
by repo.lock_ledger (cross-process). Either the whole unit commits or the
transaction is rolled back; a ConcurrencyConflictError therefore means
nothing was written and the call may be retried.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import datetime, tzinfo
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.re_common.datetime_utils import ledger_zone, utc_now
from src.re_common.db_errors import translate_db_error
from src.re_common.errors import (
    AlreadyLinkedError,
    ConcurrencyConflictError,
    InvalidCodeError,
    NotLinkedError,
    NotPropertyOwnerError,
    PropertyNotFoundError,
)
from src.re_common.id_generator import generate_transaction_ref
from src.re_fine.calculator import FineEstimate, estimate
from src.re_ledger.application.schemas import (
    FineEstimateResponse,
    LedgerResponse,
    PropertyTenantsResponse,
    TenantSummaryItem,
    UnlinkResponse,
)
from src.re_ledger.domain.invariants import verify_ledger_invariants
from src.re_ledger.domain.ledger import apply_posting, open_ledger, post_payment
from src.re_ledger.domain.models import PaymentResult, TenantLedger
from src.re_ledger.domain.repository import LedgerRepositoryProtocol
from src.re_ledger.infrastructure.persistence import LedgerRepository
from src.re_property.domain.models import Property
from src.re_property.domain.repository import (
    PropertyDirectoryProtocol,
    normalize_property_code,
)
from src.re_property.infrastructure.persistence import PropertyDirectory

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LedgerApplicationService:
    def __init__(
        self,
        repo: LedgerRepositoryProtocol | None = None,
        properties: PropertyDirectoryProtocol | None = None,
        clock: Callable[[], datetime] | None = None,
        tz: tzinfo | None = None,
        lock_timeout: float | None = None,
    ) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()
        self._properties: PropertyDirectoryProtocol = properties or PropertyDirectory()
        self._clock = clock or utc_now
        self._tz = tz or ledger_zone()
        self._lock_timeout = (
            settings.TENANT_LOCK_TIMEOUT_SECONDS if lock_timeout is None else lock_timeout
        )
        self._tenant_locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Exclusive scope
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _exclusive(self, tenant_id: str) -> AsyncIterator[None]:
        # Entries live only while some caller holds or waits on the lock
        lock = self._tenant_locks.get(tenant_id)
        if lock is None:
            lock = self._tenant_locks[tenant_id] = asyncio.Lock()
        self._lock_users[tenant_id] = self._lock_users.get(tenant_id, 0) + 1
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self._lock_timeout)
            except asyncio.TimeoutError:
                logger.warning("Tenant lock wait timed out: tenant=%s", tenant_id)
                raise ConcurrencyConflictError(tenant_id) from None
            try:
                yield
            finally:
                lock.release()
        finally:
            self._lock_users[tenant_id] -= 1
            if self._lock_users[tenant_id] == 0:
                del self._lock_users[tenant_id]
                del self._tenant_locks[tenant_id]

    async def _run_exclusive(
        self,
        db: AsyncSession,
        tenant_id: str,
        work: Callable[[], Awaitable[T]],
    ) -> T:
        async with self._exclusive(tenant_id):
            try:
                result = await work()
                await db.commit()
            except ConcurrencyConflictError:
                await db.rollback()
                logger.warning("Ledger write conflict, rolled back: tenant=%s", tenant_id)
                raise
            except SQLAlchemyError as exc:
                await db.rollback()
                err = translate_db_error(exc, tenant_id)
                if isinstance(err, ConcurrencyConflictError):
                    logger.warning("Ledger row lock unavailable: tenant=%s", tenant_id)
                else:
                    logger.error("Ledger storage failure: tenant=%s error=%r", tenant_id, exc)
                raise err from exc
            except Exception:
                await db.rollback()
                raise
            return result

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def _require_property(self, db: AsyncSession, property_id: str) -> Property:
        prop = await self._properties.get_by_id(db, property_id)
        if prop is None:
            raise PropertyNotFoundError(property_id)
        return prop

    async def _load(self, db: AsyncSession, tenant_id: str) -> tuple[TenantLedger, Property]:
        try:
            ledger = await self._repo.get_ledger(db, tenant_id)
            if ledger is None:
                raise NotLinkedError(tenant_id)
            prop = await self._require_property(db, ledger.property_id)
        except SQLAlchemyError as exc:
            raise translate_db_error(exc, tenant_id) from exc
        return ledger, prop

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    async def estimate_fine(self, db: AsyncSession, tenant_id: str) -> FineEstimate:
        """Fine the tenant would be charged if they paid right now. Never writes."""
        ledger, prop = await self._load(db, tenant_id)
        return estimate(prop.due_date, ledger.last_payment_date, self._clock(), self._tz)

    async def get_fine_view(self, db: AsyncSession, tenant_id: str) -> FineEstimateResponse:
        ledger, prop = await self._load(db, tenant_id)
        result = estimate(prop.due_date, ledger.last_payment_date, self._clock(), self._tz)
        return FineEstimateResponse.from_estimate(result, ledger.current_deposit)

    async def get_ledger_view(self, db: AsyncSession, tenant_id: str) -> LedgerResponse:
        ledger, _ = await self._load(db, tenant_id)
        return LedgerResponse.from_domain(ledger)

    # ------------------------------------------------------------------
    # Mutating path
    # ------------------------------------------------------------------

    async def process_payment(self, db: AsyncSession, tenant_id: str) -> PaymentResult:
        async def work() -> PaymentResult:
            ledger = await self._repo.lock_ledger(db, tenant_id)
            if ledger is None:
                raise NotLinkedError(tenant_id)
            prop = await self._require_property(db, ledger.property_id)

            posting = post_payment(
                ledger, prop, self._clock(), generate_transaction_ref(), self._tz
            )
            await self._repo.record_payment(db, ledger, posting)
            apply_posting(ledger, posting)
            verify_ledger_invariants(ledger)
            return PaymentResult(
                fine_charged=posting.fine,
                current_deposit=ledger.current_deposit,
                transaction_id=posting.transaction.transaction_id,
            )

        result = await self._run_exclusive(db, tenant_id, work)
        logger.info(
            "Payment processed: tenant=%s fine=%d deposit=%d tx=%s",
            tenant_id, result.fine_charged, result.current_deposit, result.transaction_id,
        )
        return result

    async def link(self, db: AsyncSession, tenant_id: str, property_code: str) -> TenantLedger:
        """Create the tenant's ledger for the property behind ``property_code``.

        Linking again to the same property returns the existing ledger untouched.
        """
        code = normalize_property_code(property_code)
        try:
            prop = await self._properties.get_by_code(db, code)
        except SQLAlchemyError as exc:
            raise translate_db_error(exc, tenant_id) from exc
        if prop is None:
            raise InvalidCodeError(code)

        def existing_link(existing: TenantLedger) -> tuple[TenantLedger, bool]:
            if existing.property_id != prop.id:
                raise AlreadyLinkedError(tenant_id, existing.property_id)
            return existing, False

        async def work() -> tuple[TenantLedger, bool]:
            existing = await self._repo.lock_ledger(db, tenant_id)
            if existing is not None:
                return existing_link(existing)
            ledger = await self._repo.insert_ledger(
                db, open_ledger(tenant_id, prop, self._clock())
            )
            if ledger is not None:
                return ledger, True
            # Another process inserted first; its row is committed once the insert returns
            existing = await self._repo.lock_ledger(db, tenant_id)
            if existing is None:
                raise ConcurrencyConflictError(tenant_id)
            return existing_link(existing)

        ledger, created = await self._run_exclusive(db, tenant_id, work)
        if created:
            logger.info(
                "Tenant linked: tenant=%s property=%s deposit=%d",
                tenant_id, prop.id, ledger.current_deposit,
            )
        return ledger

    async def unlink(self, db: AsyncSession, tenant_id: str) -> bool:
        """Delete the ledger and its history. No balance reconciliation.

        Returns False (not an error) when the tenant had no ledger.
        """
        return await self._remove(db, tenant_id, owner_id=None)

    async def _remove(
        self, db: AsyncSession, tenant_id: str, owner_id: str | None
    ) -> bool:
        async def work() -> bool:
            ledger = await self._repo.lock_ledger(db, tenant_id)
            if ledger is None:
                return False
            if owner_id is not None:
                prop = await self._properties.get_by_id(db, ledger.property_id)
                if prop is None or prop.owner_id != owner_id:
                    raise NotPropertyOwnerError(ledger.property_id)
            return await self._repo.delete_ledger(db, tenant_id)

        removed = await self._run_exclusive(db, tenant_id, work)
        if removed:
            logger.info("Tenant unlinked: tenant=%s by_owner=%s", tenant_id, owner_id)
        return removed

    # ------------------------------------------------------------------
    # Owner views
    # ------------------------------------------------------------------

    async def list_property_tenants(
        self, db: AsyncSession, owner_id: str, property_id: str
    ) -> PropertyTenantsResponse:
        try:
            prop = await self._require_property(db, property_id)
            if prop.owner_id != owner_id:
                raise NotPropertyOwnerError(property_id)
            ledgers = await self._repo.list_ledgers_for_property(db, property_id)
        except SQLAlchemyError as exc:
            raise translate_db_error(exc, owner_id) from exc

        today = self._clock()
        items: list[TenantSummaryItem] = []
        for ledger in ledgers:
            pending = estimate(prop.due_date, ledger.last_payment_date, today, self._tz)
            items.append(
                TenantSummaryItem(
                    tenant_id=ledger.tenant_id,
                    current_deposit=ledger.current_deposit,
                    last_payment_date=ledger.last_payment_date,
                    move_in_date=ledger.move_in_date,
                    days_late=pending.days_late,
                    pending_fine=pending.fine,
                    fines_collected=ledger.total_fines,
                )
            )
        return PropertyTenantsResponse(
            property_id=property_id,
            items=items,
            total_fines_collected=sum(i.fines_collected for i in items),
            total_pending_fines=sum(i.pending_fine for i in items),
        )

    async def remove_tenant(
        self, db: AsyncSession, owner_id: str, tenant_id: str
    ) -> UnlinkResponse:
        """Owner-initiated unlink; only the owner of the tenant's property may do it.

        Ownership is checked on the locked ledger row, inside the same exclusive
        scope as the delete.
        """
        removed = await self._remove(db, tenant_id, owner_id=owner_id)
        return UnlinkResponse(tenant_id=tenant_id, removed=removed)
