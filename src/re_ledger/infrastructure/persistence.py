"""LedgerRepository: concrete implementation of LedgerRepositoryProtocol.

Exclusive access per tenant is a row lock: lock_ledger issues
SELECT ... FOR UPDATE on tenant_ledgers under a bounded lock_timeout, and the
lock is held until the caller's transaction ends. record_payment additionally
compares the row version it read (compare-and-swap).

Money columns are NUMERIC: fines double daily without a ceiling and pass the
BIGINT range after about two months. Amounts are bound as Decimal and read
back as int.

Transaction ownership: The CALLER (application service) is responsible for
committing or rolling back.
"""

from collections import defaultdict
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.re_common.errors import ConcurrencyConflictError, InternalError
from src.re_ledger.domain.models import (
    FineRecord,
    PaymentPosting,
    PaymentTransaction,
    TenantLedger,
)

# ---------------------------------------------------------------------------
# SQL: tenant_ledgers
# ---------------------------------------------------------------------------

_LEDGER_COLUMNS = """
    tenant_id, property_id, initial_deposit, current_deposit,
    last_payment_date, move_in_date, version, created_at, updated_at
"""

_SET_LOCK_TIMEOUT_SQL = text("SELECT set_config('lock_timeout', :timeout, true)")

_GET_LEDGER_SQL = text(f"""
    SELECT {_LEDGER_COLUMNS}
    FROM tenant_ledgers
    WHERE tenant_id = :tenant_id
""")

_LOCK_LEDGER_SQL = text(f"""
    SELECT {_LEDGER_COLUMNS}
    FROM tenant_ledgers
    WHERE tenant_id = :tenant_id
    FOR UPDATE
""")

_INSERT_LEDGER_SQL = text(f"""
    INSERT INTO tenant_ledgers
        (tenant_id, property_id, initial_deposit, current_deposit,
         last_payment_date, move_in_date, version)
    VALUES
        (:tenant_id, :property_id, :initial_deposit, :current_deposit,
         :last_payment_date, :move_in_date, 0)
    ON CONFLICT (tenant_id) DO NOTHING
    RETURNING {_LEDGER_COLUMNS}
""")

_UPDATE_AFTER_PAYMENT_SQL = text("""
    UPDATE tenant_ledgers
    SET current_deposit = :current_deposit,
        last_payment_date = :last_payment_date,
        version = version + 1,
        updated_at = NOW()
    WHERE tenant_id = :tenant_id AND version = :expected_version
    RETURNING version
""")

_DELETE_LEDGER_SQL = text("""
    DELETE FROM tenant_ledgers
    WHERE tenant_id = :tenant_id
    RETURNING tenant_id
""")

_LIST_FOR_PROPERTY_SQL = text(f"""
    SELECT {_LEDGER_COLUMNS}
    FROM tenant_ledgers
    WHERE property_id = :property_id
    ORDER BY move_in_date ASC, tenant_id ASC
""")

# ---------------------------------------------------------------------------
# SQL: history tables (append-only)
# ---------------------------------------------------------------------------

_INSERT_FINE_SQL = text("""
    INSERT INTO fine_records (tenant_id, date, amount_deducted, days_late, rent_month)
    VALUES (:tenant_id, :date, :amount_deducted, :days_late, :rent_month)
    RETURNING id
""")

_INSERT_PAYMENT_SQL = text("""
    INSERT INTO payment_transactions
        (tenant_id, date, amount_paid, fine_deducted, rent_month, transaction_id)
    VALUES
        (:tenant_id, :date, :amount_paid, :fine_deducted, :rent_month, :transaction_id)
    RETURNING id
""")

_LIST_FINES_SQL = text("""
    SELECT id, tenant_id, date, amount_deducted, days_late, rent_month
    FROM fine_records
    WHERE tenant_id = ANY(:tenant_ids)
    ORDER BY id ASC
""")

_LIST_PAYMENTS_SQL = text("""
    SELECT id, tenant_id, date, amount_paid, fine_deducted, rent_month, transaction_id
    FROM payment_transactions
    WHERE tenant_id = ANY(:tenant_ids)
    ORDER BY id DESC
""")


def _row_to_ledger(row: object) -> TenantLedger:
    return TenantLedger(
        tenant_id=row.tenant_id,  # type: ignore[attr-defined]
        property_id=row.property_id,  # type: ignore[attr-defined]
        initial_deposit=int(row.initial_deposit),  # type: ignore[attr-defined]
        current_deposit=int(row.current_deposit),  # type: ignore[attr-defined]
        last_payment_date=row.last_payment_date,  # type: ignore[attr-defined]
        move_in_date=row.move_in_date,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_fine(row: object) -> FineRecord:
    return FineRecord(
        id=row.id,  # type: ignore[attr-defined]
        date=row.date,  # type: ignore[attr-defined]
        amount_deducted=int(row.amount_deducted),  # type: ignore[attr-defined]
        days_late=row.days_late,  # type: ignore[attr-defined]
        rent_month=row.rent_month,  # type: ignore[attr-defined]
    )


def _row_to_payment(row: object) -> PaymentTransaction:
    return PaymentTransaction(
        id=row.id,  # type: ignore[attr-defined]
        date=row.date,  # type: ignore[attr-defined]
        amount_paid=int(row.amount_paid),  # type: ignore[attr-defined]
        fine_deducted=int(row.fine_deducted),  # type: ignore[attr-defined]
        rent_month=row.rent_month,  # type: ignore[attr-defined]
        transaction_id=row.transaction_id,  # type: ignore[attr-defined]
    )


class LedgerRepository:
    """Concrete repository: raw SQL, caller-owned transactions."""

    async def get_ledger(
        self, db: AsyncSession, tenant_id: str
    ) -> TenantLedger | None:
        result = await db.execute(_GET_LEDGER_SQL, {"tenant_id": tenant_id})
        row = result.fetchone()
        if row is None:
            return None
        ledger = _row_to_ledger(row)
        await self._load_histories(db, [ledger])
        return ledger

    async def lock_ledger(
        self, db: AsyncSession, tenant_id: str
    ) -> TenantLedger | None:
        await db.execute(
            _SET_LOCK_TIMEOUT_SQL, {"timeout": f"{settings.DB_LOCK_TIMEOUT_MS}ms"}
        )
        result = await db.execute(_LOCK_LEDGER_SQL, {"tenant_id": tenant_id})
        row = result.fetchone()
        if row is None:
            return None
        ledger = _row_to_ledger(row)
        await self._load_histories(db, [ledger])
        return ledger

    async def insert_ledger(
        self, db: AsyncSession, ledger: TenantLedger
    ) -> TenantLedger | None:
        result = await db.execute(
            _INSERT_LEDGER_SQL,
            {
                "tenant_id": ledger.tenant_id,
                "property_id": ledger.property_id,
                "initial_deposit": Decimal(ledger.initial_deposit),
                "current_deposit": Decimal(ledger.current_deposit),
                "last_payment_date": ledger.last_payment_date,
                "move_in_date": ledger.move_in_date,
            },
        )
        row = result.fetchone()
        if row is None:
            # Another writer created this tenant's ledger after our lock_ledger saw none
            return None
        return _row_to_ledger(row)

    async def record_payment(
        self, db: AsyncSession, ledger: TenantLedger, posting: PaymentPosting
    ) -> None:
        result = await db.execute(
            _UPDATE_AFTER_PAYMENT_SQL,
            {
                "tenant_id": ledger.tenant_id,
                "current_deposit": Decimal(posting.new_deposit),
                "last_payment_date": posting.paid_at,
                "expected_version": ledger.version,
            },
        )
        if result.fetchone() is None:
            raise ConcurrencyConflictError(ledger.tenant_id)

        if posting.fine_record is not None:
            fine = posting.fine_record
            fine_result = await db.execute(
                _INSERT_FINE_SQL,
                {
                    "tenant_id": ledger.tenant_id,
                    "date": fine.date,
                    "amount_deducted": Decimal(fine.amount_deducted),
                    "days_late": fine.days_late,
                    "rent_month": fine.rent_month,
                },
            )
            fine_row = fine_result.fetchone()
            if fine_row is None:
                raise InternalError("Fine insert returned no rows, this should never happen")
            fine.id = fine_row.id

        tx = posting.transaction
        tx_result = await db.execute(
            _INSERT_PAYMENT_SQL,
            {
                "tenant_id": ledger.tenant_id,
                "date": tx.date,
                "amount_paid": Decimal(tx.amount_paid),
                "fine_deducted": Decimal(tx.fine_deducted),
                "rent_month": tx.rent_month,
                "transaction_id": tx.transaction_id,
            },
        )
        tx_row = tx_result.fetchone()
        if tx_row is None:
            raise InternalError("Payment insert returned no rows, this should never happen")
        tx.id = tx_row.id

    async def delete_ledger(self, db: AsyncSession, tenant_id: str) -> bool:
        # fine_records / payment_transactions cascade with the ledger row
        result = await db.execute(_DELETE_LEDGER_SQL, {"tenant_id": tenant_id})
        return result.fetchone() is not None

    async def list_ledgers_for_property(
        self, db: AsyncSession, property_id: str
    ) -> list[TenantLedger]:
        result = await db.execute(_LIST_FOR_PROPERTY_SQL, {"property_id": property_id})
        ledgers = [_row_to_ledger(row) for row in result.fetchall()]
        if ledgers:
            await self._load_histories(db, ledgers)
        return ledgers

    async def _load_histories(
        self, db: AsyncSession, ledgers: list[TenantLedger]
    ) -> None:
        tenant_ids = [ledger.tenant_id for ledger in ledgers]
        fines: dict[str, list[FineRecord]] = defaultdict(list)
        payments: dict[str, list[PaymentTransaction]] = defaultdict(list)

        fine_result = await db.execute(_LIST_FINES_SQL, {"tenant_ids": tenant_ids})
        for row in fine_result.fetchall():
            fines[row.tenant_id].append(_row_to_fine(row))

        payment_result = await db.execute(_LIST_PAYMENTS_SQL, {"tenant_ids": tenant_ids})
        for row in payment_result.fetchall():
            payments[row.tenant_id].append(_row_to_payment(row))

        for ledger in ledgers:
            ledger.fine_history = fines[ledger.tenant_id]
            ledger.payment_history = payments[ledger.tenant_id]
