"""Domain models for re_ledger: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class FineRecord:
    date: datetime
    amount_deducted: int     # always > 0; zero-fine payments leave no FineRecord
    days_late: int
    rent_month: str          # e.g. "November 2024"
    id: int | None = None    # BIGSERIAL, assigned on insert


@dataclass
class PaymentTransaction:
    date: datetime
    amount_paid: int         # rent charged, independent of any fine
    fine_deducted: int       # >= 0
    rent_month: str
    transaction_id: str      # display/reconciliation only
    id: int | None = None


@dataclass
class TenantLedger:
    tenant_id: str
    property_id: str
    initial_deposit: int
    current_deposit: int     # may go negative, no floor
    last_payment_date: datetime
    move_in_date: datetime
    fine_history: list[FineRecord] = field(default_factory=list)            # oldest first
    payment_history: list[PaymentTransaction] = field(default_factory=list)  # newest first
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def total_fines(self) -> int:
        return sum(f.amount_deducted for f in self.fine_history)


@dataclass(frozen=True)
class PaymentPosting:
    """Everything one processed payment writes, computed before any write happens."""

    paid_at: datetime
    fine: int
    days_late: int
    new_deposit: int
    fine_record: FineRecord | None
    transaction: PaymentTransaction


@dataclass(frozen=True)
class PaymentResult:
    fine_charged: int
    current_deposit: int
    transaction_id: str
