"""Pydantic schemas for re_ledger API.

Money is int (whole currency units), timestamps ISO8601.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.re_fine.calculator import FineEstimate, next_fine
from src.re_ledger.domain.models import (
    FineRecord,
    PaymentResult,
    PaymentTransaction,
    TenantLedger,
)

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class LinkRequest(BaseModel):
    property_code: str = Field(..., min_length=1, max_length=16, description="Shareable property code")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class FineRecordItem(BaseModel):
    date: datetime
    amount_deducted: int
    days_late: int
    rent_month: str

    @classmethod
    def from_domain(cls, record: FineRecord) -> "FineRecordItem":
        return cls(
            date=record.date,
            amount_deducted=record.amount_deducted,
            days_late=record.days_late,
            rent_month=record.rent_month,
        )


class PaymentTransactionItem(BaseModel):
    date: datetime
    amount_paid: int
    fine_deducted: int
    rent_month: str
    transaction_id: str

    @classmethod
    def from_domain(cls, tx: PaymentTransaction) -> "PaymentTransactionItem":
        return cls(
            date=tx.date,
            amount_paid=tx.amount_paid,
            fine_deducted=tx.fine_deducted,
            rent_month=tx.rent_month,
            transaction_id=tx.transaction_id,
        )


class LedgerResponse(BaseModel):
    tenant_id: str
    property_id: str
    initial_deposit: int
    current_deposit: int
    total_fines: int
    last_payment_date: datetime
    move_in_date: datetime
    fine_history: list[FineRecordItem]
    payment_history: list[PaymentTransactionItem]

    @classmethod
    def from_domain(cls, ledger: TenantLedger) -> "LedgerResponse":
        return cls(
            tenant_id=ledger.tenant_id,
            property_id=ledger.property_id,
            initial_deposit=ledger.initial_deposit,
            current_deposit=ledger.current_deposit,
            total_fines=ledger.total_fines,
            last_payment_date=ledger.last_payment_date,
            move_in_date=ledger.move_in_date,
            fine_history=[FineRecordItem.from_domain(f) for f in ledger.fine_history],
            payment_history=[PaymentTransactionItem.from_domain(t) for t in ledger.payment_history],
        )


class FineEstimateResponse(BaseModel):
    fine: int
    days_late: int
    cycle_day: int
    next_fine: int
    current_deposit: int
    projected_deposit: int  # deposit left if the pending fine were deducted now

    @classmethod
    def from_estimate(cls, estimate: FineEstimate, current_deposit: int) -> "FineEstimateResponse":
        return cls(
            fine=estimate.fine,
            days_late=estimate.days_late,
            cycle_day=estimate.cycle_day,
            next_fine=next_fine(estimate),
            current_deposit=current_deposit,
            projected_deposit=current_deposit - estimate.fine,
        )


class PaymentResponse(BaseModel):
    fine_charged: int
    current_deposit: int
    transaction_id: str

    @classmethod
    def from_result(cls, result: PaymentResult) -> "PaymentResponse":
        return cls(
            fine_charged=result.fine_charged,
            current_deposit=result.current_deposit,
            transaction_id=result.transaction_id,
        )


class UnlinkResponse(BaseModel):
    tenant_id: str
    removed: bool


class TenantSummaryItem(BaseModel):
    tenant_id: str
    current_deposit: int
    last_payment_date: datetime
    move_in_date: datetime
    days_late: int
    pending_fine: int
    fines_collected: int


class PropertyTenantsResponse(BaseModel):
    property_id: str
    items: list[TenantSummaryItem]
    total_fines_collected: int
    total_pending_fines: int
