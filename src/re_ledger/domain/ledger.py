"""Ledger state transitions: pure functions over TenantLedger.

The service layer runs these inside the per-tenant exclusive scope; nothing
here touches storage or the clock.
"""

from datetime import datetime, timedelta, tzinfo

from src.re_common.datetime_utils import rent_month_label
from src.re_fine.calculator import estimate
from src.re_ledger.domain.models import (
    FineRecord,
    PaymentPosting,
    PaymentTransaction,
    TenantLedger,
)
from src.re_property.domain.models import Property

# A fresh link is backdated so an unpaid first cycle is immediately delinquent.
LINK_BACKDATE = timedelta(days=30)


def open_ledger(tenant_id: str, prop: Property, now: datetime) -> TenantLedger:
    return TenantLedger(
        tenant_id=tenant_id,
        property_id=prop.id,
        initial_deposit=prop.security_deposit,
        current_deposit=prop.security_deposit,
        last_payment_date=now - LINK_BACKDATE,
        move_in_date=now,
    )


def post_payment(
    ledger: TenantLedger,
    prop: Property,
    now: datetime,
    transaction_id: str,
    tz: tzinfo | None = None,
) -> PaymentPosting:
    """Compute the writes for paying rent at ``now``.

    ``now`` and the rent-month label are fixed once here, so the fine record
    and the payment transaction always agree.
    """
    result = estimate(prop.due_date, ledger.last_payment_date, now, tz)
    label = rent_month_label(now, tz)

    fine_record = None
    if result.fine > 0:
        fine_record = FineRecord(
            date=now,
            amount_deducted=result.fine,
            days_late=result.days_late,
            rent_month=label,
        )

    transaction = PaymentTransaction(
        date=now,
        amount_paid=prop.rent_amount,
        fine_deducted=result.fine,
        rent_month=label,
        transaction_id=transaction_id,
    )
    return PaymentPosting(
        paid_at=now,
        fine=result.fine,
        days_late=result.days_late,
        new_deposit=ledger.current_deposit - result.fine,
        fine_record=fine_record,
        transaction=transaction,
    )


def apply_posting(ledger: TenantLedger, posting: PaymentPosting) -> None:
    """Mirror a persisted posting onto the in-memory ledger."""
    ledger.current_deposit = posting.new_deposit
    if posting.fine_record is not None:
        ledger.fine_history.append(posting.fine_record)
    ledger.payment_history.insert(0, posting.transaction)
    ledger.last_payment_date = posting.paid_at
    ledger.version += 1
