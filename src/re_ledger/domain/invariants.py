"""Ledger invariant verification after each mutation."""

import logging

from src.re_ledger.domain.models import TenantLedger

logger = logging.getLogger(__name__)


def verify_ledger_invariants(ledger: TenantLedger) -> None:
    """Raise AssertionError if the ledger is inconsistent.

    INV-1: current_deposit == initial_deposit - sum(fine_history.amount_deducted)
    INV-2: every fine record deducts a positive amount
    INV-3: no payment records a negative fine
    INV-4: payment_history is newest first by insertion (row id), not by timestamp
    """
    fines = ledger.total_fines
    assert ledger.current_deposit == ledger.initial_deposit - fines, (
        f"INV-1 violated: deposit={ledger.current_deposit} != "
        f"initial({ledger.initial_deposit}) - fines({fines})"
    )
    for record in ledger.fine_history:
        assert record.amount_deducted > 0, (
            f"INV-2 violated: fine record deducts {record.amount_deducted}"
        )
    for tx in ledger.payment_history:
        assert tx.fine_deducted >= 0, (
            f"INV-3 violated: transaction {tx.transaction_id} fine={tx.fine_deducted}"
        )
    # Timestamps come from host clocks and may step backwards between writers
    ids = [tx.id for tx in ledger.payment_history if tx.id is not None]
    assert ids == sorted(ids, reverse=True), "INV-4 violated: payment history out of order"

    logger.debug(
        "Ledger invariants OK: tenant=%s, deposit=%d, fines=%d",
        ledger.tenant_id, ledger.current_deposit, fines,
    )
