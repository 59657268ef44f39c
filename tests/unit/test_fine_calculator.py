"""Unit tests for the late-fee calculator."""

from datetime import UTC, date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from src.re_fine.calculator import (
    FineEstimate,
    escalation_schedule,
    estimate,
    fine_for_days_late,
    next_fine,
)

DUE = date(2025, 1, 10)
UNPAID = date(2024, 12, 11)  # link-time sentinel, 30 days before the due date


class TestDecisionTable:
    def test_paid_on_due_date_suppresses_fine(self) -> None:
        result = estimate(DUE, DUE, date(2025, 3, 1))
        assert result == FineEstimate(fine=0, days_late=0, cycle_day=0)

    def test_paid_after_due_date_suppresses_fine(self) -> None:
        result = estimate(DUE, date(2025, 1, 15), date(2025, 1, 20))
        assert result == FineEstimate(fine=0, days_late=0, cycle_day=0)

    @pytest.mark.parametrize("days_after", [1, 5, 40, 200])
    def test_already_paid_ignores_today(self, days_after: int) -> None:
        result = estimate(DUE, DUE + timedelta(days=1), DUE + timedelta(days=days_after))
        assert result.fine == 0
        assert result.cycle_day == 0

    def test_before_due_date(self) -> None:
        result = estimate(DUE, UNPAID, date(2025, 1, 2))
        assert result == FineEstimate(fine=0, days_late=0, cycle_day=1)

    def test_grace_on_due_date(self) -> None:
        result = estimate(DUE, UNPAID, DUE)
        assert result == FineEstimate(fine=0, days_late=0, cycle_day=1)

    def test_grace_late_in_due_day(self) -> None:
        today = datetime(2025, 1, 10, 23, 59, 59, tzinfo=UTC)
        assert estimate(DUE, UNPAID, today) == FineEstimate(fine=0, days_late=0, cycle_day=1)

    def test_first_overdue_day(self) -> None:
        result = estimate(DUE, UNPAID, date(2025, 1, 11))
        assert result == FineEstimate(fine=100, days_late=1, cycle_day=2)
        assert result.is_late

    def test_third_overdue_day(self) -> None:
        result = estimate(DUE, UNPAID, date(2025, 1, 13))
        assert result == FineEstimate(fine=400, days_late=3, cycle_day=4)


class TestEscalation:
    def test_law_holds(self) -> None:
        for n in range(1, 25):
            result = estimate(DUE, UNPAID, DUE + timedelta(days=n))
            assert result.fine == 100 * 2 ** (n - 1)
            assert result.days_late == n
            assert result.cycle_day == n + 1

    def test_strictly_doubles(self) -> None:
        fines = [estimate(DUE, UNPAID, DUE + timedelta(days=n)).fine for n in range(1, 12)]
        for prev, cur in zip(fines, fines[1:]):
            assert cur == prev * 2

    def test_no_ceiling(self) -> None:
        result = estimate(DUE, UNPAID, DUE + timedelta(days=70))
        assert result.fine == 100 * 2**69
        assert isinstance(result.fine, int)

    def test_fine_for_days_late(self) -> None:
        assert fine_for_days_late(0) == 0
        assert fine_for_days_late(-3) == 0
        assert fine_for_days_late(1) == 100
        assert fine_for_days_late(2) == 200
        assert fine_for_days_late(4) == 800


class TestNormalization:
    def test_time_of_day_is_ignored(self) -> None:
        morning = datetime(2025, 1, 12, 0, 0, 1, tzinfo=UTC)
        night = datetime(2025, 1, 12, 23, 59, 59, tzinfo=UTC)
        assert estimate(DUE, UNPAID, morning) == estimate(DUE, UNPAID, night)

    def test_last_payment_later_same_day_counts_as_paid(self) -> None:
        paid = datetime(2025, 1, 10, 18, 30, tzinfo=UTC)
        assert estimate(DUE, paid, date(2025, 1, 14)).cycle_day == 0

    def test_aware_datetimes_fold_into_ledger_zone(self) -> None:
        # 2025-01-10T20:00Z is already 2025-01-11 in Kolkata (+05:30)
        today = datetime(2025, 1, 10, 20, 0, tzinfo=UTC)
        assert estimate(DUE, UNPAID, today).days_late == 0
        kolkata = ZoneInfo("Asia/Kolkata")
        assert estimate(DUE, UNPAID, today, kolkata).days_late == 1

    def test_naive_and_aware_inputs_mix(self) -> None:
        last = datetime(2024, 12, 11, 9, 0, tzinfo=timezone(timedelta(hours=-5)))
        today = datetime(2025, 1, 11, 9, 0)
        assert estimate(DUE, last, today) == FineEstimate(fine=100, days_late=1, cycle_day=2)

    def test_deterministic(self) -> None:
        args = (DUE, UNPAID, date(2025, 1, 16))
        assert {estimate(*args) for _ in range(50)} == {estimate(*args)}


class TestNextFine:
    def test_not_late_next_is_base(self) -> None:
        assert next_fine(FineEstimate(fine=0, days_late=0, cycle_day=1)) == 100

    def test_late_next_doubles(self) -> None:
        assert next_fine(FineEstimate(fine=400, days_late=3, cycle_day=4)) == 800

    def test_paid_cycle_has_no_next_fine(self) -> None:
        assert next_fine(FineEstimate(fine=0, days_late=0, cycle_day=0)) == 0


class TestEscalationSchedule:
    def test_starts_at_due_date(self) -> None:
        rows = escalation_schedule(4)
        assert [(r.cycle_day, r.days_late, r.fine) for r in rows] == [
            (1, 0, 0),
            (2, 1, 100),
            (3, 2, 200),
            (4, 3, 400),
        ]

    def test_matches_estimate(self) -> None:
        for row in escalation_schedule(10):
            result = estimate(DUE, UNPAID, DUE + timedelta(days=row.days_late))
            assert (result.cycle_day, result.fine) == (row.cycle_day, row.fine)

    def test_zero_or_negative_days(self) -> None:
        assert escalation_schedule(0) == []
        assert escalation_schedule(-1) == []
