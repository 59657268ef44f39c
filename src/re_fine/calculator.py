"""Late-fee calculator: the single formula behind both the live estimate and
the authoritative payment path.

Decision table (first match wins), all three inputs folded to calendar dates:

    last_payment >= due          -> fine 0, days_late 0, cycle_day 0  (cycle paid)
    today <= due                 -> fine 0, days_late 0, cycle_day 1  (not due yet)
    d = (today - due).days, d>=1 -> fine 100 * 2^(d-1), days_late d, cycle_day d+1

The due date itself is grace (cycle day 1). The escalation has no ceiling.
All amounts are int.
"""

from dataclasses import dataclass
from datetime import date, datetime, tzinfo

from src.re_common.datetime_utils import to_calendar_date

BASE_FINE = 100  # fine on the first late day; doubles every further day


@dataclass(frozen=True)
class FineEstimate:
    fine: int
    days_late: int
    cycle_day: int

    @property
    def is_late(self) -> bool:
        return self.days_late > 0


PAID = FineEstimate(fine=0, days_late=0, cycle_day=0)
ON_TIME = FineEstimate(fine=0, days_late=0, cycle_day=1)


@dataclass(frozen=True)
class ScheduleRow:
    cycle_day: int
    days_late: int
    fine: int


def fine_for_days_late(days_late: int) -> int:
    """Escalation law: 1 -> 100, 2 -> 200, 3 -> 400, ... (0 when not late)."""
    if days_late < 1:
        return 0
    return BASE_FINE << (days_late - 1)


def estimate(
    due_date: date | datetime,
    last_payment_date: date | datetime,
    today: date | datetime,
    tz: tzinfo | None = None,
) -> FineEstimate:
    """Fine owed if rent were paid on ``today``. Pure and total."""
    due = to_calendar_date(due_date, tz)
    last_paid = to_calendar_date(last_payment_date, tz)
    current = to_calendar_date(today, tz)

    if last_paid >= due:
        return PAID
    if current <= due:
        return ON_TIME

    # Calendar dates differ by whole days, so (current - due).days is already floored.
    days_late = (current - due).days
    return FineEstimate(
        fine=fine_for_days_late(days_late),
        days_late=days_late,
        cycle_day=days_late + 1,
    )


def next_fine(current: FineEstimate) -> int:
    """Fine that applies if payment slips by one more day."""
    if current.cycle_day == 0:
        return 0
    return fine_for_days_late(current.days_late + 1)


def escalation_schedule(days: int) -> list[ScheduleRow]:
    """First ``days`` cycle days starting at the due date (cycle day 1, no fine)."""
    return [
        ScheduleRow(cycle_day=n + 1, days_late=n, fine=fine_for_days_late(n))
        for n in range(max(days, 0))
    ]
