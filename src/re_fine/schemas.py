"""Pydantic schemas for the fine escalation schedule."""

from pydantic import BaseModel

from src.re_fine.calculator import ScheduleRow


class ScheduleRowOut(BaseModel):
    cycle_day: int
    days_late: int
    fine: int

    @classmethod
    def from_row(cls, row: ScheduleRow) -> "ScheduleRowOut":
        return cls(cycle_day=row.cycle_day, days_late=row.days_late, fine=row.fine)


class EscalationScheduleResponse(BaseModel):
    rows: list[ScheduleRowOut]
