"""Domain models for re_property: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass
class Property:
    id: str
    owner_id: str
    name: str
    address: str
    rent_amount: int          # whole currency units
    security_deposit: int     # whole currency units
    due_date: date            # one fixed calendar date, not a day-of-month
    owner_payout_id: str      # e.g. owner's UPI id
    property_code: str        # 6-char shareable code, upper-case
    created_at: datetime | None = None
