"""UTC clock and calendar-date helpers.

Timestamps are stored timezone-aware in UTC. Lateness is decided on calendar
dates, so every timestamp is folded into the ledger's local zone first.
"""

from datetime import date, datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

from config.settings import settings


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def ledger_zone() -> ZoneInfo:
    """Zone configured by LEDGER_TIMEZONE."""
    return ZoneInfo(settings.LEDGER_TIMEZONE)


def to_calendar_date(value: date | datetime, tz: tzinfo | None = None) -> date:
    """Drop the time of day.

    Aware datetimes are converted to ``tz`` first (when given); naive ones are
    taken as already local. Plain dates pass through unchanged.
    """
    if isinstance(value, datetime):
        if tz is not None and value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


def rent_month_label(moment: datetime, tz: tzinfo | None = None) -> str:
    """Human label of the rent cycle: 2024-11-05T10:00Z -> 'November 2024'."""
    if tz is not None and moment.tzinfo is not None:
        moment = moment.astimezone(tz)
    return moment.strftime("%B %Y")
