from __future__ import annotations

from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from spa_booking.application.exceptions import ValidationError


def end_of_business_day(tz: ZoneInfo, now: datetime | None = None) -> datetime:
    """Last instant of the current calendar day in the business timezone."""
    current = now.astimezone(tz) if now else datetime.now(tz)
    return datetime.combine(current.date(), time(23, 59, 59, 999000), tzinfo=tz)


def parse_calendar_date(value: str, field_name: str) -> date:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date.")


def nights_between(check_in: date, check_out: date) -> int:
    return max(1, (check_out - check_in).days)


def as_business_time(value: datetime, tz: ZoneInfo) -> datetime:
    """Naive datetimes are taken to be in the business timezone."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value
