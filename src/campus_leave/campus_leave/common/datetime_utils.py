from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_day(value: object, field_name: str) -> date:
    """Accept a date, a datetime or an ISO string and keep only the calendar day.

    Any time-of-day component (including a trailing ``Z`` offset) is discarded.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    raw = str(value or "").strip()
    if not raw:
        raise ValidationError(f"{field_name} is required", fields={field_name: f"{field_name} is required"})
    try:
        if len(raw) == 10:
            return parse_iso_date(raw)
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        message = f"{field_name} must be a date (YYYY-MM-DD)"
        raise ValidationError(message, fields={field_name: message})


def parse_optional_day(value: object, field_name: str) -> Optional[date]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_day(value, field_name)


def inclusive_days(start: date, end: date) -> int:
    return (end - start).days + 1


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def today_local() -> date:
    return now_local().date()
