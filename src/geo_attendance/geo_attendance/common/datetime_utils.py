from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into a naive local datetime.

    A trailing ``Z`` or explicit offset is converted to local time first, so
    records exported by other devices land on the right calendar day.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def day_bounds(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, datetime.min.time())
    return start, start + timedelta(days=1)


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """[start, end) of a calendar month."""
    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end


def weekdays_in_month(year: int, month: int) -> int:
    """Count Monday-Friday dates in the month."""
    _, days = calendar.monthrange(year, month)
    return sum(1 for d in range(1, days + 1) if date(year, month, d).weekday() < 5)
