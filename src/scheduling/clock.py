"""Civil-day arithmetic in the configured anchor time zone."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo


END_OF_DAY = time(23, 59, 59, 999000)


def ensure_aware(instant: datetime) -> datetime:
    """Treat naive datetimes (as returned by some database drivers) as UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


def civil_date_of(instant: datetime, zone: ZoneInfo) -> date:
    """Return the calendar date of ``instant`` as observed in ``zone``."""
    return ensure_aware(instant).astimezone(zone).date()


def start_of_civil_day(day: date, zone: ZoneInfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=zone)


def end_of_civil_day(day: date, zone: ZoneInfo) -> datetime:
    """Return 23:59:59.999 on ``day`` in ``zone``."""
    return datetime.combine(day, END_OF_DAY, tzinfo=zone)


def day_bounds(now: datetime, zone: ZoneInfo) -> tuple[datetime, datetime]:
    """Return ``[start_of_today, start_of_tomorrow)`` for the civil day containing ``now``."""
    today = civil_date_of(now, zone)
    return start_of_civil_day(today, zone), start_of_civil_day(today + timedelta(days=1), zone)
