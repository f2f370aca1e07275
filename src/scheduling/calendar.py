"""Rolling calendar of due counts for the days ahead."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Tuple
from zoneinfo import ZoneInfo

from .clock import civil_date_of
from .due import active_items, remaining_today_count
from .models import LearningItem


DEFAULT_WINDOW_DAYS = 30


@dataclass(frozen=True, slots=True)
class CalendarDay:
    """Number of items due on a single civil date."""

    date: date
    due_count: int


def build_calendar(
    items: Iterable[LearningItem],
    now: datetime,
    zone: ZoneInfo,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> Tuple[CalendarDay, ...]:
    """Return due counts for today and the following ``window_days - 1`` days.

    Today reports the remaining-today figure. Later days count scheduled items
    whose due date falls exactly on them; new items only appear in today's
    bucket.
    """
    if window_days < 1:
        raise ValueError("window_days must be at least 1.")

    snapshot = active_items(items)
    today = civil_date_of(now, zone)
    last_day = today + timedelta(days=window_days - 1)

    scheduled: Counter[date] = Counter()
    for item in snapshot:
        if item.next_review_at is None:
            continue
        due_on = civil_date_of(item.next_review_at, zone)
        if today < due_on <= last_day:
            scheduled[due_on] += 1

    days = [CalendarDay(date=today, due_count=remaining_today_count(snapshot, now, zone))]
    for offset in range(1, window_days):
        day = today + timedelta(days=offset)
        days.append(CalendarDay(date=day, due_count=scheduled[day]))
    return tuple(days)
