"""Review activity per civil day and the study streaks derived from it."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Tuple
from zoneinfo import ZoneInfo

from .clock import civil_date_of


DEFAULT_ACTIVITY_DAYS = 365


@dataclass(frozen=True, slots=True)
class ActivityDay:
    date: date
    review_count: int


@dataclass(frozen=True, slots=True)
class ActivitySummary:
    """Heatmap cells ending today plus streak figures over the full history."""

    days: Tuple[ActivityDay, ...]
    current_streak: int
    longest_streak: int
    total_reviews: int


def _longest_run(active_days: Iterable[date]) -> int:
    longest = 0
    run = 0
    previous = None
    for day in sorted(active_days):
        run = run + 1 if previous is not None and day - previous == timedelta(days=1) else 1
        longest = max(longest, run)
        previous = day
    return longest


def _current_run(active_days: set, today: date) -> int:
    # A streak survives until a whole civil day passes without a review.
    cursor = today if today in active_days else today - timedelta(days=1)
    run = 0
    while cursor in active_days:
        run += 1
        cursor -= timedelta(days=1)
    return run


def build_activity(
    reviewed_at: Iterable[datetime],
    now: datetime,
    zone: ZoneInfo,
    window_days: int = DEFAULT_ACTIVITY_DAYS,
) -> ActivitySummary:
    """Count reviews per civil day in ``zone`` for the ``window_days`` ending today.

    Reviews after today are ignored. Streaks use every review day, not only
    those inside the window.
    """
    if window_days < 1:
        raise ValueError("window_days must be at least 1.")

    today = civil_date_of(now, zone)
    per_day: Counter[date] = Counter()
    for instant in reviewed_at:
        day = civil_date_of(instant, zone)
        if day <= today:
            per_day[day] += 1

    first_day = today - timedelta(days=window_days - 1)
    days = []
    for offset in range(window_days):
        day = first_day + timedelta(days=offset)
        days.append(ActivityDay(date=day, review_count=per_day[day]))

    active_days = set(per_day)
    return ActivitySummary(
        days=tuple(days),
        current_streak=_current_run(active_days, today),
        longest_streak=_longest_run(active_days),
        total_reviews=sum(per_day.values()),
    )
