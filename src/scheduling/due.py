"""Classification of learning items as due or not due on a civil date."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, List
from zoneinfo import ZoneInfo

from .clock import civil_date_of, day_bounds, ensure_aware
from .models import LearningItem


def active_items(items: Iterable[LearningItem]) -> List[LearningItem]:
    """Drop deactivated items; they never take part in due computations."""
    return [item for item in items if item.active]


def is_due_on(item: LearningItem, target_date: date, now: datetime, zone: ZoneInfo) -> bool:
    """Return whether ``item`` counts as due on ``target_date``.

    New items are due on every date. On today (and any earlier date) overdue
    items roll forward, so an item is due when its scheduled civil date is on or
    before the target. Future dates only match items scheduled exactly on them.
    """
    if item.next_review_at is None:
        return True

    scheduled = civil_date_of(item.next_review_at, zone)
    if target_date <= civil_date_of(now, zone):
        return scheduled <= target_date
    return scheduled == target_date


def is_due_today(item: LearningItem, now: datetime, zone: ZoneInfo) -> bool:
    return is_due_on(item, civil_date_of(now, zone), now, zone)


def was_reviewed_today(item: LearningItem, now: datetime, zone: ZoneInfo) -> bool:
    if item.last_review_at is None:
        return False
    start, end = day_bounds(now, zone)
    reviewed_at = ensure_aware(item.last_review_at)
    return start <= reviewed_at < end


def due_today(items: Iterable[LearningItem], now: datetime, zone: ZoneInfo) -> List[LearningItem]:
    """Return active items due today, including overdue and new ones."""
    return [item for item in active_items(items) if is_due_today(item, now, zone)]


def reviewed_today(items: Iterable[LearningItem], now: datetime, zone: ZoneInfo) -> List[LearningItem]:
    return [item for item in active_items(items) if was_reviewed_today(item, now, zone)]


def remaining_today_count(items: Iterable[LearningItem], now: datetime, zone: ZoneInfo) -> int:
    """Count of reviews still outstanding today, as shown in progress displays.

    Reviewing an item moves its due date past today, so the raw due set already
    shrinks by one per review; subtracting today's reviews keeps progress
    figures consistent with that.
    """
    snapshot = active_items(items)
    raw = len(due_today(snapshot, now, zone))
    done = len(reviewed_today(snapshot, now, zone))
    return max(0, raw - done)


def due_today_including_completed(
    items: Iterable[LearningItem], now: datetime, zone: ZoneInfo
) -> List[LearningItem]:
    """Superset used for headline denominators: due today, reviewed today or new."""
    return [
        item
        for item in active_items(items)
        if item.is_new or is_due_today(item, now, zone) or was_reviewed_today(item, now, zone)
    ]


def past_due(items: Iterable[LearningItem], now: datetime, zone: ZoneInfo) -> List[LearningItem]:
    """Return active items scheduled strictly before today."""
    today = civil_date_of(now, zone)
    return [
        item
        for item in active_items(items)
        if item.next_review_at is not None and civil_date_of(item.next_review_at, zone) < today
    ]
