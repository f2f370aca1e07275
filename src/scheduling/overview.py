"""Read-only views consumed by presentation code."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, Tuple
from zoneinfo import ZoneInfo

from .activity import DEFAULT_ACTIVITY_DAYS, ActivitySummary, build_activity
from .calendar import DEFAULT_WINDOW_DAYS, CalendarDay, build_calendar
from .categories import (
    ALL_CATEGORIES,
    CategoryCount,
    CategorySortMode,
    build_category_counts,
    build_sub_category_counts,
)
from .clock import ensure_aware
from .due import (
    active_items,
    due_today_including_completed,
    is_due_today,
    remaining_today_count,
    reviewed_today,
)
from .models import LearningItem, SchedulingPolicy, normalize_category


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True, slots=True)
class Evaluation:
    """Filtered study list plus the counters shown next to it."""

    filtered_items: Tuple[LearningItem, ...]
    due_count: int
    reviewed_count: int
    total_count: int
    remaining_count: int


def _study_order(item: LearningItem) -> tuple:
    if item.next_review_at is None:
        return (0, _EPOCH, item.id)
    return (1, ensure_aware(item.next_review_at), item.id)


def _selected(name: Optional[str]) -> Optional[str]:
    if not name or name == ALL_CATEGORIES:
        return None
    return normalize_category(name)


class ScheduleOverview:
    """Evaluate item snapshots against a scheduling policy."""

    def __init__(
        self,
        policy: SchedulingPolicy,
        window_days: int = DEFAULT_WINDOW_DAYS,
        activity_days: int = DEFAULT_ACTIVITY_DAYS,
    ) -> None:
        if window_days < 1:
            raise ValueError("window_days must be at least 1.")
        if activity_days < 1:
            raise ValueError("activity_days must be at least 1.")
        self._policy = policy
        self._window_days = window_days
        self._activity_days = activity_days

    @property
    def zone(self) -> ZoneInfo:
        return self._policy.anchor_time_zone

    def evaluate(
        self,
        items: Iterable[LearningItem],
        selected_category: Optional[str],
        due_only: bool,
        now: datetime,
        starred_only: bool = False,
        selected_sub_category: Optional[str] = None,
    ) -> Evaluation:
        """Return the study list for a category selection with its progress counters.

        The category and sub-category narrow the scope that every counter is
        computed over; the due and starred filters only shape ``filtered_items``.
        """
        scope = active_items(items)
        category = _selected(selected_category)
        if category is not None:
            scope = [item for item in scope if item.category == category]
        sub_category = _selected(selected_sub_category)
        if sub_category is not None:
            scope = [item for item in scope if item.sub_category == sub_category]

        filtered = scope
        if due_only:
            filtered = [item for item in filtered if is_due_today(item, now, self.zone)]
        if starred_only:
            filtered = [item for item in filtered if item.starred]

        return Evaluation(
            filtered_items=tuple(sorted(filtered, key=_study_order)),
            due_count=len(due_today_including_completed(scope, now, self.zone)),
            reviewed_count=len(reviewed_today(scope, now, self.zone)),
            total_count=len(scope),
            remaining_count=remaining_today_count(scope, now, self.zone),
        )

    def calendar(self, items: Iterable[LearningItem], now: datetime) -> Tuple[CalendarDay, ...]:
        return build_calendar(items, now, self.zone, self._window_days)

    def categories(
        self,
        items: Iterable[LearningItem],
        due_only: bool,
        sort_mode: CategorySortMode | str,
        now: datetime,
    ) -> Tuple[CategoryCount, ...]:
        return build_category_counts(items, due_only, now, self.zone, sort_mode)

    def sub_categories(
        self,
        items: Iterable[LearningItem],
        selected_category: Optional[str],
        due_only: bool,
        sort_mode: CategorySortMode | str,
        now: datetime,
    ) -> Tuple[CategoryCount, ...]:
        return build_sub_category_counts(items, selected_category, due_only, now, self.zone, sort_mode)

    def activity(self, reviewed_at: Iterable[datetime], now: datetime) -> ActivitySummary:
        """Heatmap and streaks for the given review timestamps."""
        return build_activity(reviewed_at, now, self.zone, self._activity_days)
