"""Spaced-repetition scheduling engine."""

from .activity import ActivityDay, ActivitySummary, build_activity
from .calendar import CalendarDay, build_calendar
from .categories import (
    CategoryCount,
    CategorySortMode,
    CategoryStats,
    build_category_counts,
    build_sub_category_counts,
    category_stats,
    next_category_with_due,
    next_category_with_least_due,
    next_sub_category_with_least_items,
    sub_category_stats,
)
from .errors import InvalidQualityError, ItemNotFoundError, PersistenceError, SchedulingError
from .models import LearningItem, Quality, SchedulingFields, SchedulingPolicy
from .overview import Evaluation, ScheduleOverview
from .position import PositionPreserver, StudyNavigator
from .review import ReviewResult, ReviewSession, ReviewStateStore, ReviewStatus
from .srs import ReviewSchedule, calculate_next_schedule

__all__ = [
    "ActivityDay",
    "ActivitySummary",
    "CalendarDay",
    "CategoryCount",
    "CategorySortMode",
    "CategoryStats",
    "Evaluation",
    "InvalidQualityError",
    "ItemNotFoundError",
    "LearningItem",
    "PersistenceError",
    "PositionPreserver",
    "Quality",
    "ReviewResult",
    "ReviewSchedule",
    "ReviewSession",
    "ReviewStateStore",
    "ReviewStatus",
    "ScheduleOverview",
    "SchedulingError",
    "SchedulingFields",
    "SchedulingPolicy",
    "StudyNavigator",
    "build_activity",
    "build_calendar",
    "build_category_counts",
    "build_sub_category_counts",
    "calculate_next_schedule",
    "category_stats",
    "next_category_with_due",
    "next_category_with_least_due",
    "next_sub_category_with_least_items",
    "sub_category_stats",
]
