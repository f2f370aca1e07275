"""Spaced-repetition interval calculation for item reviews."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from .clock import civil_date_of, end_of_civil_day
from .models import LearningItem, Quality, SchedulingFields, SchedulingPolicy


@dataclass(frozen=True, slots=True)
class ReviewSchedule:
    """Calculated review data for an item after receiving a quality rating."""

    days_to_add: int
    next_review_at: datetime
    review_count: int

    def to_fields(self, quality: Quality, reviewed_at: datetime) -> SchedulingFields:
        """Combine the schedule with the review context into a persistable delta."""
        return SchedulingFields(
            interval=self.days_to_add,
            next_review_at=self.next_review_at,
            last_review_at=reviewed_at,
            last_quality=quality,
            review_count=self.review_count,
        )


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def is_first_review(state: LearningItem) -> bool:
    return state.interval is None or state.review_count == 0


def calculate_next_schedule(
    state: LearningItem,
    quality: object,
    policy: SchedulingPolicy,
    now: datetime,
) -> ReviewSchedule:
    """Return the next review schedule using multiplicative interval factors.

    New items take the policy's initial interval for the rating. Reviewed items
    multiply their current interval by the rating's factor, never dropping below
    one day. The result is clamped to ``policy.maximum_interval`` and the due
    instant is pinned to the end of the target civil day.

    Raises ``InvalidQualityError`` for unknown ratings.
    """
    rating = Quality.parse(quality)

    if is_first_review(state):
        days_to_add = policy.initial_intervals[rating]
    else:
        days_to_add = max(1, round_half_up(state.interval * policy.factors[rating]))

    if days_to_add > policy.maximum_interval:
        days_to_add = policy.maximum_interval

    zone = policy.anchor_time_zone
    target_day = civil_date_of(now, zone) + timedelta(days=days_to_add)

    return ReviewSchedule(
        days_to_add=days_to_add,
        next_review_at=end_of_civil_day(target_day, zone),
        review_count=state.review_count + 1,
    )
