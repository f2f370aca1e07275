"""Core value types shared by the scheduling components."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import IntEnum
from types import MappingProxyType
from typing import Mapping, Optional
from zoneinfo import ZoneInfo

from .errors import InvalidQualityError


UNCATEGORIZED = "Uncategorized"

DEFAULT_INITIAL_INTERVALS = {"AGAIN": 1, "HARD": 1, "GOOD": 4, "EASY": 15}
DEFAULT_FACTORS = {"AGAIN": 0.5, "HARD": 0.8, "GOOD": 1.0, "EASY": 1.3}
DEFAULT_MAXIMUM_INTERVAL = 36500


class Quality(IntEnum):
    """Ordinal outcome of a single review."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4

    @classmethod
    def parse(cls, value: object) -> "Quality":
        """Coerce a rating, its integer value or its name into a ``Quality``."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise InvalidQualityError(value)
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise InvalidQualityError(value) from None
        if isinstance(value, str):
            member = cls.__members__.get(value.strip().upper())
            if member is not None:
                return member
        raise InvalidQualityError(value)


def normalize_category(category: Optional[str]) -> str:
    """Return the bucket name for a possibly blank category."""
    if category is None:
        return UNCATEGORIZED
    stripped = category.strip()
    return stripped or UNCATEGORIZED


@dataclass(frozen=True, slots=True)
class LearningItem:
    """Snapshot of a learning item as seen by the scheduler."""

    id: str
    category: str = UNCATEGORIZED
    sub_category: str = UNCATEGORIZED
    interval: Optional[int] = None
    review_count: int = 0
    last_review_at: Optional[datetime] = None
    next_review_at: Optional[datetime] = None
    last_quality: Optional[Quality] = None
    question: str = ""
    answer: str = ""
    starred: bool = False
    active: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", normalize_category(self.category))
        object.__setattr__(self, "sub_category", normalize_category(self.sub_category))
        if self.review_count < 0:
            raise ValueError("review_count must not be negative.")

    @property
    def is_new(self) -> bool:
        return self.next_review_at is None

    def with_schedule(self, fields: "SchedulingFields") -> "LearningItem":
        """Return a copy carrying freshly persisted scheduling fields."""
        return replace(
            self,
            interval=fields.interval,
            next_review_at=fields.next_review_at,
            last_review_at=fields.last_review_at,
            last_quality=fields.last_quality,
            review_count=fields.review_count,
        )


@dataclass(frozen=True, slots=True)
class SchedulingFields:
    """The scheduling columns that are always written together."""

    interval: int
    next_review_at: datetime
    last_review_at: datetime
    last_quality: Quality
    review_count: int


def _freeze_table(table: Mapping[object, object], name: str) -> Mapping[Quality, object]:
    frozen = {}
    for key, value in table.items():
        frozen[Quality.parse(key)] = value
    missing = [quality.name for quality in Quality if quality not in frozen]
    if missing:
        raise ValueError(f"{name} is missing entries for: {', '.join(missing)}.")
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class SchedulingPolicy:
    """Configuration for interval growth, immutable for a single evaluation."""

    initial_intervals: Mapping[Quality, int]
    factors: Mapping[Quality, float]
    maximum_interval: int
    anchor_time_zone: ZoneInfo

    def __post_init__(self) -> None:
        initial = _freeze_table(self.initial_intervals, "initial_intervals")
        factors = _freeze_table(self.factors, "factors")
        for quality, days in initial.items():
            if not isinstance(days, int) or days < 1:
                raise ValueError(f"Initial interval for {quality.name} must be a positive integer.")
        for quality, factor in factors.items():
            if factor <= 0:
                raise ValueError(f"Factor for {quality.name} must be positive.")
        if self.maximum_interval < 1:
            raise ValueError("maximum_interval must be at least one day.")
        if not isinstance(self.anchor_time_zone, ZoneInfo):
            raise ValueError("anchor_time_zone must be a ZoneInfo instance.")
        object.__setattr__(self, "initial_intervals", initial)
        object.__setattr__(self, "factors", factors)

    @classmethod
    def default(cls, anchor_time_zone: ZoneInfo) -> "SchedulingPolicy":
        """Build a policy with the stock intervals and factors for the given zone."""
        return cls(
            initial_intervals=DEFAULT_INITIAL_INTERVALS,
            factors=DEFAULT_FACTORS,
            maximum_interval=DEFAULT_MAXIMUM_INTERVAL,
            anchor_time_zone=anchor_time_zone,
        )
