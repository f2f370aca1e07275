"""Per-category and per-sub-category counts for the category pickers."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple
from zoneinfo import ZoneInfo

from .due import active_items, is_due_today
from .models import LearningItem, normalize_category


ALL_CATEGORIES = "All"


class CategorySortMode(str, Enum):
    ALPHABETICAL = "alphabetical"
    MOST_DUE = "most-due"
    LEAST_DUE = "least-due"

    @classmethod
    def parse(cls, value: object) -> "CategorySortMode":
        """Accept enum members, kebab-case values and camelCase aliases."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().replace("_", "-").lower()
            aliases = {"mostdue": "most-due", "leastdue": "least-due"}
            normalized = aliases.get(normalized, normalized)
            for member in cls:
                if member.value == normalized:
                    return member
        raise ValueError(f"Unknown category sort mode: {value!r}.")


@dataclass(frozen=True, slots=True)
class CategoryCount:
    name: str
    count: int


@dataclass(frozen=True, slots=True)
class CategoryStats:
    """Active and due-today item counts of one category or sub-category."""

    name: str
    total: int
    due: int


def _alphabetical_key(name: str) -> Tuple[str, str]:
    return (name.casefold(), name)


def _sort_categories(counts: Counter, sort_mode: CategorySortMode) -> list[str]:
    names = sorted(counts, key=_alphabetical_key)
    if sort_mode is CategorySortMode.MOST_DUE:
        names.sort(key=lambda name: -counts[name])
    elif sort_mode is CategorySortMode.LEAST_DUE:
        names.sort(key=lambda name: counts[name])
    return names


def _count_entries(
    items: Iterable[LearningItem],
    bucket: Callable[[LearningItem], str],
    due_only: bool,
    now: datetime,
    zone: ZoneInfo,
    sort_mode: CategorySortMode | str,
) -> Tuple[CategoryCount, ...]:
    mode = CategorySortMode.parse(sort_mode)

    counts: Counter = Counter()
    matching = 0
    for item in items:
        if due_only and not is_due_today(item, now, zone):
            continue
        counts[bucket(item)] += 1
        matching += 1

    entries = [CategoryCount(name=ALL_CATEGORIES, count=matching)]
    for name in _sort_categories(counts, mode):
        entries.append(CategoryCount(name=name, count=counts[name]))
    return tuple(entries)


def _in_category(items: Iterable[LearningItem], category: Optional[str]) -> List[LearningItem]:
    snapshot = active_items(items)
    if category is None or category == ALL_CATEGORIES:
        return snapshot
    wanted = normalize_category(category)
    return [item for item in snapshot if item.category == wanted]


def build_category_counts(
    items: Iterable[LearningItem],
    due_only: bool,
    now: datetime,
    zone: ZoneInfo,
    sort_mode: CategorySortMode = CategorySortMode.ALPHABETICAL,
) -> Tuple[CategoryCount, ...]:
    """Return category counts with the pinned ``"All"`` entry first.

    With ``due_only`` the counts cover items due today and categories without
    a due item are left out. Otherwise every category holding an active item is
    listed with its total item count.
    """
    return _count_entries(
        active_items(items),
        lambda item: item.category,
        due_only,
        now,
        zone,
        sort_mode,
    )


def build_sub_category_counts(
    items: Iterable[LearningItem],
    category: Optional[str],
    due_only: bool,
    now: datetime,
    zone: ZoneInfo,
    sort_mode: CategorySortMode = CategorySortMode.ALPHABETICAL,
) -> Tuple[CategoryCount, ...]:
    """Sub-category counts within ``category`` (every category for ``"All"``)."""
    return _count_entries(
        _in_category(items, category),
        lambda item: item.sub_category,
        due_only,
        now,
        zone,
        sort_mode,
    )


def _bucket_stats(
    items: Iterable[LearningItem],
    bucket: Callable[[LearningItem], str],
    now: datetime,
    zone: ZoneInfo,
) -> Dict[str, CategoryStats]:
    totals: Counter = Counter()
    due: Counter = Counter()
    for item in items:
        name = bucket(item)
        totals[name] += 1
        if is_due_today(item, now, zone):
            due[name] += 1
    return {
        name: CategoryStats(name=name, total=totals[name], due=due[name])
        for name in sorted(totals, key=_alphabetical_key)
    }


def category_stats(
    items: Iterable[LearningItem], now: datetime, zone: ZoneInfo
) -> Dict[str, CategoryStats]:
    """Total and due-today counts per category, in alphabetical order."""
    return _bucket_stats(active_items(items), lambda item: item.category, now, zone)


def sub_category_stats(
    items: Iterable[LearningItem],
    category: Optional[str],
    now: datetime,
    zone: ZoneInfo,
) -> Dict[str, CategoryStats]:
    return _bucket_stats(_in_category(items, category), lambda item: item.sub_category, now, zone)


def next_category_with_due(
    items: Iterable[LearningItem],
    current: Optional[str],
    now: datetime,
    zone: ZoneInfo,
) -> Optional[str]:
    """Return the category to study after ``current``, or ``None`` once all are done.

    Categories with due items are visited alphabetically. From ``"All"`` or an
    unknown category the first one is returned; moving past the last one ends
    the cycle.
    """
    due_categories = [
        stats.name for stats in category_stats(items, now, zone).values() if stats.due
    ]
    if not due_categories:
        return None
    if current is None or current == ALL_CATEGORIES or current not in due_categories:
        return due_categories[0]
    position = due_categories.index(current) + 1
    if position >= len(due_categories):
        return None
    return due_categories[position]


def _smallest(
    stats: Dict[str, CategoryStats],
    current: Optional[str],
    size: Callable[[CategoryStats], int],
) -> Optional[str]:
    candidates = [entry for name, entry in stats.items() if entry.due and name != current]
    if not candidates:
        return None
    # stats are alphabetical and min() keeps the first of equal entries
    return min(candidates, key=size).name


def next_category_with_least_due(
    items: Iterable[LearningItem],
    current: Optional[str],
    now: datetime,
    zone: ZoneInfo,
) -> Optional[str]:
    """Pick the category, other than ``current``, with the fewest items due today.

    Ties go to the alphabetically first name. Returns ``None`` when no other
    category has anything due.
    """
    return _smallest(category_stats(items, now, zone), current, lambda entry: entry.due)


def next_sub_category_with_least_items(
    items: Iterable[LearningItem],
    category: Optional[str],
    current: Optional[str],
    now: datetime,
    zone: ZoneInfo,
) -> Optional[str]:
    """Pick the smallest sub-category of ``category`` that still has due items.

    Sub-categories are compared by their total active item count, so short
    decks are finished first. ``current`` is never returned.
    """
    return _smallest(
        sub_category_stats(items, category, now, zone),
        current,
        lambda entry: entry.total,
    )
