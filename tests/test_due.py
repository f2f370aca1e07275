from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from src.scheduling import LearningItem, Quality
from src.scheduling.clock import end_of_civil_day
from src.scheduling.due import (
    due_today,
    due_today_including_completed,
    is_due_on,
    past_due,
    remaining_today_count,
    reviewed_today,
)


TODAY = date(2026, 6, 15)


def _scheduled(item_id: str, due_on: date, zone, **kwargs) -> LearningItem:
    return LearningItem(
        id=item_id,
        interval=kwargs.pop("interval", 3),
        review_count=kwargs.pop("review_count", 1),
        next_review_at=end_of_civil_day(due_on, zone),
        **kwargs,
    )


def _reviewed_at(item_id: str, reviewed: datetime, due_on: date, zone) -> LearningItem:
    return _scheduled(
        item_id,
        due_on,
        zone,
        last_review_at=reviewed,
        last_quality=Quality.GOOD,
    )


def test_new_item_is_due_on_every_date(zone, now) -> None:
    item = LearningItem(id="new")

    for offset in range(-2, 10):
        assert is_due_on(item, TODAY + timedelta(days=offset), now, zone)


def test_overdue_items_roll_into_today(zone, now) -> None:
    overdue = _scheduled("overdue", TODAY - timedelta(days=4), zone)
    today = _scheduled("today", TODAY, zone)
    tomorrow = _scheduled("tomorrow", TODAY + timedelta(days=1), zone)

    assert is_due_on(overdue, TODAY, now, zone)
    assert is_due_on(today, TODAY, now, zone)
    assert not is_due_on(tomorrow, TODAY, now, zone)


def test_future_dates_match_exactly(zone, now) -> None:
    item = _scheduled("later", TODAY + timedelta(days=3), zone)
    overdue = _scheduled("overdue", TODAY - timedelta(days=1), zone)

    assert not is_due_on(item, TODAY + timedelta(days=2), now, zone)
    assert is_due_on(item, TODAY + timedelta(days=3), now, zone)
    assert not is_due_on(item, TODAY + timedelta(days=4), now, zone)
    assert not is_due_on(overdue, TODAY + timedelta(days=1), now, zone)


def test_due_comparison_uses_anchor_civil_date(zone, now) -> None:
    # 03:00 UTC on the 16th is 23:00 on the 15th in New York.
    item = LearningItem(
        id="edge",
        interval=2,
        review_count=1,
        next_review_at=datetime(2026, 6, 16, 3, 0, tzinfo=timezone.utc),
    )

    assert is_due_on(item, TODAY, now, zone)


def test_remaining_today_subtracts_reviewed(zone, now) -> None:
    items = [
        _scheduled("overdue-1", TODAY - timedelta(days=1), zone),
        _scheduled("overdue-2", TODAY - timedelta(days=2), zone),
        _scheduled("overdue-3", TODAY - timedelta(days=7), zone),
        _scheduled("today-1", TODAY, zone),
        _scheduled("today-2", TODAY, zone),
        _reviewed_at("done-1", now - timedelta(hours=2), TODAY + timedelta(days=4), zone),
        _reviewed_at("done-2", now - timedelta(hours=1), TODAY + timedelta(days=1), zone),
    ]

    assert len(due_today(items, now, zone)) == 5
    assert len(reviewed_today(items, now, zone)) == 2
    assert remaining_today_count(items, now, zone) == 3


def test_remaining_today_never_negative(zone, now) -> None:
    items = [
        _reviewed_at("done-1", now - timedelta(hours=2), TODAY + timedelta(days=4), zone),
        _reviewed_at("done-2", now - timedelta(hours=1), TODAY + timedelta(days=1), zone),
    ]

    assert remaining_today_count(items, now, zone) == 0


def test_reviewed_today_uses_day_bounds(zone, now) -> None:
    start_of_today = datetime(2026, 6, 15, 0, 0, tzinfo=zone)
    items = [
        _reviewed_at("midnight", start_of_today, TODAY + timedelta(days=2), zone),
        _reviewed_at("yesterday", start_of_today - timedelta(microseconds=1), TODAY, zone),
        _reviewed_at("naive-utc", datetime(2026, 6, 15, 12, 0), TODAY + timedelta(days=3), zone),
    ]

    ids = {item.id for item in reviewed_today(items, now, zone)}

    assert ids == {"midnight", "naive-utc"}


def test_due_including_completed_is_superset(zone, now) -> None:
    items = [
        LearningItem(id="new"),
        _scheduled("today", TODAY, zone),
        _reviewed_at("done", now - timedelta(hours=3), TODAY + timedelta(days=5), zone),
        _scheduled("later", TODAY + timedelta(days=2), zone),
    ]

    including = {item.id for item in due_today_including_completed(items, now, zone)}
    raw = {item.id for item in due_today(items, now, zone)}

    assert including == {"new", "today", "done"}
    assert raw <= including


def test_inactive_items_are_ignored(zone, now) -> None:
    items = [
        LearningItem(id="hidden", active=False),
        _scheduled("hidden-overdue", TODAY - timedelta(days=1), zone, active=False),
        _scheduled("visible", TODAY, zone),
    ]

    assert [item.id for item in due_today(items, now, zone)] == ["visible"]
    assert past_due(items, now, zone) == []


def test_past_due_excludes_today_and_new(zone, now) -> None:
    items = [
        LearningItem(id="new"),
        _scheduled("today", TODAY, zone),
        _scheduled("yesterday", TODAY - timedelta(days=1), zone),
    ]

    assert [item.id for item in past_due(items, now, zone)] == ["yesterday"]
