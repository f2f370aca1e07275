from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from src.db import ItemReview
from src.db import items as item_store
from src.db.items import (
    ItemPayload,
    SqlReviewStateStore,
    create_item,
    delete_item,
    get_item,
    list_items,
    list_review_times,
    set_item_active,
    toggle_starred,
    update_item_content,
    write_scheduling_fields,
)
from src.scheduling import ItemNotFoundError, PersistenceError, Quality, SchedulingFields


def _fields(reviewed_at: datetime, interval: int = 4, count: int = 1) -> SchedulingFields:
    return SchedulingFields(
        interval=interval,
        next_review_at=reviewed_at + timedelta(days=interval),
        last_review_at=reviewed_at,
        last_quality=Quality.GOOD,
        review_count=count,
    )


@pytest.mark.asyncio
async def test_created_item_is_new(session_factory) -> None:
    async with session_factory() as session:
        async with session.begin():
            record = await create_item(
                session,
                ItemPayload(question="  σπίτι ", answer=" house ", category="  "),
            )
        item = await get_item(session, record.id)

    assert item is not None
    assert item.question == "σπίτι"
    assert item.answer == "house"
    assert item.category == "Uncategorized"
    assert item.is_new
    assert item.interval is None
    assert item.review_count == 0
    assert item.active is True


@pytest.mark.asyncio
async def test_content_edit_keeps_schedule(session_factory) -> None:
    reviewed_at = datetime(2026, 6, 10, 9, 0, tzinfo=timezone.utc)

    async with session_factory() as session:
        async with session.begin():
            await create_item(session, ItemPayload(question="q", answer="a"), item_id="item")
            await write_scheduling_fields(session, "item", _fields(reviewed_at))
        async with session.begin():
            await update_item_content(
                session,
                "item",
                ItemPayload(question="q (edited)", answer="a", category="Verbs", starred=True),
            )
        item = await get_item(session, "item")

    assert item.question == "q (edited)"
    assert item.category == "Verbs"
    assert item.starred is True
    assert item.interval == 4
    assert item.review_count == 1
    assert item.last_review_at == reviewed_at
    assert item.next_review_at == reviewed_at + timedelta(days=4)


@pytest.mark.asyncio
async def test_list_items_filters_owner_and_inactive(session_factory) -> None:
    async with session_factory() as session:
        async with session.begin():
            await create_item(session, ItemPayload(question="1", answer="1", owner_id=7), item_id="a")
            await create_item(session, ItemPayload(question="2", answer="2", owner_id=7), item_id="b")
            await create_item(session, ItemPayload(question="3", answer="3", owner_id=8), item_id="c")
            await set_item_active(session, "b", False)

        owned = await list_items(session, owner_id=7)
        everything = await list_items(session, include_inactive=True)

    assert [item.id for item in owned] == ["a"]
    assert [item.id for item in everything] == ["a", "b", "c"]
    assert everything[1].active is False


@pytest.mark.asyncio
async def test_toggle_and_delete(session_factory) -> None:
    async with session_factory() as session:
        async with session.begin():
            await create_item(session, ItemPayload(question="q", answer="a"), item_id="item")
            assert await toggle_starred(session, "item") is True
            assert await toggle_starred(session, "item") is False
            await delete_item(session, "item")

        assert await get_item(session, "item") is None
        with pytest.raises(ItemNotFoundError):
            async with session.begin():
                await toggle_starred(session, "item")


@pytest.mark.asyncio
async def test_write_for_missing_item_raises(session_factory) -> None:
    now = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)

    async with session_factory() as session:
        with pytest.raises(ItemNotFoundError):
            async with session.begin():
                await write_scheduling_fields(session, "nope", _fields(now))


@pytest.mark.asyncio
async def test_store_wraps_database_errors(session_factory, monkeypatch: pytest.MonkeyPatch) -> None:
    now = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)
    async with session_factory() as session:
        async with session.begin():
            await create_item(session, ItemPayload(question="q", answer="a"), item_id="item")

    async def failing_write(*_: object, **__: object) -> None:
        raise OperationalError("UPDATE learning_items", {}, Exception("disk I/O error"))

    monkeypatch.setattr(item_store, "write_scheduling_fields", failing_write)
    store = SqlReviewStateStore(session_factory)

    with pytest.raises(PersistenceError):
        await store.write_scheduling_fields("item", _fields(now))

    item = await store.read("item")
    assert item.is_new
    assert item.review_count == 0


@pytest.mark.asyncio
async def test_store_times_out_slow_writes(session_factory, monkeypatch: pytest.MonkeyPatch) -> None:
    now = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)

    async def slow_write(*_: object, **__: object) -> None:
        await asyncio.sleep(1)

    store = SqlReviewStateStore(session_factory, write_timeout=0.01)
    monkeypatch.setattr(store, "_write", slow_write)

    with pytest.raises(PersistenceError):
        await store.write_scheduling_fields("item", _fields(now))


@pytest.mark.asyncio
async def test_partial_edit_keeps_unset_fields(session_factory) -> None:
    async with session_factory() as session:
        async with session.begin():
            await create_item(
                session,
                ItemPayload(
                    question="q",
                    answer="a",
                    category="Grammar",
                    sub_category="Irregular",
                    starred=True,
                ),
                item_id="item",
            )
        async with session.begin():
            await update_item_content(session, "item", ItemPayload(question="q2", answer="a", category="C"))
        edited = await get_item(session, "item")

        async with session.begin():
            await update_item_content(session, "item", ItemPayload(sub_category="", starred=False))
        cleared = await get_item(session, "item")

    assert edited.question == "q2"
    assert edited.category == "C"
    assert edited.sub_category == "Irregular"
    assert edited.starred is True
    assert cleared.sub_category == "Uncategorized"
    assert cleared.starred is False
    assert cleared.question == "q2"


@pytest.mark.asyncio
async def test_failed_history_insert_leaves_schedule_unchanged(
    session_factory, monkeypatch: pytest.MonkeyPatch
) -> None:
    first = datetime(2026, 6, 10, 9, 0, tzinfo=timezone.utc)
    later = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)
    async with session_factory() as session:
        async with session.begin():
            await create_item(session, ItemPayload(question="q", answer="a"), item_id="item")

    store = SqlReviewStateStore(session_factory)
    await store.write_scheduling_fields("item", _fields(first))

    def review_without_quality(**values: object) -> ItemReview:
        values["quality"] = None
        return ItemReview(**values)

    # The UPDATE succeeds; the NOT NULL history row then fails on flush.
    monkeypatch.setattr(item_store, "ItemReview", review_without_quality)

    with pytest.raises(PersistenceError):
        await store.write_scheduling_fields("item", _fields(later, interval=10, count=2))

    item = await store.read("item")
    async with session_factory() as session:
        history = await session.scalar(select(func.count()).select_from(ItemReview))

    assert item.interval == 4
    assert item.review_count == 1
    assert item.last_review_at == first
    assert item.next_review_at == first + timedelta(days=4)
    assert history == 1


@pytest.mark.asyncio
async def test_list_review_times_by_owner(session_factory) -> None:
    monday = datetime(2026, 6, 15, 9, 0, tzinfo=timezone.utc)
    async with session_factory() as session:
        async with session.begin():
            await create_item(session, ItemPayload(question="1", answer="1", owner_id=1), item_id="mine")
            await create_item(session, ItemPayload(question="2", answer="2", owner_id=2), item_id="theirs")
            await write_scheduling_fields(session, "mine", _fields(monday - timedelta(days=2)))
            await write_scheduling_fields(session, "mine", _fields(monday, count=2))
            await write_scheduling_fields(session, "theirs", _fields(monday))

        mine = await list_review_times(session, owner_id=1)
        everything = await list_review_times(session)
        recent = await list_review_times(session, owner_id=1, since=monday - timedelta(hours=1))

    assert mine == [monday - timedelta(days=2), monday]
    assert len(everything) == 3
    assert recent == [monday]
