"""Helpers for working with learning item persistence."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.scheduling.clock import ensure_aware
from src.scheduling.errors import ItemNotFoundError, PersistenceError
from src.scheduling.models import LearningItem, Quality, SchedulingFields

from . import ItemReview, LearningItemRecord


LOGGER = logging.getLogger(__name__)

DEFAULT_WRITE_TIMEOUT_SECONDS = 10.0

_CONTENT_FIELDS = ("question", "answer", "category", "sub_category", "starred")


def _strip(value: Optional[str]) -> Optional[str]:
    return value.strip() if isinstance(value, str) else value


@dataclass(slots=True)
class ItemPayload:
    """Editable content of a learning item.

    ``None`` means "leave as is" when the payload is applied as an edit; an
    empty category or sub-category clears it back to ``"Uncategorized"``.
    """

    question: Optional[str] = None
    answer: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    starred: Optional[bool] = None
    owner_id: Optional[int] = None

    def normalized(self) -> "ItemPayload":
        """Return a payload with leading/trailing whitespace stripped."""
        return ItemPayload(
            question=_strip(self.question),
            answer=_strip(self.answer),
            category=_strip(self.category),
            sub_category=_strip(self.sub_category),
            starred=self.starred,
            owner_id=self.owner_id,
        )


def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return ensure_aware(value).astimezone(timezone.utc)


def _from_db(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return ensure_aware(value)


def record_to_item(record: LearningItemRecord) -> LearningItem:
    """Convert an ORM row into the scheduler's item snapshot."""
    return LearningItem(
        id=record.id,
        category=record.category,
        sub_category=record.sub_category,
        interval=record.interval,
        review_count=record.review_count or 0,
        last_review_at=_from_db(record.last_review_at),
        next_review_at=_from_db(record.next_review_at),
        last_quality=Quality(record.last_quality) if record.last_quality is not None else None,
        question=record.question or "",
        answer=record.answer or "",
        starred=bool(record.starred),
        active=bool(record.is_active),
    )


async def _get_record(session: AsyncSession, item_id: str) -> LearningItemRecord:
    record = await session.get(LearningItemRecord, item_id)
    if record is None:
        raise ItemNotFoundError(item_id)
    return record


async def create_item(
    session: AsyncSession,
    payload: ItemPayload,
    item_id: Optional[str] = None,
) -> LearningItemRecord:
    """Store a new, never reviewed item."""
    normalized = payload.normalized()
    record = LearningItemRecord(
        id=item_id or uuid.uuid4().hex,
        owner_id=normalized.owner_id,
        question=normalized.question or "",
        answer=normalized.answer or "",
        category=normalized.category or None,
        sub_category=normalized.sub_category or None,
        starred=bool(normalized.starred),
        is_active=True,
        interval=None,
        review_count=0,
        last_review_at=None,
        next_review_at=None,
        last_quality=None,
    )
    session.add(record)
    await session.flush()
    return record


async def update_item_content(
    session: AsyncSession,
    item_id: str,
    payload: ItemPayload,
) -> LearningItemRecord:
    """Apply the fields set on ``payload``; scheduling fields are left untouched."""
    normalized = payload.normalized()
    record = await _get_record(session, item_id)

    has_changes = False
    for attribute in _CONTENT_FIELDS:
        value = getattr(normalized, attribute)
        if value is None:
            continue
        if attribute in ("category", "sub_category"):
            value = value or None
        if getattr(record, attribute) != value:
            setattr(record, attribute, value)
            has_changes = True

    if has_changes:
        record.updated_at = datetime.now(timezone.utc)
        await session.flush()
    return record


async def set_item_active(session: AsyncSession, item_id: str, active: bool) -> LearningItemRecord:
    """Deactivate or reactivate an item without losing its schedule."""
    record = await _get_record(session, item_id)
    if record.is_active != active:
        record.is_active = active
        record.updated_at = datetime.now(timezone.utc)
        await session.flush()
    return record


async def toggle_starred(session: AsyncSession, item_id: str) -> bool:
    record = await _get_record(session, item_id)
    record.starred = not record.starred
    record.updated_at = datetime.now(timezone.utc)
    await session.flush()
    return record.starred


async def delete_item(session: AsyncSession, item_id: str) -> None:
    record = await _get_record(session, item_id)
    await session.delete(record)
    await session.flush()


async def get_item(session: AsyncSession, item_id: str) -> Optional[LearningItem]:
    record = await session.get(LearningItemRecord, item_id)
    if record is None:
        return None
    return record_to_item(record)


async def list_items(
    session: AsyncSession,
    owner_id: Optional[int] = None,
    include_inactive: bool = False,
) -> list[LearningItem]:
    """Return a snapshot of stored items ordered by id."""
    stmt = select(LearningItemRecord).order_by(LearningItemRecord.id)
    if owner_id is not None:
        stmt = stmt.where(LearningItemRecord.owner_id == owner_id)
    if not include_inactive:
        stmt = stmt.where(LearningItemRecord.is_active.is_(True))
    result = await session.execute(stmt)
    return [record_to_item(record) for record in result.scalars().all()]


async def list_review_times(
    session: AsyncSession,
    owner_id: Optional[int] = None,
    since: Optional[datetime] = None,
) -> list[datetime]:
    """Return the timestamps of logged reviews, oldest first."""
    stmt = select(ItemReview.reviewed_at).order_by(ItemReview.reviewed_at, ItemReview.id)
    if owner_id is not None:
        stmt = stmt.join(LearningItemRecord, ItemReview.item_id == LearningItemRecord.id).where(
            LearningItemRecord.owner_id == owner_id
        )
    if since is not None:
        stmt = stmt.where(ItemReview.reviewed_at >= _to_utc(since))
    result = await session.execute(stmt)
    return [ensure_aware(reviewed_at) for reviewed_at in result.scalars().all()]


async def write_scheduling_fields(
    session: AsyncSession,
    item_id: str,
    fields: SchedulingFields,
) -> None:
    """Persist a review outcome in a single UPDATE plus its history row."""
    stmt = (
        update(LearningItemRecord)
        .where(LearningItemRecord.id == item_id)
        .values(
            interval=fields.interval,
            next_review_at=_to_utc(fields.next_review_at),
            last_review_at=_to_utc(fields.last_review_at),
            last_quality=int(fields.last_quality),
            review_count=fields.review_count,
            updated_at=_to_utc(fields.last_review_at),
        )
    )
    result = await session.execute(stmt)
    if result.rowcount == 0:
        raise ItemNotFoundError(item_id)

    session.add(
        ItemReview(
            item_id=item_id,
            quality=int(fields.last_quality),
            scheduled_days=fields.interval,
            reviewed_at=_to_utc(fields.last_review_at),
        )
    )
    await session.flush()


class SqlReviewStateStore:
    """Review state store backed by the application's SQLAlchemy database."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        write_timeout: float = DEFAULT_WRITE_TIMEOUT_SECONDS,
    ) -> None:
        self._session_factory = session_factory
        self._write_timeout = write_timeout

    async def read(self, item_id: str) -> LearningItem:
        try:
            async with self._session_factory() as session:
                item = await get_item(session, item_id)
        except SQLAlchemyError as exc:
            LOGGER.exception("Failed to read learning item %s.", item_id)
            raise PersistenceError(f"Could not read learning item {item_id!r}.") from exc
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    async def write_scheduling_fields(self, item_id: str, fields: SchedulingFields) -> None:
        try:
            await asyncio.wait_for(self._write(item_id, fields), timeout=self._write_timeout)
        except asyncio.TimeoutError as exc:
            LOGGER.exception("Timed out writing schedule for learning item %s.", item_id)
            raise PersistenceError(f"Timed out writing schedule for {item_id!r}.") from exc
        except SQLAlchemyError as exc:
            LOGGER.exception("Failed to write schedule for learning item %s.", item_id)
            raise PersistenceError(f"Could not write schedule for {item_id!r}.") from exc

    async def _write(self, item_id: str, fields: SchedulingFields) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await write_scheduling_fields(session, item_id, fields)
