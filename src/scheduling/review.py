"""Review submission against a persistent review state store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Protocol

from .errors import InvalidQualityError, PersistenceError
from .models import LearningItem, Quality, SchedulingFields, SchedulingPolicy
from .srs import ReviewSchedule, calculate_next_schedule


LOGGER = logging.getLogger(__name__)


class ReviewStateStore(Protocol):
    """Persistence collaborator holding each item's scheduling fields."""

    async def read(self, item_id: str) -> LearningItem:
        """Return the item or raise ``ItemNotFoundError``."""

    async def write_scheduling_fields(self, item_id: str, fields: SchedulingFields) -> None:
        """Atomically persist all scheduling fields or raise ``PersistenceError``."""


class ReviewRequestState(Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"


class ReviewStatus(Enum):
    APPLIED = "applied"
    DROPPED = "dropped"


@dataclass(frozen=True, slots=True)
class ReviewResult:
    """Outcome of a review submission."""

    status: ReviewStatus
    item: Optional[LearningItem] = None
    schedule: Optional[ReviewSchedule] = None

    @property
    def applied(self) -> bool:
        return self.status is ReviewStatus.APPLIED


DROPPED = ReviewResult(status=ReviewStatus.DROPPED)


class ReviewSession:
    """Single-flight review submission for one interaction surface.

    While a submission is outstanding further submissions are dropped and
    reported as ``ReviewStatus.DROPPED``. Separate sessions are independent.
    """

    def __init__(self, store: ReviewStateStore, policy: SchedulingPolicy) -> None:
        self._store = store
        self._policy = policy
        self._state = ReviewRequestState.IDLE

    @property
    def state(self) -> ReviewRequestState:
        return self._state

    @property
    def policy(self) -> SchedulingPolicy:
        return self._policy

    async def submit(
        self,
        item_id: str,
        quality: object,
        now: Optional[datetime] = None,
    ) -> ReviewResult:
        """Review ``item_id`` and persist its new schedule.

        Raises ``InvalidQualityError`` for unknown ratings, ``ItemNotFoundError``
        when the store has no such item and ``PersistenceError`` when the write
        fails. In every error case the item keeps its previous schedule.
        """
        if self._state is ReviewRequestState.IN_FLIGHT:
            LOGGER.warning("Dropping review of item %s: another review is in flight.", item_id)
            return DROPPED

        try:
            rating = Quality.parse(quality)
        except InvalidQualityError:
            LOGGER.warning("Rejected review of item %s with rating %r.", item_id, quality)
            raise

        if now is None:
            now = datetime.now(timezone.utc)

        self._state = ReviewRequestState.IN_FLIGHT
        try:
            item = await self._store.read(item_id)
            schedule = calculate_next_schedule(item, rating, self._policy, now)
            fields = schedule.to_fields(rating, now)
            try:
                await self._store.write_scheduling_fields(item_id, fields)
            except PersistenceError:
                LOGGER.warning("Review of item %s was not applied.", item_id)
                raise
        finally:
            self._state = ReviewRequestState.IDLE

        LOGGER.info(
            "Reviewed item %s as %s; next review in %d day(s) at %s.",
            item_id,
            rating.name,
            schedule.days_to_add,
            schedule.next_review_at.isoformat(),
        )
        return ReviewResult(
            status=ReviewStatus.APPLIED,
            item=item.with_schedule(fields),
            schedule=schedule,
        )
