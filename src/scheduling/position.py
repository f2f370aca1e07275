"""Keep the focused item selected while the study list is recomputed."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Union

from .clock import ensure_aware
from .models import LearningItem


LOGGER = logging.getLogger(__name__)

DEFAULT_STALENESS = timedelta(seconds=5)


@dataclass(frozen=True, slots=True)
class Idle:
    """No restore is pending."""


@dataclass(frozen=True, slots=True)
class PendingRestore:
    """An edit is about to recompute the list; reselect ``item_id`` afterwards."""

    item_id: str
    fallback_index: int
    requested_at: datetime


RestoreState = Union[Idle, PendingRestore]

IDLE = Idle()


class PositionPreserver:
    """Two-state machine carrying the focused item across one recomputation."""

    def __init__(self, staleness: timedelta = DEFAULT_STALENESS) -> None:
        self._staleness = staleness
        self._state: RestoreState = IDLE

    @property
    def state(self) -> RestoreState:
        return self._state

    @property
    def staleness(self) -> timedelta:
        return self._staleness

    def request_restore(self, item_id: str, fallback_index: int, now: datetime) -> PendingRestore:
        """Remember the focused item right before an edit-driven recomputation."""
        pending = PendingRestore(
            item_id=item_id,
            fallback_index=fallback_index,
            requested_at=ensure_aware(now),
        )
        self._state = pending
        return pending

    def resolve(self, item_ids: Sequence[str], now: datetime) -> Optional[int]:
        """Consume the pending request against a recomputed list of item ids.

        Returns the index to select, or ``None`` when nothing should be
        restored. The preserver is always idle afterwards.
        """
        state = self._state
        self._state = IDLE

        if not isinstance(state, PendingRestore):
            return None

        if ensure_aware(now) - state.requested_at > self._staleness:
            LOGGER.debug("Discarding stale restore request for item %s.", state.item_id)
            return None

        if not item_ids:
            return None

        for index, item_id in enumerate(item_ids):
            if item_id == state.item_id:
                return index

        return min(max(state.fallback_index, 0), len(item_ids) - 1)


class StudyNavigator:
    """Current position within a filtered study list."""

    def __init__(
        self,
        items: Sequence[LearningItem] = (),
        preserver: Optional[PositionPreserver] = None,
    ) -> None:
        self._items: List[LearningItem] = list(items)
        self._index = 0
        self._preserver = preserver or PositionPreserver()

    @property
    def items(self) -> Sequence[LearningItem]:
        return tuple(self._items)

    @property
    def index(self) -> int:
        return self._index

    @property
    def preserver(self) -> PositionPreserver:
        return self._preserver

    def current(self) -> Optional[LearningItem]:
        if not self._items or self._index >= len(self._items):
            return None
        return self._items[self._index]

    def next(self) -> Optional[LearningItem]:
        if not self._items:
            return None
        self._index = 0 if self._index >= len(self._items) - 1 else self._index + 1
        return self.current()

    def previous(self) -> Optional[LearningItem]:
        if not self._items:
            return None
        self._index = len(self._items) - 1 if self._index <= 0 else self._index - 1
        return self.current()

    def begin_edit(self, now: datetime) -> Optional[PendingRestore]:
        """Arm a restore for the current item before its content is edited."""
        current = self.current()
        if current is None:
            return None
        return self._preserver.request_restore(current.id, self._index, now)

    def replace_items(self, items: Sequence[LearningItem], now: datetime) -> Optional[LearningItem]:
        """Swap in a recomputed list and pick the item to focus.

        A pending restore decides the position on its own; once it has gone
        stale the navigator keeps the current slot rather than chasing the
        edited item.
        """
        previous = self.current()
        had_pending = isinstance(self._preserver.state, PendingRestore)
        self._items = list(items)
        ids = [item.id for item in self._items]

        restored = self._preserver.resolve(ids, now)
        if restored is not None:
            self._index = restored
            return self.current()

        if not self._items:
            self._index = 0
            return None

        if not had_pending and previous is not None and previous.id in ids:
            self._index = ids.index(previous.id)
        elif self._index >= len(self._items):
            self._index = 0
        return self.current()
