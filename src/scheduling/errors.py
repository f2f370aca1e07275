"""Error kinds raised by the scheduling engine."""

from __future__ import annotations


class SchedulingError(Exception):
    """Base class for scheduling engine failures."""


class InvalidQualityError(SchedulingError, ValueError):
    """Raised when a review is submitted with an unknown quality rating."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Unknown quality rating: {value!r}.")
        self.value = value


class ItemNotFoundError(SchedulingError, LookupError):
    """Raised when the review state store has no item with the requested id."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"Learning item {item_id!r} was not found.")
        self.item_id = item_id


class PersistenceError(SchedulingError):
    """Raised when scheduling fields could not be written; the review is not applied."""
