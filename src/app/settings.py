"""Configuration helpers for the Review Scheduler runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.scheduling.models import (
    DEFAULT_FACTORS,
    DEFAULT_INITIAL_INTERVALS,
    DEFAULT_MAXIMUM_INTERVAL,
    Quality,
    SchedulingPolicy,
)


DEFAULT_CALENDAR_WINDOW_DAYS = 30
DEFAULT_RESTORE_STALENESS_SECONDS = 5.0
DEFAULT_REVIEW_WRITE_TIMEOUT_SECONDS = 10.0


def _read_int(name: str, default: int, minimum: int = 1) -> int:
    try:
        value = int(os.getenv(name, str(default)))
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer.") from exc
    if value < minimum:
        raise RuntimeError(f"{name} must be at least {minimum}.")
    return value


def _read_float(name: str, default: float) -> float:
    try:
        value = float(os.getenv(name, str(default)))
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number.") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be a positive number.")
    return value


@dataclass(frozen=True)
class AppSettings:
    """Strongly typed application settings loaded from environment variables."""

    app_name: str
    app_env: str
    log_level: str
    time_zone: ZoneInfo
    initial_intervals: dict[Quality, int]
    factors: dict[Quality, float]
    maximum_interval: int
    calendar_window_days: int
    restore_staleness_seconds: float
    review_write_timeout_seconds: float
    report_owner_id: Optional[int] = None

    @classmethod
    def from_env(cls) -> AppSettings:
        """Construct settings directly from environment variables."""
        app_name = os.getenv("APP_NAME", "Review Scheduler")
        app_env = os.getenv("APP_ENV", "development")
        log_level = os.getenv("LOG_LEVEL", "INFO")

        zone_name = os.getenv("SCHEDULER_TIME_ZONE")
        if not zone_name:
            raise RuntimeError(
                "SCHEDULER_TIME_ZONE environment variable is required to compute civil days."
            )
        try:
            time_zone = ZoneInfo(zone_name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise RuntimeError(f"SCHEDULER_TIME_ZONE {zone_name!r} is not a known time zone.") from exc

        initial_intervals = {
            quality: _read_int(f"INITIAL_{quality.name}_INTERVAL", DEFAULT_INITIAL_INTERVALS[quality.name])
            for quality in Quality
        }
        factors = {
            quality: _read_float(f"{quality.name}_FACTOR", DEFAULT_FACTORS[quality.name])
            for quality in Quality
        }

        raw_owner = os.getenv("REPORT_OWNER_ID")
        try:
            report_owner_id = int(raw_owner) if raw_owner else None
        except ValueError as exc:
            raise RuntimeError("REPORT_OWNER_ID must be an integer.") from exc

        return cls(
            app_name=app_name,
            app_env=app_env,
            log_level=log_level,
            time_zone=time_zone,
            initial_intervals=initial_intervals,
            factors=factors,
            maximum_interval=_read_int("MAXIMUM_INTERVAL", DEFAULT_MAXIMUM_INTERVAL),
            calendar_window_days=_read_int("CALENDAR_WINDOW_DAYS", DEFAULT_CALENDAR_WINDOW_DAYS),
            restore_staleness_seconds=_read_float(
                "RESTORE_STALENESS_SECONDS", DEFAULT_RESTORE_STALENESS_SECONDS
            ),
            review_write_timeout_seconds=_read_float(
                "REVIEW_WRITE_TIMEOUT_SECONDS", DEFAULT_REVIEW_WRITE_TIMEOUT_SECONDS
            ),
            report_owner_id=report_owner_id,
        )

    def to_policy(self) -> SchedulingPolicy:
        """Build the scheduling policy described by these settings."""
        return SchedulingPolicy(
            initial_intervals=self.initial_intervals,
            factors=self.factors,
            maximum_interval=self.maximum_interval,
            anchor_time_zone=self.time_zone,
        )
