"""Bootstrap logic for running the review scheduler."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.app.settings import AppSettings
from src.db import get_session_factory, run_migrations_if_needed
from src.db.items import SqlReviewStateStore, list_items, list_review_times
from src.scheduling import (
    PositionPreserver,
    ReviewSession,
    ScheduleOverview,
    SchedulingPolicy,
    StudyNavigator,
)


LOGGER = logging.getLogger(__name__)


def _configure_logging(log_level: str) -> None:
    """Set up project-wide logging configuration."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        level=log_level,
    )


@dataclass(slots=True)
class SchedulerRuntime:
    """Wired collaborators for one running scheduler."""

    settings: AppSettings
    policy: SchedulingPolicy
    session_factory: async_sessionmaker[AsyncSession]
    store: SqlReviewStateStore
    overview: ScheduleOverview

    def new_review_session(self) -> ReviewSession:
        """Return a single-flight review surface bound to the shared store."""
        return ReviewSession(self.store, self.policy)

    def new_navigator(self) -> StudyNavigator:
        staleness = timedelta(seconds=self.settings.restore_staleness_seconds)
        return StudyNavigator(preserver=PositionPreserver(staleness=staleness))


def build_runtime(
    settings: AppSettings,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> SchedulerRuntime:
    """Configure logging, apply migrations and wire the scheduler components."""
    _configure_logging(settings.log_level)

    if session_factory is None:
        try:
            run_migrations_if_needed()
        except Exception:
            LOGGER.exception("Database migrations failed. Aborting startup.")
            raise
        session_factory = get_session_factory()

    policy = settings.to_policy()
    store = SqlReviewStateStore(
        session_factory,
        write_timeout=settings.review_write_timeout_seconds,
    )
    overview = ScheduleOverview(policy, window_days=settings.calendar_window_days)
    return SchedulerRuntime(
        settings=settings,
        policy=policy,
        session_factory=session_factory,
        store=store,
        overview=overview,
    )


async def log_overview(
    runtime: SchedulerRuntime,
    owner_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> None:
    """Log the due calendar, category summary and study streak for the stored items."""
    if now is None:
        now = datetime.now(timezone.utc)

    async with runtime.session_factory() as session:
        items = await list_items(session, owner_id=owner_id)
        review_times = await list_review_times(session, owner_id=owner_id)

    evaluation = runtime.overview.evaluate(items, None, True, now)
    LOGGER.info(
        "%d of %d item(s) due today, %d reviewed, %d remaining.",
        evaluation.due_count,
        evaluation.total_count,
        evaluation.reviewed_count,
        evaluation.remaining_count,
    )
    for day in runtime.overview.calendar(items, now):
        if day.due_count:
            LOGGER.info("%s: %d due", day.date.isoformat(), day.due_count)
    for category in runtime.overview.categories(items, True, "most-due", now):
        LOGGER.info("Category %s: %d due", category.name, category.count)

    activity = runtime.overview.activity(review_times, now)
    LOGGER.info(
        "Study streak: %d day(s), longest %d day(s), %d review(s) logged.",
        activity.current_streak,
        activity.longest_streak,
        activity.total_reviews,
    )


def run_report(settings: AppSettings, owner_id: Optional[int] = None) -> None:
    """Start the scheduler and report today's workload."""
    runtime = build_runtime(settings)
    print(f"{settings.app_name} is running in {settings.app_env} mode.")
    LOGGER.info(
        "Using anchor time zone %s for %s in %s mode.",
        settings.time_zone.key,
        settings.app_name,
        settings.app_env,
    )
    asyncio.run(log_overview(runtime, owner_id=owner_id))
