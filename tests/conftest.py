from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from src.db import Base
from src.scheduling import SchedulingPolicy


ZONE = ZoneInfo("America/New_York")


@pytest_asyncio.fixture
async def session_factory() -> async_sessionmaker:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    try:
        yield factory
    finally:
        await engine.dispose()


@pytest.fixture
def zone() -> ZoneInfo:
    return ZONE


@pytest.fixture
def policy() -> SchedulingPolicy:
    return SchedulingPolicy.default(ZONE)


@pytest.fixture
def now() -> datetime:
    """Mid-afternoon on a Monday in the anchor zone, away from DST changes."""
    return datetime(2026, 6, 15, 14, 30, tzinfo=ZONE)
