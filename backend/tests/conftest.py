"""Shared fixtures: in-memory SQLite (aiosqlite + StaticPool) and a few seed helpers."""
from datetime import date, time
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base
from app.models import Restaurant, WorkerProfile, Shift, ShiftStatus, UserRole
from app.policies import SessionContext


@pytest.fixture
async def async_engine_and_session():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield engine, async_session
    await engine.dispose()


async def seed_restaurant(db, email="owner@bistro.test", name="Bistro"):
    rest = Restaurant(name=name, owner_email=email, address="1 Main St")
    db.add(rest)
    await db.flush()
    return rest


async def seed_worker(db, email="ana@workers.test", full_name="Ana"):
    w = WorkerProfile(user_email=email, full_name=full_name)
    db.add(w)
    await db.flush()
    return w


async def seed_shift(db, restaurant_id, shift_date=date(2024, 6, 10), allow_bidding=True, **kw):
    values = dict(
        restaurant_id=restaurant_id,
        job_type="Server",
        shift_date=shift_date,
        start_time=time(9, 0),
        end_time=time(17, 0),
        hourly_rate=Decimal("15.00"),
        status=ShiftStatus.open,
        allow_bidding=allow_bidding,
    )
    values.update(kw)
    sh = Shift(**values)
    db.add(sh)
    await db.flush()
    return sh


def owner_ctx(rest) -> SessionContext:
    return SessionContext(email=rest.owner_email, role=UserRole.restaurant_owner, restaurant_id=rest.id, display_name=rest.name)


def worker_ctx(w) -> SessionContext:
    return SessionContext(email=w.user_email, role=UserRole.worker, worker_id=w.id, display_name=w.full_name)
