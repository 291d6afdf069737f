"""Seed a demo restaurant, two workers and a weekly Server series, then print bearer tokens for trying the API."""
import asyncio
import sys
from pathlib import Path
from datetime import date, time, timedelta
from decimal import Decimal

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from app import crud
from app.database import AsyncSessionLocal, Base, engine
from app.schemas import RestaurantCreate, WorkerProfileCreate, ShiftCreate
from app.security import create_access_token

OWNER_EMAIL = "owner@demo-bistro.test"
WORKERS = [("ana@demo-workers.test", "Ana Lopez"), ("ben@demo-workers.test", "Ben Carter")]


async def run():
    from app import models  # noqa: F401
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        rest = await crud.get_restaurant_by_owner(db, OWNER_EMAIL)
        if rest is None:
            rest = await crud.create_restaurant(db, OWNER_EMAIL, RestaurantCreate(name="Demo Bistro", address="1 Main St"))
        for email, name in WORKERS:
            if await crud.get_worker_by_email(db, email) is None:
                await crud.create_worker_profile(db, email, WorkerProfileCreate(full_name=name))
        # next Monday, weekly for 12 weeks
        today = date.today()
        monday = today + timedelta(days=7 - today.weekday())
        created = await crud.create_shift(db, rest.id, ShiftCreate(
            job_type="Server",
            shift_date=monday,
            start_time=time(9, 0),
            end_time=time(17, 0),
            hourly_rate=Decimal("15.00"),
            allow_bidding=True,
            is_recurring=True,
            recurring_pattern="weekly",
        ))
        await db.commit()

    print(f"Restaurant {rest.id} with {len(created)} weekly Server shifts from {monday.isoformat()}")
    print(f"{OWNER_EMAIL}: {create_access_token(OWNER_EMAIL, 'restaurant_owner')}")
    for email, _ in WORKERS:
        print(f"{email}: {create_access_token(email, 'worker')}")


if __name__ == "__main__":
    asyncio.run(run())
