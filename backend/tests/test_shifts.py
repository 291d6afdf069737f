"""
Shift CRUD: recurring series, edit / cancel rules, completion sweep, shift templates.
"""
from datetime import date, time, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from app import crud
from app.crud import InvalidTimeWindowError, ShiftNotCancellableError, ShiftNotEditableError
from app.models import Shift, ShiftStatus, DayOfWeek, TemplateShiftType
from app.schemas import ShiftCreate, ShiftUpdate, ShiftTemplateCreate, ShiftTemplateUpdate, ShiftTemplateApply
from app.services.completion_job import run_completion_sweep
from conftest import seed_restaurant, seed_worker, seed_shift


def _shift_in(**kw):
    values = dict(
        job_type="Bartender",
        shift_date=date(2024, 6, 10),
        start_time=time(18, 0),
        end_time=time(2, 0),
        hourly_rate=Decimal("20.00"),
        allow_bidding=True,
    )
    values.update(kw)
    return ShiftCreate(**values)


@pytest.mark.asyncio
async def test_create_single_shift(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        created = await crud.create_shift(db, rest.id, _shift_in())
        assert len(created) == 1
        sh = created[0]
        assert sh.status == ShiftStatus.open
        assert sh.parent_shift_id is None
        assert sh.bids_count == 0
        assert sh.version == 1


@pytest.mark.asyncio
async def test_weekly_series_links_to_first_shift(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        created = await crud.create_shift(db, rest.id, _shift_in(is_recurring=True, recurring_pattern="weekly"))
        await db.commit()
        assert len(created) == 12
        parent = created[0]
        assert parent.parent_shift_id is None
        assert all(s.parent_shift_id == parent.id for s in created[1:])
        assert [s.shift_date for s in created] == [date(2024, 6, 10) + timedelta(days=7 * i) for i in range(12)]

    async with async_session() as db:
        listed = await crud.list_shifts(db, rest.id, date_from=date(2024, 6, 10), date_to=date(2024, 6, 30))
        assert [s.shift_date for s in listed] == [date(2024, 6, 10), date(2024, 6, 17), date(2024, 6, 24)]


@pytest.mark.asyncio
async def test_update_only_before_assignment(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        sh = await seed_shift(db, rest.id)
        sh = await crud.update_shift(db, sh, ShiftUpdate(hourly_rate=Decimal("17.50"), status=ShiftStatus.bidding))
        assert sh.hourly_rate == Decimal("17.50")
        assert sh.status == ShiftStatus.bidding
        assert sh.version == 2

        taken = await seed_shift(db, rest.id, status=ShiftStatus.assigned, assigned_worker_id=ana.id, assigned_worker_name="Ana")
        with pytest.raises(ShiftNotEditableError):
            await crud.update_shift(db, taken, ShiftUpdate(notes="late"))


def test_manual_status_limited_to_open_or_bidding():
    with pytest.raises(ValueError):
        ShiftUpdate(status=ShiftStatus.assigned)


def test_null_only_clears_nullable_columns():
    for field in ("job_type", "status", "start_time", "shift_date", "allow_bidding"):
        with pytest.raises(ValueError, match=f"{field} cannot be null"):
            ShiftUpdate.model_validate({field: None})
    cleared = ShiftUpdate.model_validate({"hourly_rate": None, "notes": None})
    assert cleared.model_dump(exclude_unset=True) == {"hourly_rate": None, "notes": None}

    for field in ("template_name", "days_of_week", "start_time"):
        with pytest.raises(ValueError, match=f"{field} cannot be null"):
            ShiftTemplateUpdate.model_validate({field: None})
    assert ShiftTemplateUpdate.model_validate({"notes": None}).notes is None


@pytest.mark.asyncio
async def test_cancel_only_open(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        sh = await seed_shift(db, rest.id)
        shift_id = sh.id
        await crud.cancel_shift(db, sh)
        assert await crud.get_shift(db, shift_id) is None

        taken = await seed_shift(db, rest.id, status=ShiftStatus.assigned, assigned_worker_id=ana.id, assigned_worker_name="Ana")
        with pytest.raises(ShiftNotCancellableError):
            await crud.cancel_shift(db, taken)


@pytest.mark.asyncio
async def test_open_board_and_worker_shifts(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        board = await seed_shift(db, rest.id)
        bidding = await seed_shift(db, rest.id, status=ShiftStatus.bidding)
        await seed_shift(db, rest.id, allow_bidding=False)
        mine = await seed_shift(db, rest.id, status=ShiftStatus.assigned, assigned_worker_id=ana.id, assigned_worker_name="Ana")
        open_ids = {s.id for s in await crud.list_open_shifts(db)}
        assert open_ids == {board.id, bidding.id}
        assert [s.id for s in await crud.list_worker_shifts(db, ana.id)] == [mine.id]


@pytest.mark.asyncio
async def test_completion_sweep_marks_past_assigned(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        past = await seed_shift(db, rest.id, shift_date=date(2024, 6, 9), status=ShiftStatus.assigned, assigned_worker_id=ana.id, assigned_worker_name="Ana")
        today = await seed_shift(db, rest.id, shift_date=date(2024, 6, 10), status=ShiftStatus.assigned, assigned_worker_id=ana.id, assigned_worker_name="Ana")
        still_open = await seed_shift(db, rest.id, shift_date=date(2024, 6, 1))
        await db.commit()
        ids = (past.id, today.id, still_open.id)

    n = await run_completion_sweep(today=date(2024, 6, 10), session_factory=async_session)
    assert n == 1

    async with async_session() as db:
        r = await db.execute(select(Shift).where(Shift.id.in_(ids)))
        by_id = {s.id: s for s in r.scalars().all()}
        assert by_id[ids[0]].status == ShiftStatus.completed
        assert by_id[ids[0]].assigned_worker_id == ana.id
        assert by_id[ids[1]].status == ShiftStatus.assigned
        assert by_id[ids[2]].status == ShiftStatus.open


# ---------- shift templates ----------
def _template_in(**kw):
    values = dict(
        template_name="Weekend brunch",
        job_type="Server",
        shift_type=TemplateShiftType.morning,
        start_time=time(8, 0),
        end_time=time(14, 0),
        days_of_week=[DayOfWeek.saturday, DayOfWeek.sunday, DayOfWeek.saturday],
        positions_needed=2,
    )
    values.update(kw)
    return ShiftTemplateCreate(**values)


@pytest.mark.asyncio
async def test_template_crud_and_duplicate(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        t = await crud.create_template(db, rest.id, _template_in())
        assert t.days_of_week == ["saturday", "sunday"]
        t = await crud.update_template(db, t, ShiftTemplateUpdate(days_of_week=[DayOfWeek.friday], positions_needed=1))
        assert t.days_of_week == ["friday"]
        copy = await crud.duplicate_template(db, t)
        assert copy.id != t.id
        assert copy.template_name == "Weekend brunch (Copy)"
        assert copy.days_of_week == ["friday"]
        assert len(await crud.list_templates(db, rest.id)) == 2
        await crud.delete_template(db, copy)
        assert len(await crud.list_templates(db, rest.id)) == 1


@pytest.mark.asyncio
async def test_apply_template_creates_open_shifts_for_week(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        t = await crud.create_template(db, rest.id, _template_in())
        created = await crud.apply_template(db, t, ShiftTemplateApply(week_of=date(2024, 6, 12), hourly_rate=Decimal("16"), allow_bidding=True))
        assert len(created) == 4
        assert sorted({s.shift_date for s in created}) == [date(2024, 6, 15), date(2024, 6, 16)]
        assert all(s.status == ShiftStatus.open and s.allow_bidding for s in created)
        assert all(s.start_time == time(8, 0) and s.end_time == time(14, 0) for s in created)


@pytest.mark.asyncio
async def test_update_rejects_equal_start_and_end(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        sh = await seed_shift(db, rest.id)
        with pytest.raises(InvalidTimeWindowError):
            await crud.update_shift(db, sh, ShiftUpdate(end_time=time(9, 0)))
        t = await crud.create_template(db, rest.id, _template_in())
        with pytest.raises(InvalidTimeWindowError):
            await crud.update_template(db, t, ShiftTemplateUpdate(end_time=t.start_time))
