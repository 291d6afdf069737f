"""CRUD operations - restaurants, worker profiles, shifts, availability, shift templates.
Workflow transitions (bids, swaps, time-off) live in app/services and build on these."""
from datetime import date, timedelta
from typing import Optional, List, Dict, Any
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import (
    Restaurant, WorkerProfile, Shift, AvailabilityBlock, ShiftTemplate,
    ShiftStatus, BIDDABLE_SHIFT_STATUSES, WEEKDAYS, DayOfWeek,
)
from app.schemas import (
    RestaurantCreate, WorkerProfileCreate, ShiftCreate, ShiftUpdate,
    AvailabilityCreate, AvailabilityUpdate, ShiftTemplateCreate, ShiftTemplateUpdate, ShiftTemplateApply,
)
from app.services.recurrence import expand_recurring_shift
from app.services.calendar_view import week_start


# ---------- error kinds (mapped to HTTP status in app.main) ----------
class NotFoundError(LookupError):
    """Record does not exist (404)"""
    pass


class ForbiddenError(PermissionError):
    """Caller's role or ownership does not allow the action (403)"""
    pass


class ConflictError(ValueError):
    """Action conflicts with the record's current state (409)"""
    pass


class UnprocessableError(ValueError):
    """Values are well-formed but inconsistent with each other or with the stored record (422)"""
    pass


class InvalidTimeWindowError(UnprocessableError):
    """start_time / end_time combination is not allowed"""
    pass


class ShiftNotCancellableError(ConflictError):
    """Only open shifts can be cancelled"""
    pass


class ShiftNotEditableError(ConflictError):
    """Assigned or completed shifts can no longer be edited"""
    pass


class DuplicateProfileError(ConflictError):
    """The login already has a restaurant or worker profile"""
    pass


# ---------- restaurants / worker profiles ----------
async def get_restaurant(db: AsyncSession, restaurant_id: int) -> Optional[Restaurant]:
    r = await db.execute(select(Restaurant).where(Restaurant.id == restaurant_id))
    return r.scalar_one_or_none()


async def get_restaurant_by_owner(db: AsyncSession, owner_email: str) -> Optional[Restaurant]:
    r = await db.execute(select(Restaurant).where(Restaurant.owner_email == owner_email))
    return r.scalar_one_or_none()


async def create_restaurant(db: AsyncSession, owner_email: str, data: RestaurantCreate) -> Restaurant:
    if await get_restaurant_by_owner(db, owner_email):
        raise DuplicateProfileError("This account already owns a restaurant")
    rest = Restaurant(owner_email=owner_email, **data.model_dump())
    db.add(rest)
    await db.flush()
    await db.refresh(rest)
    return rest


async def get_worker(db: AsyncSession, worker_id: int) -> Optional[WorkerProfile]:
    r = await db.execute(select(WorkerProfile).where(WorkerProfile.id == worker_id))
    return r.scalar_one_or_none()


async def get_worker_by_email(db: AsyncSession, user_email: str) -> Optional[WorkerProfile]:
    r = await db.execute(select(WorkerProfile).where(WorkerProfile.user_email == user_email))
    return r.scalar_one_or_none()


async def create_worker_profile(db: AsyncSession, user_email: str, data: WorkerProfileCreate) -> WorkerProfile:
    if await get_worker_by_email(db, user_email):
        raise DuplicateProfileError("This account already has a worker profile")
    w = WorkerProfile(user_email=user_email, **data.model_dump())
    db.add(w)
    await db.flush()
    await db.refresh(w)
    return w


# ---------- shifts ----------
async def get_shift(db: AsyncSession, shift_id: int) -> Optional[Shift]:
    r = await db.execute(select(Shift).where(Shift.id == shift_id))
    return r.scalar_one_or_none()


async def list_shifts(
    db: AsyncSession,
    restaurant_id: int,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    status: Optional[ShiftStatus] = None,
) -> List[Shift]:
    q = select(Shift).where(Shift.restaurant_id == restaurant_id).order_by(Shift.shift_date, Shift.start_time, Shift.id)
    if date_from is not None:
        q = q.where(Shift.shift_date >= date_from)
    if date_to is not None:
        q = q.where(Shift.shift_date <= date_to)
    if status is not None:
        q = q.where(Shift.status == status)
    r = await db.execute(q)
    return list(r.scalars().all())


async def list_open_shifts(db: AsyncSession, date_from: Optional[date] = None) -> List[Shift]:
    """Shifts workers can bid on: bidding enabled, not yet assigned."""
    q = (
        select(Shift)
        .where(Shift.allow_bidding.is_(True), Shift.status.in_(BIDDABLE_SHIFT_STATUSES))
        .order_by(Shift.shift_date, Shift.start_time, Shift.id)
    )
    if date_from is not None:
        q = q.where(Shift.shift_date >= date_from)
    r = await db.execute(q)
    return list(r.scalars().all())


async def list_worker_shifts(
    db: AsyncSession,
    worker_id: int,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[Shift]:
    q = select(Shift).where(Shift.assigned_worker_id == worker_id).order_by(Shift.shift_date, Shift.start_time)
    if date_from is not None:
        q = q.where(Shift.shift_date >= date_from)
    if date_to is not None:
        q = q.where(Shift.shift_date <= date_to)
    r = await db.execute(q)
    return list(r.scalars().all())


async def bulk_create_shifts(db: AsyncSession, restaurant_id: int, payloads: List[Dict[str, Any]]) -> List[Shift]:
    """Insert a series inside the caller's transaction; shifts after the first point at it through parent_shift_id."""
    if not payloads:
        return []
    first = Shift(restaurant_id=restaurant_id, status=ShiftStatus.open, **payloads[0])
    db.add(first)
    await db.flush()
    rest = [
        Shift(restaurant_id=restaurant_id, status=ShiftStatus.open, parent_shift_id=first.id, **p)
        for p in payloads[1:]
    ]
    db.add_all(rest)
    await db.flush()
    created = [first] + rest
    for sh in created:
        await db.refresh(sh)
    return created


async def create_shift(db: AsyncSession, restaurant_id: int, data: ShiftCreate) -> List[Shift]:
    """Create one shift, or the whole recurring series (all or nothing)."""
    payloads = expand_recurring_shift(data.model_dump())
    return await bulk_create_shifts(db, restaurant_id, payloads)


async def update_shift(db: AsyncSession, sh: Shift, data: ShiftUpdate) -> Shift:
    if sh.status not in BIDDABLE_SHIFT_STATUSES:
        raise ShiftNotEditableError(f"Shift is {sh.status.value} and can no longer be edited")
    update_data = data.model_dump(exclude_unset=True)
    start = update_data.get("start_time", sh.start_time)
    end = update_data.get("end_time", sh.end_time)
    if start == end:
        raise InvalidTimeWindowError("start_time and end_time must differ")
    for k, v in update_data.items():
        setattr(sh, k, v)
    await db.flush()
    await db.refresh(sh)
    return sh


async def cancel_shift(db: AsyncSession, sh: Shift) -> None:
    """Cancelling deletes the shift; only while it is still open."""
    if sh.status != ShiftStatus.open:
        raise ShiftNotCancellableError(f"Only open shifts can be cancelled (this one is {sh.status.value})")
    await db.delete(sh)
    await db.flush()


async def complete_past_shifts(db: AsyncSession, today: Optional[date] = None) -> int:
    """Assigned shifts dated before today become completed; returns how many changed."""
    today = today or date.today()
    r = await db.execute(
        update(Shift)
        .where(Shift.status == ShiftStatus.assigned, Shift.shift_date < today)
        .values(status=ShiftStatus.completed, version=Shift.version + 1)
        .execution_options(synchronize_session=False)
    )
    return r.rowcount or 0


# ---------- availability blocks ----------
async def list_availability(db: AsyncSession, worker_id: int) -> List[AvailabilityBlock]:
    r = await db.execute(
        select(AvailabilityBlock)
        .where(AvailabilityBlock.worker_id == worker_id)
        .order_by(AvailabilityBlock.start_time, AvailabilityBlock.id)
    )
    blocks = list(r.scalars().all())
    blocks.sort(key=lambda b: WEEKDAYS.index(b.day_of_week))
    return blocks


async def get_availability(db: AsyncSession, block_id: int) -> Optional[AvailabilityBlock]:
    r = await db.execute(select(AvailabilityBlock).where(AvailabilityBlock.id == block_id))
    return r.scalar_one_or_none()


async def create_availability(db: AsyncSession, worker_id: int, data: AvailabilityCreate) -> AvailabilityBlock:
    b = AvailabilityBlock(worker_id=worker_id, **data.model_dump())
    db.add(b)
    await db.flush()
    await db.refresh(b)
    return b


async def update_availability(db: AsyncSession, b: AvailabilityBlock, data: AvailabilityUpdate) -> AvailabilityBlock:
    update_data = data.model_dump(exclude_unset=True)
    start = update_data.get("start_time", b.start_time)
    end = update_data.get("end_time", b.end_time)
    if end <= start:
        raise InvalidTimeWindowError("end_time must be after start_time")
    for k, v in update_data.items():
        setattr(b, k, v)
    await db.flush()
    await db.refresh(b)
    return b


async def delete_availability(db: AsyncSession, b: AvailabilityBlock) -> None:
    await db.delete(b)
    await db.flush()


def group_availability_by_day(blocks: List[AvailabilityBlock]) -> List[Dict[str, Any]]:
    """Monday..Sunday, only days that have at least one block."""
    by_day: Dict[DayOfWeek, List[AvailabilityBlock]] = {}
    for b in blocks:
        by_day.setdefault(b.day_of_week, []).append(b)
    return [{"day_of_week": d, "blocks": by_day[d]} for d in WEEKDAYS if d in by_day]


# ---------- shift templates ----------
async def list_templates(db: AsyncSession, restaurant_id: int) -> List[ShiftTemplate]:
    r = await db.execute(
        select(ShiftTemplate).where(ShiftTemplate.restaurant_id == restaurant_id).order_by(ShiftTemplate.template_name, ShiftTemplate.id)
    )
    return list(r.scalars().all())


async def get_template(db: AsyncSession, template_id: int) -> Optional[ShiftTemplate]:
    r = await db.execute(select(ShiftTemplate).where(ShiftTemplate.id == template_id))
    return r.scalar_one_or_none()


async def create_template(db: AsyncSession, restaurant_id: int, data: ShiftTemplateCreate) -> ShiftTemplate:
    raw = data.model_dump()
    # JSON column holds the plain day names
    raw["days_of_week"] = [d.value for d in data.days_of_week]
    t = ShiftTemplate(restaurant_id=restaurant_id, **raw)
    db.add(t)
    await db.flush()
    await db.refresh(t)
    return t


async def update_template(db: AsyncSession, t: ShiftTemplate, data: ShiftTemplateUpdate) -> ShiftTemplate:
    update_data = data.model_dump(exclude_unset=True)
    if "days_of_week" in update_data:
        update_data["days_of_week"] = list(dict.fromkeys(d.value for d in data.days_of_week))
    if update_data.get("start_time", t.start_time) == update_data.get("end_time", t.end_time):
        raise InvalidTimeWindowError("start_time and end_time must differ")
    for k, v in update_data.items():
        setattr(t, k, v)
    await db.flush()
    await db.refresh(t)
    return t


async def delete_template(db: AsyncSession, t: ShiftTemplate) -> None:
    await db.delete(t)
    await db.flush()


async def duplicate_template(db: AsyncSession, t: ShiftTemplate) -> ShiftTemplate:
    copy = ShiftTemplate(
        restaurant_id=t.restaurant_id,
        template_name=f"{t.template_name} (Copy)"[:100],
        job_type=t.job_type,
        shift_type=t.shift_type,
        start_time=t.start_time,
        end_time=t.end_time,
        days_of_week=list(t.days_of_week or []),
        positions_needed=t.positions_needed,
        notes=t.notes,
    )
    db.add(copy)
    await db.flush()
    await db.refresh(copy)
    return copy


def template_dates(t: ShiftTemplate, week_of: date) -> List[date]:
    """Dates of the template's weekdays inside the Monday-start week containing week_of."""
    monday = week_start(week_of)
    days = [DayOfWeek(d) for d in (t.days_of_week or [])]
    return sorted(monday + timedelta(days=WEEKDAYS.index(d)) for d in days)


async def apply_template(db: AsyncSession, t: ShiftTemplate, data: ShiftTemplateApply) -> List[Shift]:
    """positions_needed open shifts on each template weekday of the week, in one transaction."""
    payloads = []
    for d in template_dates(t, data.week_of):
        for _ in range(t.positions_needed):
            payloads.append({
                "job_type": t.job_type,
                "shift_date": d,
                "start_time": t.start_time,
                "end_time": t.end_time,
                "hourly_rate": data.hourly_rate,
                "notes": t.notes,
                "allow_bidding": data.allow_bidding,
            })
    created = []
    for p in payloads:
        sh = Shift(restaurant_id=t.restaurant_id, status=ShiftStatus.open, **p)
        db.add(sh)
        created.append(sh)
    await db.flush()
    for sh in created:
        await db.refresh(sh)
    return created
