"""Time-off requests: pending -> approved | rejected by the restaurant manager; the worker may withdraw while pending."""
import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app import crud
from app.crud import ConflictError, NotFoundError, UnprocessableError
from app.models import Shift, ShiftStatus, TimeOffRequest, TimeOffStatus
from app.policies import SessionContext, require_worker, ensure_manages_restaurant, ensure_owns_worker_record
from app.services.notifications import notify_worker, notify_restaurant

logger = logging.getLogger(__name__)


class TimeOffNotPendingError(ConflictError):
    """Request was already approved or rejected"""
    pass


async def get_time_off(db: AsyncSession, request_id: int) -> Optional[TimeOffRequest]:
    r = await db.execute(select(TimeOffRequest).where(TimeOffRequest.id == request_id))
    return r.scalar_one_or_none()


async def _get_or_404(db: AsyncSession, request_id: int) -> TimeOffRequest:
    req = await get_time_off(db, request_id)
    if not req:
        raise NotFoundError("Time-off request not found")
    return req


async def request_time_off(
    db: AsyncSession,
    ctx: SessionContext,
    restaurant_id: int,
    start_date: date,
    end_date: date,
    reason: Optional[str] = None,
    is_all_day: bool = True,
) -> TimeOffRequest:
    worker_id = require_worker(ctx)
    if end_date < start_date:
        raise UnprocessableError("end_date must not be before start_date")
    if not await crud.get_restaurant(db, restaurant_id):
        raise NotFoundError("Restaurant not found")
    worker_name = ctx.display_name
    if not worker_name:
        w = await crud.get_worker(db, worker_id)
        worker_name = w.full_name if w else ctx.email

    req = TimeOffRequest(
        worker_id=worker_id,
        worker_name=worker_name,
        restaurant_id=restaurant_id,
        start_date=start_date,
        end_date=end_date,
        reason=reason,
        is_all_day=is_all_day,
        status=TimeOffStatus.pending,
    )
    db.add(req)
    await db.flush()
    await db.refresh(req)
    await notify_restaurant(
        db, restaurant_id,
        title="Time-off requested",
        message=f"{worker_name} requested time off {start_date.isoformat()} to {end_date.isoformat()}",
        type="time_off_request",
        related_entity_id=req.id,
    )
    logger.info("time-off %s requested by worker %s (%s..%s)", req.id, worker_id, start_date, end_date)
    return req


async def withdraw_time_off(db: AsyncSession, ctx: SessionContext, request_id: int) -> None:
    """Owner deletes a pending request; resolved requests stay as history."""
    req = await _get_or_404(db, request_id)
    ensure_owns_worker_record(ctx, req.worker_id)
    if req.status != TimeOffStatus.pending:
        raise TimeOffNotPendingError(f"Only pending requests can be withdrawn (this one is {req.status.value})")
    await db.delete(req)
    await db.flush()
    logger.info("time-off %s withdrawn", request_id)


async def _resolve(db: AsyncSession, ctx: SessionContext, request_id: int, outcome: TimeOffStatus) -> TimeOffRequest:
    req = await _get_or_404(db, request_id)
    ensure_manages_restaurant(ctx, req.restaurant_id)
    if req.status != TimeOffStatus.pending:
        raise TimeOffNotPendingError(f"Time-off request is already {req.status.value}")
    req.status = outcome
    req.resolved_at = datetime.utcnow()
    await db.flush()
    await db.refresh(req)
    await notify_worker(
        db, req.worker_id,
        title=f"Time-off {outcome.value}",
        message=f"Your time-off request for {req.start_date.isoformat()} to {req.end_date.isoformat()} was {outcome.value}",
        type="time_off_update",
        related_entity_id=req.id,
    )
    logger.info("time-off %s %s", req.id, outcome.value)
    return req


async def approve_time_off(db: AsyncSession, ctx: SessionContext, request_id: int) -> TimeOffRequest:
    return await _resolve(db, ctx, request_id, TimeOffStatus.approved)


async def reject_time_off(db: AsyncSession, ctx: SessionContext, request_id: int) -> TimeOffRequest:
    return await _resolve(db, ctx, request_id, TimeOffStatus.rejected)


async def find_conflicting_shifts(db: AsyncSession, req: TimeOffRequest) -> List[Shift]:
    """Shifts assigned to the worker inside the request's range. Informational only."""
    r = await db.execute(
        select(Shift)
        .where(
            Shift.assigned_worker_id == req.worker_id,
            Shift.status == ShiftStatus.assigned,
            Shift.shift_date >= req.start_date,
            Shift.shift_date <= req.end_date,
        )
        .order_by(Shift.shift_date, Shift.start_time)
    )
    return list(r.scalars().all())


async def list_worker_time_off(db: AsyncSession, worker_id: int) -> List[TimeOffRequest]:
    r = await db.execute(
        select(TimeOffRequest).where(TimeOffRequest.worker_id == worker_id).order_by(TimeOffRequest.start_date.desc(), TimeOffRequest.id.desc())
    )
    return list(r.scalars().all())


async def list_restaurant_time_off(
    db: AsyncSession,
    restaurant_id: int,
    status: Optional[TimeOffStatus] = None,
    overlapping_from: Optional[date] = None,
    overlapping_to: Optional[date] = None,
) -> List[TimeOffRequest]:
    """overlapping_from / overlapping_to keep only requests whose range touches that window."""
    q = select(TimeOffRequest).where(TimeOffRequest.restaurant_id == restaurant_id).order_by(TimeOffRequest.start_date, TimeOffRequest.id)
    if status is not None:
        q = q.where(TimeOffRequest.status == status)
    if overlapping_from is not None:
        q = q.where(TimeOffRequest.end_date >= overlapping_from)
    if overlapping_to is not None:
        q = q.where(TimeOffRequest.start_date <= overlapping_to)
    r = await db.execute(q)
    return list(r.scalars().all())


async def list_worker_time_off_between(db: AsyncSession, worker_id: int, date_from: date, date_to: date) -> List[TimeOffRequest]:
    r = await db.execute(
        select(TimeOffRequest)
        .where(
            TimeOffRequest.worker_id == worker_id,
            TimeOffRequest.end_date >= date_from,
            TimeOffRequest.start_date <= date_to,
        )
        .order_by(TimeOffRequest.start_date, TimeOffRequest.id)
    )
    return list(r.scalars().all())
