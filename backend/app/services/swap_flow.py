"""Shift swap requests: the assigned worker asks to hand a shift off, the restaurant manager resolves it.

pending_manager -> approved | rejected; both resolutions are terminal.
Approval only records the decision; the shift keeps its assigned worker until the manager reassigns it.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app import crud
from app.crud import ConflictError, ForbiddenError, NotFoundError, UnprocessableError
from app.models import Shift, ShiftSwap, ShiftStatus, SwapStatus
from app.policies import SessionContext, require_worker, ensure_manages_restaurant
from app.services.notifications import notify_worker, notify_restaurant

logger = logging.getLogger(__name__)


class NotShiftAssigneeError(ForbiddenError):
    """Only the worker assigned to the shift can request a swap"""
    pass


class ShiftNotSwappableError(ConflictError):
    """Only assigned shifts can be swapped"""
    pass


class SwapAlreadyPendingError(ConflictError):
    """The shift already has a swap request waiting for the manager"""
    pass


class SwapAlreadyResolvedError(ConflictError):
    """Swap was already approved or rejected"""
    pass


def format_shift_time(sh: Shift) -> str:
    return f"{sh.start_time.strftime('%H:%M')} - {sh.end_time.strftime('%H:%M')}"


async def get_swap(db: AsyncSession, swap_id: int) -> Optional[ShiftSwap]:
    r = await db.execute(select(ShiftSwap).where(ShiftSwap.id == swap_id))
    return r.scalar_one_or_none()


async def request_swap(
    db: AsyncSession,
    ctx: SessionContext,
    shift_id: int,
    reason: Optional[str] = None,
    is_open_swap: bool = True,
    target_worker_name: Optional[str] = None,
) -> ShiftSwap:
    worker_id = require_worker(ctx)
    sh = await crud.get_shift(db, shift_id)
    if not sh:
        raise NotFoundError("Shift not found")
    if sh.assigned_worker_id != worker_id:
        raise NotShiftAssigneeError("You can only request swaps for shifts assigned to you")
    if sh.status != ShiftStatus.assigned:
        raise ShiftNotSwappableError(f"Only assigned shifts can be swapped (this one is {sh.status.value})")
    if not is_open_swap and not (target_worker_name or "").strip():
        raise UnprocessableError("target_worker_name is required for a named swap")

    r = await db.execute(
        select(ShiftSwap.id).where(ShiftSwap.shift_id == shift_id, ShiftSwap.status == SwapStatus.pending_manager)
    )
    if r.first() is not None:
        raise SwapAlreadyPendingError("A swap request for this shift is already waiting for the manager")

    swap = ShiftSwap(
        shift_id=sh.id,
        requesting_worker_id=worker_id,
        target_worker_name=None if is_open_swap else target_worker_name.strip(),
        restaurant_id=sh.restaurant_id,
        shift_date=sh.shift_date,
        shift_time=format_shift_time(sh),
        reason=reason,
        is_open_swap=is_open_swap,
        status=SwapStatus.pending_manager,
    )
    db.add(swap)
    await db.flush()
    await db.refresh(swap)

    await notify_restaurant(
        db, sh.restaurant_id,
        title="Shift swap requested",
        message=f"{ctx.display_name or ctx.email} asked to swap the {sh.job_type} shift on {sh.shift_date.isoformat()}",
        type="swap_request",
        related_entity_id=swap.id,
    )
    logger.info("swap %s requested for shift %s by worker %s", swap.id, sh.id, worker_id)
    return swap


async def _resolve_swap(db: AsyncSession, ctx: SessionContext, swap_id: int, outcome: SwapStatus) -> ShiftSwap:
    swap = await get_swap(db, swap_id)
    if not swap:
        raise NotFoundError("Swap request not found")
    ensure_manages_restaurant(ctx, swap.restaurant_id)
    if swap.status != SwapStatus.pending_manager:
        raise SwapAlreadyResolvedError(f"Swap request is already {swap.status.value}")
    swap.status = outcome
    swap.resolved_at = datetime.utcnow()
    await db.flush()
    await db.refresh(swap)

    await notify_worker(
        db, swap.requesting_worker_id,
        title=f"Swap request {outcome.value}",
        message=f"Your swap request for {swap.shift_date.isoformat()} ({swap.shift_time}) was {outcome.value}",
        type="swap_update",
        related_entity_id=swap.id,
    )
    logger.info("swap %s %s", swap.id, outcome.value)
    return swap


async def approve_swap(db: AsyncSession, ctx: SessionContext, swap_id: int) -> ShiftSwap:
    return await _resolve_swap(db, ctx, swap_id, SwapStatus.approved)


async def reject_swap(db: AsyncSession, ctx: SessionContext, swap_id: int) -> ShiftSwap:
    return await _resolve_swap(db, ctx, swap_id, SwapStatus.rejected)


async def list_restaurant_swaps(db: AsyncSession, restaurant_id: int, status: Optional[SwapStatus] = None) -> List[ShiftSwap]:
    q = select(ShiftSwap).where(ShiftSwap.restaurant_id == restaurant_id).order_by(ShiftSwap.created_at.desc(), ShiftSwap.id.desc())
    if status is not None:
        q = q.where(ShiftSwap.status == status)
    r = await db.execute(q)
    return list(r.scalars().all())


async def list_worker_swaps(db: AsyncSession, worker_id: int) -> List[ShiftSwap]:
    r = await db.execute(
        select(ShiftSwap).where(ShiftSwap.requesting_worker_id == worker_id).order_by(ShiftSwap.created_at.desc(), ShiftSwap.id.desc())
    )
    return list(r.scalars().all())
