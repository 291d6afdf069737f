"""
Bid ledger: workers bid on open shifts, the restaurant manager accepts one bid.

Accepting runs in the caller's transaction:
  bid -> accepted, shift -> assigned (worker copied from the bid), every other pending bid -> rejected.
Shift and bid rows are version-checked, so a bid racing an acceptance (or two acceptances racing
each other) fails with StaleDataError instead of leaving two winners.
"""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app import crud
from app.crud import ConflictError, NotFoundError
from app.models import Shift, ShiftBid, ShiftStatus, BidStatus, BIDDABLE_SHIFT_STATUSES
from app.policies import SessionContext, require_worker, ensure_manages_restaurant
from app.services.notifications import notify_worker, notify_restaurant

logger = logging.getLogger(__name__)


class ShiftNotBiddableError(ConflictError):
    """Shift has bidding turned off, or is already assigned / completed"""
    pass


class DuplicateBidError(ConflictError):
    """Worker already bid on this shift"""
    pass


class BidNotPendingError(ConflictError):
    """Bid was already accepted or rejected"""
    pass


class ShiftAlreadyAssignedError(ConflictError):
    """Shift already has a worker"""
    pass


async def get_bid(db: AsyncSession, bid_id: int) -> Optional[ShiftBid]:
    r = await db.execute(select(ShiftBid).where(ShiftBid.id == bid_id))
    return r.scalar_one_or_none()


async def get_worker_bid(db: AsyncSession, shift_id: int, worker_id: int) -> Optional[ShiftBid]:
    r = await db.execute(select(ShiftBid).where(ShiftBid.shift_id == shift_id, ShiftBid.worker_id == worker_id))
    return r.scalar_one_or_none()


async def _get_shift_or_404(db: AsyncSession, shift_id: int) -> Shift:
    sh = await crud.get_shift(db, shift_id)
    if not sh:
        raise NotFoundError("Shift not found")
    return sh


async def _get_bid_or_404(db: AsyncSession, bid_id: int) -> ShiftBid:
    bid = await get_bid(db, bid_id)
    if not bid:
        raise NotFoundError("Bid not found")
    return bid


async def submit_bid(
    db: AsyncSession,
    ctx: SessionContext,
    shift_id: int,
    bid_amount: Decimal,
    message: Optional[str] = None,
) -> ShiftBid:
    worker_id = require_worker(ctx)
    sh = await _get_shift_or_404(db, shift_id)
    if not sh.allow_bidding or sh.status not in BIDDABLE_SHIFT_STATUSES:
        raise ShiftNotBiddableError("This shift is not accepting bids")
    if await get_worker_bid(db, shift_id, worker_id):
        raise DuplicateBidError("You have already placed a bid on this shift")

    worker_name = ctx.display_name
    if not worker_name:
        w = await crud.get_worker(db, worker_id)
        worker_name = w.full_name if w else ctx.email

    bid = ShiftBid(
        shift_id=shift_id,
        worker_id=worker_id,
        worker_name=worker_name,
        bid_amount=bid_amount,
        message=message,
        status=BidStatus.pending,
    )
    db.add(bid)
    # counter is computed in SQL; the shift's version check rejects a concurrent acceptance
    sh.bids_count = Shift.bids_count + 1
    try:
        await db.flush()
    except IntegrityError as e:
        raise DuplicateBidError("You have already placed a bid on this shift") from e
    await db.refresh(sh)
    await db.refresh(bid)

    await notify_restaurant(
        db, sh.restaurant_id,
        title="New bid",
        message=f"{worker_name} bid ${bid.bid_amount}/hr on the {sh.job_type} shift on {sh.shift_date.isoformat()}",
        type="new_bid",
        related_entity_id=bid.id,
    )
    logger.info("bid %s submitted on shift %s by worker %s", bid.id, shift_id, worker_id)
    return bid


async def accept_bid(db: AsyncSession, ctx: SessionContext, bid_id: int) -> Tuple[ShiftBid, Shift, List[int]]:
    """Returns (accepted bid, assigned shift, ids of the sibling bids rejected with it)."""
    bid = await _get_bid_or_404(db, bid_id)
    sh = await _get_shift_or_404(db, bid.shift_id)
    ensure_manages_restaurant(ctx, sh.restaurant_id)
    if bid.status != BidStatus.pending:
        raise BidNotPendingError(f"Bid is already {bid.status.value}")
    if sh.assigned_worker_id is not None or sh.status not in BIDDABLE_SHIFT_STATUSES:
        raise ShiftAlreadyAssignedError("This shift has already been assigned")

    bid.status = BidStatus.accepted
    sh.status = ShiftStatus.assigned
    sh.assigned_worker_id = bid.worker_id
    sh.assigned_worker_name = bid.worker_name
    await db.flush()

    r = await db.execute(
        select(ShiftBid.id, ShiftBid.worker_id).where(
            ShiftBid.shift_id == sh.id,
            ShiftBid.status == BidStatus.pending,
            ShiftBid.id != bid.id,
        )
    )
    losers = r.all()
    rejected_ids = [row.id for row in losers]
    if rejected_ids:
        await db.execute(
            update(ShiftBid)
            .where(ShiftBid.id.in_(rejected_ids), ShiftBid.status == BidStatus.pending)
            .values(status=BidStatus.rejected, version=ShiftBid.version + 1)
            .execution_options(synchronize_session="fetch")
        )

    await db.refresh(bid)
    await db.refresh(sh)

    day = sh.shift_date.isoformat()
    await notify_worker(
        db, bid.worker_id,
        title="Bid accepted",
        message=f"Your bid for the {sh.job_type} shift on {day} was accepted",
        type="bid_update",
        related_entity_id=bid.id,
    )
    for row in losers:
        await notify_worker(
            db, row.worker_id,
            title="Bid not selected",
            message=f"The {sh.job_type} shift on {day} was assigned to another worker",
            type="bid_update",
            related_entity_id=row.id,
        )
    logger.info("bid %s accepted, shift %s assigned to worker %s, %d bids rejected", bid.id, sh.id, bid.worker_id, len(rejected_ids))
    return bid, sh, rejected_ids


async def reject_bid(db: AsyncSession, ctx: SessionContext, bid_id: int) -> ShiftBid:
    bid = await _get_bid_or_404(db, bid_id)
    sh = await _get_shift_or_404(db, bid.shift_id)
    ensure_manages_restaurant(ctx, sh.restaurant_id)
    if bid.status != BidStatus.pending:
        raise BidNotPendingError(f"Bid is already {bid.status.value}")
    bid.status = BidStatus.rejected
    await db.flush()
    await db.refresh(bid)
    await notify_worker(
        db, bid.worker_id,
        title="Bid rejected",
        message=f"Your bid for the {sh.job_type} shift on {sh.shift_date.isoformat()} was rejected",
        type="bid_update",
        related_entity_id=bid.id,
    )
    logger.info("bid %s rejected", bid.id)
    return bid


# ---------- listing ----------
async def list_shift_bids(db: AsyncSession, ctx: SessionContext, shift_id: int) -> List[ShiftBid]:
    """All bids on one shift, for its manager; lowest amount first."""
    sh = await _get_shift_or_404(db, shift_id)
    ensure_manages_restaurant(ctx, sh.restaurant_id)
    r = await db.execute(
        select(ShiftBid).where(ShiftBid.shift_id == shift_id).order_by(ShiftBid.bid_amount, ShiftBid.created_at, ShiftBid.id)
    )
    return list(r.scalars().all())


async def list_restaurant_bids(
    db: AsyncSession,
    restaurant_id: int,
    status: Optional[BidStatus] = BidStatus.pending,
) -> List[ShiftBid]:
    q = (
        select(ShiftBid)
        .join(Shift, Shift.id == ShiftBid.shift_id)
        .where(Shift.restaurant_id == restaurant_id)
        .order_by(ShiftBid.created_at.desc(), ShiftBid.id.desc())
    )
    if status is not None:
        q = q.where(ShiftBid.status == status)
    r = await db.execute(q)
    return list(r.scalars().all())


async def list_worker_bids(db: AsyncSession, worker_id: int, status: Optional[BidStatus] = None) -> List[ShiftBid]:
    q = select(ShiftBid).where(ShiftBid.worker_id == worker_id).order_by(ShiftBid.created_at.desc(), ShiftBid.id.desc())
    if status is not None:
        q = q.where(ShiftBid.status == status)
    r = await db.execute(q)
    return list(r.scalars().all())
