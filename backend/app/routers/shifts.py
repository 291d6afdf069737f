"""Shifts: manager CRUD (single or recurring series), open-shift board, and bidding on a shift."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, schemas
from app.database import get_db
from app.deps import get_session_context, require_owner_session, require_worker_session
from app.models import ShiftStatus, BIDDABLE_SHIFT_STATUSES, JOB_TYPES
from app.policies import SessionContext, ensure_manages_restaurant, can_view_restaurant_record
from app.services import bid_ledger

router = APIRouter(prefix="/api/shifts", tags=["shifts"])

RESPONSE_404 = {
    404: {
        "description": "Resource not found",
        "content": {"application/json": {"example": {"detail": "Shift not found"}}},
    }
}

RESPONSE_409 = {
    409: {
        "description": "Business rule conflict",
        "content": {"application/json": {"example": {"detail": "Only open shifts can be cancelled"}}},
    }
}

RESPONSE_422 = {422: {"description": "Request body or query validation failed"}}


async def _managed_shift(db: AsyncSession, ctx: SessionContext, shift_id: int):
    sh = await crud.get_shift(db, shift_id)
    if not sh:
        raise HTTPException(status_code=404, detail="Shift not found")
    ensure_manages_restaurant(ctx, sh.restaurant_id)
    return sh


@router.get("", response_model=List[schemas.ShiftRead], summary="Shifts of the caller's restaurant")
async def list_shifts(
    date_from: Optional[date] = Query(None, description="First shift_date, inclusive"),
    date_to: Optional[date] = Query(None, description="Last shift_date, inclusive"),
    status: Optional[ShiftStatus] = Query(None, description="open / assigned / bidding / completed"),
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    items = await crud.list_shifts(db, ctx.restaurant_id, date_from=date_from, date_to=date_to, status=status)
    return [schemas.ShiftRead.model_validate(s) for s in items]


@router.get("/open", response_model=List[schemas.ShiftRead], summary="Open shifts accepting bids")
async def list_open_shifts(
    date_from: Optional[date] = Query(None, description="Hide shifts before this date"),
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    items = await crud.list_open_shifts(db, date_from=date_from)
    return [schemas.ShiftRead.model_validate(s) for s in items]


@router.get("/job-types", response_model=List[str], summary="Suggested job types for the shift form")
async def list_job_types():
    return list(JOB_TYPES)


@router.get("/mine", response_model=List[schemas.ShiftRead], summary="Shifts assigned to the caller")
async def list_my_shifts(
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    ctx: SessionContext = Depends(require_worker_session),
    db: AsyncSession = Depends(get_db),
):
    items = await crud.list_worker_shifts(db, ctx.worker_id, date_from=date_from, date_to=date_to)
    return [schemas.ShiftRead.model_validate(s) for s in items]


@router.post("", response_model=List[schemas.ShiftRead], status_code=201, summary="Create a shift or a recurring series", responses=RESPONSE_422)
async def create_shift(
    data: schemas.ShiftCreate,
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    """Always returns a list: one shift, or every occurrence of the series (first one is the parent)."""
    created = await crud.create_shift(db, ctx.restaurant_id, data)
    return [schemas.ShiftRead.model_validate(s) for s in created]


@router.get("/{shift_id}", response_model=schemas.ShiftRead, summary="Get one shift", responses=RESPONSE_404)
async def get_shift(
    shift_id: int,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    sh = await crud.get_shift(db, shift_id)
    if not sh:
        raise HTTPException(status_code=404, detail="Shift not found")
    on_board = sh.allow_bidding and sh.status in BIDDABLE_SHIFT_STATUSES
    if not on_board and not can_view_restaurant_record(ctx, sh.restaurant_id, sh.assigned_worker_id):
        raise HTTPException(status_code=403, detail="You cannot view this shift")
    return schemas.ShiftRead.model_validate(sh)


@router.patch("/{shift_id}", response_model=schemas.ShiftRead, summary="Edit a shift (open / bidding only)", responses={**RESPONSE_404, **RESPONSE_409, **RESPONSE_422})
async def update_shift(
    shift_id: int,
    data: schemas.ShiftUpdate,
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    sh = await _managed_shift(db, ctx, shift_id)
    sh = await crud.update_shift(db, sh, data)
    return schemas.ShiftRead.model_validate(sh)


@router.delete("/{shift_id}", status_code=204, summary="Cancel an open shift", responses={**RESPONSE_404, **RESPONSE_409})
async def cancel_shift(
    shift_id: int,
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    sh = await _managed_shift(db, ctx, shift_id)
    await crud.cancel_shift(db, sh)


# ---------- bids on a shift ----------
@router.get("/{shift_id}/bids", response_model=List[schemas.ShiftBidRead], summary="Bids on a shift (manager)", responses=RESPONSE_404)
async def list_shift_bids(
    shift_id: int,
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    items = await bid_ledger.list_shift_bids(db, ctx, shift_id)
    return [schemas.ShiftBidRead.model_validate(b) for b in items]


@router.post("/{shift_id}/bids", response_model=schemas.ShiftBidRead, status_code=201, summary="Bid on an open shift", responses={**RESPONSE_404, **RESPONSE_409, **RESPONSE_422})
async def submit_bid(
    shift_id: int,
    data: schemas.ShiftBidCreate,
    ctx: SessionContext = Depends(require_worker_session),
    db: AsyncSession = Depends(get_db),
):
    bid = await bid_ledger.submit_bid(db, ctx, shift_id, data.bid_amount, data.message)
    return schemas.ShiftBidRead.model_validate(bid)


@router.get("/{shift_id}/bids/mine", response_model=schemas.ShiftBidRead, summary="The caller's bid on a shift", responses=RESPONSE_404)
async def my_bid(
    shift_id: int,
    ctx: SessionContext = Depends(require_worker_session),
    db: AsyncSession = Depends(get_db),
):
    bid = await bid_ledger.get_worker_bid(db, shift_id, ctx.worker_id)
    if not bid:
        raise HTTPException(status_code=404, detail="You have not bid on this shift")
    return schemas.ShiftBidRead.model_validate(bid)
