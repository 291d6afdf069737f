"""Bid resolution (manager) and bid listings."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app import schemas
from app.database import get_db
from app.deps import get_session_context, require_owner_session
from app.models import BidStatus, UserRole
from app.policies import SessionContext
from app.services import bid_ledger

router = APIRouter(prefix="/api/bids", tags=["bids"])

RESPONSE_404 = {
    404: {
        "description": "Resource not found",
        "content": {"application/json": {"example": {"detail": "Bid not found"}}},
    }
}

RESPONSE_409 = {
    409: {
        "description": "Business rule conflict",
        "content": {"application/json": {"example": {"detail": "Bid is already accepted"}}},
    }
}


@router.get("", response_model=List[schemas.ShiftBidRead], summary="Restaurant bids (manager) or own bids (worker)")
async def list_bids(
    status: Optional[BidStatus] = Query(None, description="pending / accepted / rejected"),
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    if ctx.role == UserRole.restaurant_owner and ctx.restaurant_id is not None:
        items = await bid_ledger.list_restaurant_bids(db, ctx.restaurant_id, status=status)
    elif ctx.role == UserRole.worker and ctx.worker_id is not None:
        items = await bid_ledger.list_worker_bids(db, ctx.worker_id, status=status)
    else:
        raise HTTPException(status_code=403, detail="Register a restaurant or worker profile first")
    return [schemas.ShiftBidRead.model_validate(b) for b in items]


@router.post("/{bid_id}/accept", response_model=schemas.BidAcceptResult, summary="Accept a bid and assign the shift", responses={**RESPONSE_404, **RESPONSE_409})
async def accept_bid(
    bid_id: int,
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    bid, sh, rejected_ids = await bid_ledger.accept_bid(db, ctx, bid_id)
    return schemas.BidAcceptResult(
        bid=schemas.ShiftBidRead.model_validate(bid),
        shift=schemas.ShiftRead.model_validate(sh),
        rejected_bid_ids=rejected_ids,
    )


@router.post("/{bid_id}/reject", response_model=schemas.ShiftBidRead, summary="Reject a pending bid", responses={**RESPONSE_404, **RESPONSE_409})
async def reject_bid(
    bid_id: int,
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    bid = await bid_ledger.reject_bid(db, ctx, bid_id)
    return schemas.ShiftBidRead.model_validate(bid)
