"""Shift swap requests."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app import schemas
from app.database import get_db
from app.deps import get_session_context, require_owner_session, require_worker_session
from app.models import SwapStatus, UserRole
from app.policies import SessionContext
from app.services import swap_flow

router = APIRouter(prefix="/api/swaps", tags=["swaps"])

RESPONSE_404 = {
    404: {
        "description": "Resource not found",
        "content": {"application/json": {"example": {"detail": "Swap request not found"}}},
    }
}

RESPONSE_409 = {
    409: {
        "description": "Business rule conflict",
        "content": {"application/json": {"example": {"detail": "Swap request is already approved"}}},
    }
}


@router.get("", response_model=List[schemas.ShiftSwapRead], summary="Restaurant swaps (manager) or own swaps (worker)")
async def list_swaps(
    status: Optional[SwapStatus] = Query(None, description="pending_manager / approved / rejected"),
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    if ctx.role == UserRole.restaurant_owner and ctx.restaurant_id is not None:
        items = await swap_flow.list_restaurant_swaps(db, ctx.restaurant_id, status=status)
    elif ctx.role == UserRole.worker and ctx.worker_id is not None:
        items = await swap_flow.list_worker_swaps(db, ctx.worker_id)
        if status is not None:
            items = [s for s in items if s.status == status]
    else:
        raise HTTPException(status_code=403, detail="Register a restaurant or worker profile first")
    return [schemas.ShiftSwapRead.model_validate(s) for s in items]


@router.post("", response_model=schemas.ShiftSwapRead, status_code=201, summary="Request a swap for an assigned shift", responses={**RESPONSE_404, **RESPONSE_409})
async def request_swap(
    data: schemas.ShiftSwapCreate,
    ctx: SessionContext = Depends(require_worker_session),
    db: AsyncSession = Depends(get_db),
):
    swap = await swap_flow.request_swap(
        db, ctx, data.shift_id,
        reason=data.reason,
        is_open_swap=data.is_open_swap,
        target_worker_name=data.target_worker_name,
    )
    return schemas.ShiftSwapRead.model_validate(swap)


@router.post("/{swap_id}/approve", response_model=schemas.ShiftSwapRead, summary="Approve a pending swap", responses={**RESPONSE_404, **RESPONSE_409})
async def approve_swap(
    swap_id: int,
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    swap = await swap_flow.approve_swap(db, ctx, swap_id)
    return schemas.ShiftSwapRead.model_validate(swap)


@router.post("/{swap_id}/reject", response_model=schemas.ShiftSwapRead, summary="Reject a pending swap", responses={**RESPONSE_404, **RESPONSE_409})
async def reject_swap(
    swap_id: int,
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    swap = await swap_flow.reject_swap(db, ctx, swap_id)
    return schemas.ShiftSwapRead.model_validate(swap)
