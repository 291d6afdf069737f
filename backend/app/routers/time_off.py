"""Time-off requests."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app import schemas
from app.database import get_db
from app.deps import get_session_context, require_owner_session, require_worker_session
from app.models import TimeOffStatus, UserRole
from app.policies import SessionContext, can_view_restaurant_record
from app.services import time_off

router = APIRouter(prefix="/api/time-off", tags=["time-off"])

RESPONSE_404 = {
    404: {
        "description": "Resource not found",
        "content": {"application/json": {"example": {"detail": "Time-off request not found"}}},
    }
}

RESPONSE_409 = {
    409: {
        "description": "Business rule conflict",
        "content": {"application/json": {"example": {"detail": "Only pending requests can be withdrawn"}}},
    }
}


@router.get("", response_model=List[schemas.TimeOffRead], summary="Restaurant requests (manager) or own requests (worker)")
async def list_time_off(
    status: Optional[TimeOffStatus] = Query(None, description="pending / approved / rejected"),
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    if ctx.role == UserRole.restaurant_owner and ctx.restaurant_id is not None:
        items = await time_off.list_restaurant_time_off(db, ctx.restaurant_id, status=status)
    elif ctx.role == UserRole.worker and ctx.worker_id is not None:
        items = await time_off.list_worker_time_off(db, ctx.worker_id)
        if status is not None:
            items = [r for r in items if r.status == status]
    else:
        raise HTTPException(status_code=403, detail="Register a restaurant or worker profile first")
    return [schemas.TimeOffRead.model_validate(r) for r in items]


@router.post("", response_model=schemas.TimeOffRead, status_code=201, summary="Request time off", responses={**RESPONSE_404, 422: {"description": "end_date before start_date"}})
async def request_time_off(
    data: schemas.TimeOffCreate,
    ctx: SessionContext = Depends(require_worker_session),
    db: AsyncSession = Depends(get_db),
):
    req = await time_off.request_time_off(
        db, ctx, data.restaurant_id, data.start_date, data.end_date,
        reason=data.reason, is_all_day=data.is_all_day,
    )
    return schemas.TimeOffRead.model_validate(req)


@router.delete("/{request_id}", status_code=204, summary="Withdraw a pending request", responses={**RESPONSE_404, **RESPONSE_409})
async def withdraw_time_off(
    request_id: int,
    ctx: SessionContext = Depends(require_worker_session),
    db: AsyncSession = Depends(get_db),
):
    await time_off.withdraw_time_off(db, ctx, request_id)


@router.post("/{request_id}/approve", response_model=schemas.TimeOffRead, summary="Approve a pending request", responses={**RESPONSE_404, **RESPONSE_409})
async def approve_time_off(
    request_id: int,
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    req = await time_off.approve_time_off(db, ctx, request_id)
    return schemas.TimeOffRead.model_validate(req)


@router.post("/{request_id}/reject", response_model=schemas.TimeOffRead, summary="Reject a pending request", responses={**RESPONSE_404, **RESPONSE_409})
async def reject_time_off(
    request_id: int,
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    req = await time_off.reject_time_off(db, ctx, request_id)
    return schemas.TimeOffRead.model_validate(req)


@router.get("/{request_id}/conflicts", response_model=List[schemas.ShiftRead], summary="Assigned shifts overlapping the request (informational)", responses=RESPONSE_404)
async def time_off_conflicts(
    request_id: int,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    req = await time_off.get_time_off(db, request_id)
    if not req:
        raise HTTPException(status_code=404, detail="Time-off request not found")
    if not can_view_restaurant_record(ctx, req.restaurant_id, req.worker_id):
        raise HTTPException(status_code=403, detail="You cannot view this request")
    shifts = await time_off.find_conflicting_shifts(db, req)
    return [schemas.ShiftRead.model_validate(s) for s in shifts]
