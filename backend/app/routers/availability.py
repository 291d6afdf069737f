"""Worker availability blocks."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, schemas
from app.database import get_db
from app.deps import require_worker_session
from app.policies import SessionContext, ensure_owns_worker_record

router = APIRouter(prefix="/api/availability", tags=["availability"])

RESPONSE_404 = {
    404: {
        "description": "Resource not found",
        "content": {"application/json": {"example": {"detail": "Availability block not found"}}},
    }
}


async def _own_block(db: AsyncSession, ctx: SessionContext, block_id: int):
    b = await crud.get_availability(db, block_id)
    if not b:
        raise HTTPException(status_code=404, detail="Availability block not found")
    ensure_owns_worker_record(ctx, b.worker_id)
    return b


@router.get("", response_model=List[schemas.AvailabilityRead], summary="The caller's availability blocks")
async def list_availability(
    ctx: SessionContext = Depends(require_worker_session),
    db: AsyncSession = Depends(get_db),
):
    items = await crud.list_availability(db, ctx.worker_id)
    return [schemas.AvailabilityRead.model_validate(b) for b in items]


@router.get("/by-day", response_model=List[schemas.AvailabilityDay], summary="Blocks grouped Monday..Sunday")
async def availability_by_day(
    ctx: SessionContext = Depends(require_worker_session),
    db: AsyncSession = Depends(get_db),
):
    items = await crud.list_availability(db, ctx.worker_id)
    return [
        schemas.AvailabilityDay(
            day_of_week=g["day_of_week"],
            blocks=[schemas.AvailabilityRead.model_validate(b) for b in g["blocks"]],
        )
        for g in crud.group_availability_by_day(items)
    ]


@router.post("", response_model=schemas.AvailabilityRead, status_code=201, summary="Add an availability block", responses={422: {"description": "end_time must be after start_time"}})
async def create_availability(
    data: schemas.AvailabilityCreate,
    ctx: SessionContext = Depends(require_worker_session),
    db: AsyncSession = Depends(get_db),
):
    b = await crud.create_availability(db, ctx.worker_id, data)
    return schemas.AvailabilityRead.model_validate(b)


@router.patch("/{block_id}", response_model=schemas.AvailabilityRead, summary="Edit an availability block", responses={**RESPONSE_404, 422: {"description": "Null field or end_time not after start_time"}})
async def update_availability(
    block_id: int,
    data: schemas.AvailabilityUpdate,
    ctx: SessionContext = Depends(require_worker_session),
    db: AsyncSession = Depends(get_db),
):
    b = await _own_block(db, ctx, block_id)
    b = await crud.update_availability(db, b, data)
    return schemas.AvailabilityRead.model_validate(b)


@router.delete("/{block_id}", status_code=204, summary="Delete an availability block", responses=RESPONSE_404)
async def delete_availability(
    block_id: int,
    ctx: SessionContext = Depends(require_worker_session),
    db: AsyncSession = Depends(get_db),
):
    b = await _own_block(db, ctx, block_id)
    await crud.delete_availability(db, b)
