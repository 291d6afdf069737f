"""Worker profile registration."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, schemas
from app.database import get_db
from app.deps import get_session_context, require_worker_session
from app.models import UserRole
from app.policies import SessionContext

router = APIRouter(prefix="/api/workers", tags=["workers"])


@router.post("", response_model=schemas.WorkerProfileRead, status_code=201, summary="Create the caller's worker profile")
async def create_worker_profile(
    data: schemas.WorkerProfileCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    if ctx.role != UserRole.worker:
        raise HTTPException(status_code=403, detail="Worker role required")
    w = await crud.create_worker_profile(db, ctx.email, data)
    return schemas.WorkerProfileRead.model_validate(w)


@router.get("/me", response_model=schemas.WorkerProfileRead, summary="The caller's worker profile")
async def my_profile(
    ctx: SessionContext = Depends(require_worker_session),
    db: AsyncSession = Depends(get_db),
):
    w = await crud.get_worker(db, ctx.worker_id)
    if not w:
        raise HTTPException(status_code=404, detail="Worker profile not found")
    return schemas.WorkerProfileRead.model_validate(w)
