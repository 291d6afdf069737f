"""Shift templates: reusable weekly staffing patterns of a restaurant."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, schemas
from app.database import get_db
from app.deps import require_owner_session
from app.policies import SessionContext, ensure_manages_restaurant

router = APIRouter(prefix="/api/shift-templates", tags=["shift-templates"])

RESPONSE_404 = {
    404: {
        "description": "Resource not found",
        "content": {"application/json": {"example": {"detail": "Shift template not found"}}},
    }
}


async def _managed_template(db: AsyncSession, ctx: SessionContext, template_id: int):
    t = await crud.get_template(db, template_id)
    if not t:
        raise HTTPException(status_code=404, detail="Shift template not found")
    ensure_manages_restaurant(ctx, t.restaurant_id)
    return t


@router.get("", response_model=List[schemas.ShiftTemplateRead], summary="Templates of the caller's restaurant")
async def list_templates(
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    items = await crud.list_templates(db, ctx.restaurant_id)
    return [schemas.ShiftTemplateRead.model_validate(t) for t in items]


@router.post("", response_model=schemas.ShiftTemplateRead, status_code=201, summary="Create a template")
async def create_template(
    data: schemas.ShiftTemplateCreate,
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    t = await crud.create_template(db, ctx.restaurant_id, data)
    return schemas.ShiftTemplateRead.model_validate(t)


@router.get("/{template_id}", response_model=schemas.ShiftTemplateRead, summary="Get one template", responses=RESPONSE_404)
async def get_template(
    template_id: int,
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    t = await _managed_template(db, ctx, template_id)
    return schemas.ShiftTemplateRead.model_validate(t)


@router.patch("/{template_id}", response_model=schemas.ShiftTemplateRead, summary="Edit a template", responses=RESPONSE_404)
async def update_template(
    template_id: int,
    data: schemas.ShiftTemplateUpdate,
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    t = await _managed_template(db, ctx, template_id)
    t = await crud.update_template(db, t, data)
    return schemas.ShiftTemplateRead.model_validate(t)


@router.delete("/{template_id}", status_code=204, summary="Delete a template", responses=RESPONSE_404)
async def delete_template(
    template_id: int,
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    t = await _managed_template(db, ctx, template_id)
    await crud.delete_template(db, t)


@router.post("/{template_id}/duplicate", response_model=schemas.ShiftTemplateRead, status_code=201, summary="Copy a template", responses=RESPONSE_404)
async def duplicate_template(
    template_id: int,
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    t = await _managed_template(db, ctx, template_id)
    copy = await crud.duplicate_template(db, t)
    return schemas.ShiftTemplateRead.model_validate(copy)


@router.post("/{template_id}/apply", response_model=List[schemas.ShiftRead], status_code=201, summary="Create open shifts from a template for one week", responses=RESPONSE_404)
async def apply_template(
    template_id: int,
    data: schemas.ShiftTemplateApply,
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    t = await _managed_template(db, ctx, template_id)
    created = await crud.apply_template(db, t, data)
    return [schemas.ShiftRead.model_validate(s) for s in created]
