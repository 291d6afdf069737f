"""Restaurant registration for owner accounts."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, schemas
from app.database import get_db
from app.deps import get_session_context, require_owner_session
from app.models import UserRole
from app.policies import SessionContext

router = APIRouter(prefix="/api/restaurants", tags=["restaurants"])

RESPONSE_409 = {
    409: {
        "description": "Business rule conflict",
        "content": {"application/json": {"example": {"detail": "This account already owns a restaurant"}}},
    }
}


@router.post("", response_model=schemas.RestaurantRead, status_code=201, summary="Register the caller's restaurant", responses=RESPONSE_409)
async def create_restaurant(
    data: schemas.RestaurantCreate,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    if ctx.role != UserRole.restaurant_owner:
        raise HTTPException(status_code=403, detail="Restaurant owner role required")
    rest = await crud.create_restaurant(db, ctx.email, data)
    return schemas.RestaurantRead.model_validate(rest)


@router.get("/me", response_model=schemas.RestaurantRead, summary="The caller's restaurant")
async def my_restaurant(
    ctx: SessionContext = Depends(require_owner_session),
    db: AsyncSession = Depends(get_db),
):
    rest = await crud.get_restaurant(db, ctx.restaurant_id)
    if not rest:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return schemas.RestaurantRead.model_validate(rest)
