"""Request dependencies: bearer token -> SessionContext, plus role gates for routers."""
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app import crud
from app.database import get_db
from app.models import UserRole
from app.policies import SessionContext
from app.security import decode_token


async def get_session_context(
    db: AsyncSession = Depends(get_db),
    authorization: Optional[str] = Header(None),
) -> SessionContext:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    payload = decode_token(authorization.split(" ", 1)[1])
    if not payload or payload.get("type") != "access" or not payload.get("sub"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    try:
        role = UserRole(payload.get("role"))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid role claim")

    email = payload["sub"]
    restaurant_id = worker_id = None
    display_name = None
    # Profiles may not exist yet (first call after sign-up); registration endpoints handle that case
    if role == UserRole.restaurant_owner:
        rest = await crud.get_restaurant_by_owner(db, email)
        if rest:
            restaurant_id, display_name = rest.id, rest.name
    elif role == UserRole.worker:
        w = await crud.get_worker_by_email(db, email)
        if w:
            worker_id, display_name = w.id, w.full_name
    return SessionContext(
        email=email,
        role=role,
        restaurant_id=restaurant_id,
        worker_id=worker_id,
        display_name=display_name,
    )


def require_owner_session(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    if ctx.role != UserRole.restaurant_owner:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Restaurant owner role required")
    if ctx.restaurant_id is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Register your restaurant first")
    return ctx


def require_worker_session(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    if ctx.role != UserRole.worker:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Worker role required")
    if ctx.worker_id is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Create your worker profile first")
    return ctx
