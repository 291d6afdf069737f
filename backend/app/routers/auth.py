"""Session info. Tokens are issued by the external identity provider; this API only verifies them."""
from fastapi import APIRouter, Depends

from app import schemas
from app.deps import get_session_context
from app.policies import SessionContext

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/me", response_model=schemas.SessionRead, summary="Current session context")
async def me(ctx: SessionContext = Depends(get_session_context)):
    """Role plus the restaurant / worker profile the token resolves to (ids are null until registered)."""
    return schemas.SessionRead(
        email=ctx.email,
        role=ctx.role,
        restaurant_id=ctx.restaurant_id,
        worker_id=ctx.worker_id,
        display_name=ctx.display_name,
    )
