"""The caller's in-app notifications."""
from typing import List, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app import schemas
from app.database import get_db
from app.deps import get_session_context
from app.models import RecipientType, UserRole
from app.policies import SessionContext
from app.services import notifications

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


def _recipient(ctx: SessionContext) -> Tuple[RecipientType, int]:
    if ctx.role == UserRole.restaurant_owner and ctx.restaurant_id is not None:
        return RecipientType.restaurant, ctx.restaurant_id
    if ctx.role == UserRole.worker and ctx.worker_id is not None:
        return RecipientType.worker, ctx.worker_id
    raise HTTPException(status_code=403, detail="Register a restaurant or worker profile first")


@router.get("", response_model=List[schemas.NotificationRead], summary="Own notifications, newest first")
async def list_notifications(
    unread_only: bool = Query(False),
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    kind, rid = _recipient(ctx)
    items = await notifications.list_notifications(db, kind, rid, unread_only=unread_only)
    return [schemas.NotificationRead.model_validate(n) for n in items]


@router.post("/read-all", summary="Mark every own notification as read")
async def mark_all_read(
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    kind, rid = _recipient(ctx)
    n = await notifications.mark_all_read(db, kind, rid)
    return {"updated": n}


@router.post("/{notification_id}/read", response_model=schemas.NotificationRead, summary="Mark one notification as read")
async def mark_read(
    notification_id: int,
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    kind, rid = _recipient(ctx)
    n = await notifications.get_notification(db, notification_id)
    if not n or n.recipient_type != kind or n.recipient_id != rid:
        raise HTTPException(status_code=404, detail="Notification not found")
    n = await notifications.mark_read(db, n)
    return schemas.NotificationRead.model_validate(n)
