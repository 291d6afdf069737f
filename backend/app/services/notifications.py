"""In-app notification rows written by the workflow steps; delivery (push / e-mail) is handled elsewhere."""
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Notification, RecipientType


async def notify(
    db: AsyncSession,
    recipient_type: RecipientType,
    recipient_id: int,
    title: str,
    message: str,
    type: str,
    related_entity_id: Optional[int] = None,
) -> Notification:
    n = Notification(
        recipient_type=recipient_type,
        recipient_id=recipient_id,
        title=title,
        message=message,
        type=type,
        related_entity_id=related_entity_id,
    )
    db.add(n)
    await db.flush()
    return n


async def notify_worker(db: AsyncSession, worker_id: int, title: str, message: str, type: str, related_entity_id: Optional[int] = None) -> Notification:
    return await notify(db, RecipientType.worker, worker_id, title, message, type, related_entity_id)


async def notify_restaurant(db: AsyncSession, restaurant_id: int, title: str, message: str, type: str, related_entity_id: Optional[int] = None) -> Notification:
    return await notify(db, RecipientType.restaurant, restaurant_id, title, message, type, related_entity_id)


async def list_notifications(
    db: AsyncSession,
    recipient_type: RecipientType,
    recipient_id: int,
    unread_only: bool = False,
) -> List[Notification]:
    """Newest first."""
    q = (
        select(Notification)
        .where(Notification.recipient_type == recipient_type, Notification.recipient_id == recipient_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    if unread_only:
        q = q.where(Notification.is_read.is_(False))
    r = await db.execute(q)
    return list(r.scalars().all())


async def get_notification(db: AsyncSession, notification_id: int) -> Optional[Notification]:
    r = await db.execute(select(Notification).where(Notification.id == notification_id))
    return r.scalar_one_or_none()


async def mark_read(db: AsyncSession, n: Notification) -> Notification:
    n.is_read = True
    await db.flush()
    await db.refresh(n)
    return n


async def mark_all_read(db: AsyncSession, recipient_type: RecipientType, recipient_id: int) -> int:
    r = await db.execute(
        update(Notification)
        .where(
            Notification.recipient_type == recipient_type,
            Notification.recipient_id == recipient_id,
            Notification.is_read.is_(False),
        )
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    return r.rowcount or 0
