"""Authorization predicates, evaluated server-side against the caller's SessionContext.

Workers own their bids, swaps, time-off and availability. Only the manager of the
restaurant a record belongs to (or an admin) may change its status.
"""
from dataclasses import dataclass
from typing import Optional

from app.crud import ForbiddenError
from app.models import UserRole


@dataclass(frozen=True)
class SessionContext:
    """Who is calling, resolved once per request and passed into every workflow operation."""
    email: str
    role: UserRole
    restaurant_id: Optional[int] = None
    worker_id: Optional[int] = None
    display_name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin


def require_worker(ctx: SessionContext) -> int:
    """Caller must be a worker with a profile; returns the worker id."""
    if ctx.role != UserRole.worker or ctx.worker_id is None:
        raise ForbiddenError("A worker profile is required for this action")
    return ctx.worker_id


def ensure_manages_restaurant(ctx: SessionContext, restaurant_id: int) -> None:
    if ctx.is_admin:
        return
    if ctx.role != UserRole.restaurant_owner or ctx.restaurant_id != restaurant_id:
        raise ForbiddenError("Only the restaurant's manager can do this")


def ensure_owns_worker_record(ctx: SessionContext, worker_id: int) -> None:
    if ctx.role != UserRole.worker or ctx.worker_id != worker_id:
        raise ForbiddenError("This record belongs to another worker")


def can_view_restaurant_record(ctx: SessionContext, restaurant_id: int, worker_id: Optional[int] = None) -> bool:
    """Managers see their restaurant's records; workers see only their own."""
    if ctx.is_admin:
        return True
    if ctx.role == UserRole.restaurant_owner:
        return ctx.restaurant_id == restaurant_id
    return worker_id is not None and ctx.worker_id == worker_id
