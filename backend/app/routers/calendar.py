"""Weekly calendar: restaurant view for managers, personal view for workers."""
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, schemas
from app.database import get_db
from app.deps import get_session_context
from app.models import UserRole
from app.policies import SessionContext
from app.services import time_off
from app.services.calendar_view import build_week, week_bounds

router = APIRouter(prefix="/api/calendar", tags=["calendar"])


@router.get("/week", response_model=schemas.CalendarWeek, summary="Seven days Monday..Sunday of shifts and time-off")
async def calendar_week(
    week_of: date = Query(..., description="Any date inside the week"),
    ctx: SessionContext = Depends(get_session_context),
    db: AsyncSession = Depends(get_db),
):
    start, end = week_bounds(week_of)
    if ctx.role == UserRole.restaurant_owner and ctx.restaurant_id is not None:
        shifts = await crud.list_shifts(db, ctx.restaurant_id, date_from=start, date_to=end)
        requests = await time_off.list_restaurant_time_off(db, ctx.restaurant_id, overlapping_from=start, overlapping_to=end)
    elif ctx.role == UserRole.worker and ctx.worker_id is not None:
        shifts = await crud.list_worker_shifts(db, ctx.worker_id, date_from=start, date_to=end)
        requests = await time_off.list_worker_time_off_between(db, ctx.worker_id, start, end)
    else:
        raise HTTPException(status_code=403, detail="Register a restaurant or worker profile first")

    days = build_week(week_of, shifts, requests)
    return schemas.CalendarWeek(
        week_start=start,
        week_end=end,
        days=[
            schemas.CalendarDay(
                date=d["date"],
                shifts=[schemas.ShiftRead.model_validate(s) for s in d["shifts"]],
                time_off=[schemas.TimeOffRead.model_validate(r) for r in d["time_off"]],
            )
            for d in days
        ],
    )
