"""Shiftboard - shift lifecycle API"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from app import config as app_config
from app.crud import NotFoundError, ForbiddenError, ConflictError, UnprocessableError
from app.database import init_db
from app.routers import (
    auth,
    restaurants,
    workers,
    shifts,
    bids,
    swaps,
    time_off,
    availability,
    templates,
    calendar,
    notifications,
)
from app.services.completion_job import run_completion_sweep

logging.basicConfig(
    level=getattr(logging, app_config.settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)
_scheduler: AsyncIOScheduler | None = None


async def _daily_completion_job():
    try:
        await run_completion_sweep()
    except Exception:
        logger.exception("Daily shift completion sweep failed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    global _scheduler
    if app_config.settings.completion_sweep_enabled:
        _scheduler = AsyncIOScheduler()
        # Parse completion_sweep_time (HH:MM); fall back to 02:00
        try:
            parts = app_config.settings.completion_sweep_time.strip().split(":")
            hour, minute = int(parts[0]), int(parts[1]) if len(parts) > 1 else 0
        except (ValueError, IndexError):
            logger.warning("Invalid completion_sweep_time %r, using 02:00", app_config.settings.completion_sweep_time)
            hour, minute = 2, 0
        _scheduler.add_job(
            _daily_completion_job,
            "cron",
            hour=hour,
            minute=minute,
            id="shift_completion_sweep",
            replace_existing=True,
        )
        _scheduler.start()
    yield
    if _scheduler:
        _scheduler.shutdown(wait=False)
        _scheduler = None


app = FastAPI(
    title=app_config.settings.app_name,
    description="Shift creation, bidding, swaps, time-off, availability and weekly calendar for restaurants",
    version="1.0.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=app_config.settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(restaurants.router)
app.include_router(workers.router)
app.include_router(shifts.router)
app.include_router(bids.router)
app.include_router(swaps.router)
app.include_router(time_off.router)
app.include_router(availability.router)
app.include_router(templates.router)
app.include_router(calendar.router)
app.include_router(notifications.router)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ForbiddenError)
async def forbidden_handler(request: Request, exc: ForbiddenError):
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(UnprocessableError)
async def unprocessable_handler(request: Request, exc: UnprocessableError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(StaleDataError)
async def stale_data_handler(request: Request, exc: StaleDataError):
    logger.info("optimistic lock conflict on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=409, content={"detail": "Record was modified concurrently, reload and retry"})


@app.exception_handler(IntegrityError)
async def integrity_handler(request: Request, exc: IntegrityError):
    return JSONResponse(status_code=409, content={"detail": "Conflicting record already exists"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    if isinstance(exc, HTTPException):
        raise exc
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    detail = str(exc) if exc else "Internal Server Error"
    return JSONResponse(
        status_code=500,
        content={"detail": detail},
    )


@app.get("/")
def home():
    return {"message": "Shiftboard is running"}
