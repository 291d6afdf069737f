"""Daily sweep: assigned shifts whose date has passed become completed."""
import logging
from datetime import date
from typing import Optional

from app.database import AsyncSessionLocal
from app import crud

logger = logging.getLogger(__name__)


async def run_completion_sweep(today: Optional[date] = None, session_factory=None) -> int:
    """Runs in its own session; returns how many shifts were completed."""
    factory = session_factory or AsyncSessionLocal
    async with factory() as db:
        try:
            n = await crud.complete_past_shifts(db, today or date.today())
            await db.commit()
        except Exception:
            await db.rollback()
            raise
    logger.info("completion sweep: %d shifts marked completed", n)
    return n
