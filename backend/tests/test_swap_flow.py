"""Shift swap requests: who may ask, snapshots, one pending per shift, terminal resolutions."""
from datetime import time

import pytest

from app import crud
from app.crud import NotFoundError
from app.models import ShiftStatus, SwapStatus
from app.services import swap_flow
from app.services.swap_flow import (
    NotShiftAssigneeError, ShiftNotSwappableError, SwapAlreadyPendingError, SwapAlreadyResolvedError,
)
from app.crud import ForbiddenError
from conftest import seed_restaurant, seed_worker, seed_shift, owner_ctx, worker_ctx


async def _assigned_shift(db, rest, worker, **kw):
    return await seed_shift(
        db, rest.id,
        status=ShiftStatus.assigned,
        assigned_worker_id=worker.id,
        assigned_worker_name=worker.full_name,
        **kw,
    )


@pytest.mark.asyncio
async def test_request_swap_copies_snapshot(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        sh = await _assigned_shift(db, rest, ana, start_time=time(18, 30), end_time=time(23, 0))
        swap = await swap_flow.request_swap(db, worker_ctx(ana), sh.id, reason="Family event")
        assert swap.status == SwapStatus.pending_manager
        assert swap.restaurant_id == rest.id
        assert swap.shift_date == sh.shift_date
        assert swap.shift_time == "18:30 - 23:00"
        assert swap.is_open_swap is True
        assert swap.target_worker_name is None


@pytest.mark.asyncio
async def test_named_swap_keeps_target(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        sh = await _assigned_shift(db, rest, ana)
        swap = await swap_flow.request_swap(db, worker_ctx(ana), sh.id, is_open_swap=False, target_worker_name=" Ben ")
        assert swap.is_open_swap is False
        assert swap.target_worker_name == "Ben"


@pytest.mark.asyncio
async def test_only_assignee_may_request(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        ben = await seed_worker(db, email="ben@workers.test", full_name="Ben")
        sh = await _assigned_shift(db, rest, ana)
        with pytest.raises(NotShiftAssigneeError):
            await swap_flow.request_swap(db, worker_ctx(ben), sh.id)
        with pytest.raises(ForbiddenError):
            await swap_flow.request_swap(db, owner_ctx(rest), sh.id)
        with pytest.raises(NotFoundError):
            await swap_flow.request_swap(db, worker_ctx(ana), 999)


@pytest.mark.asyncio
async def test_completed_shift_not_swappable(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        sh = await seed_shift(db, rest.id, status=ShiftStatus.completed, assigned_worker_id=ana.id, assigned_worker_name="Ana")
        with pytest.raises(ShiftNotSwappableError):
            await swap_flow.request_swap(db, worker_ctx(ana), sh.id)


@pytest.mark.asyncio
async def test_second_pending_swap_rejected(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        sh = await _assigned_shift(db, rest, ana)
        first = await swap_flow.request_swap(db, worker_ctx(ana), sh.id)
        with pytest.raises(SwapAlreadyPendingError):
            await swap_flow.request_swap(db, worker_ctx(ana), sh.id)
        # once resolved a new request is allowed
        await swap_flow.reject_swap(db, owner_ctx(rest), first.id)
        again = await swap_flow.request_swap(db, worker_ctx(ana), sh.id)
        assert again.id != first.id


@pytest.mark.asyncio
async def test_approve_does_not_reassign_shift(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        sh = await _assigned_shift(db, rest, ana)
        swap = await swap_flow.request_swap(db, worker_ctx(ana), sh.id)
        swap = await swap_flow.approve_swap(db, owner_ctx(rest), swap.id)
        assert swap.status == SwapStatus.approved
        assert swap.resolved_at is not None
        sh = await crud.get_shift(db, sh.id)
        assert sh.assigned_worker_id == ana.id
        assert sh.status == ShiftStatus.assigned


@pytest.mark.asyncio
async def test_resolved_swap_is_terminal(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        sh = await _assigned_shift(db, rest, ana)
        swap = await swap_flow.request_swap(db, worker_ctx(ana), sh.id)
        await swap_flow.approve_swap(db, owner_ctx(rest), swap.id)
        with pytest.raises(SwapAlreadyResolvedError):
            await swap_flow.reject_swap(db, owner_ctx(rest), swap.id)
        with pytest.raises(SwapAlreadyResolvedError):
            await swap_flow.approve_swap(db, owner_ctx(rest), swap.id)


@pytest.mark.asyncio
async def test_other_manager_cannot_resolve(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        other = await seed_restaurant(db, email="other@cafe.test", name="Cafe")
        ana = await seed_worker(db)
        sh = await _assigned_shift(db, rest, ana)
        swap = await swap_flow.request_swap(db, worker_ctx(ana), sh.id)
        with pytest.raises(ForbiddenError):
            await swap_flow.approve_swap(db, owner_ctx(other), swap.id)
        assert [s.id for s in await swap_flow.list_restaurant_swaps(db, rest.id, status=SwapStatus.pending_manager)] == [swap.id]
        assert await swap_flow.list_restaurant_swaps(db, other.id) == []
        assert [s.id for s in await swap_flow.list_worker_swaps(db, ana.id)] == [swap.id]
