"""
Bid ledger: submit / accept / reject, sibling rejection, duplicate bids, authorization.
"""
from datetime import date, time
from decimal import Decimal

import pytest
from sqlalchemy import select

from app import crud
from app.crud import NotFoundError, ForbiddenError
from app.models import Shift, ShiftBid, ShiftStatus, BidStatus, Notification, RecipientType
from app.schemas import ShiftCreate
from app.services import bid_ledger
from app.services.bid_ledger import (
    ShiftNotBiddableError, DuplicateBidError, BidNotPendingError, ShiftAlreadyAssignedError,
)
from conftest import seed_restaurant, seed_worker, seed_shift, owner_ctx, worker_ctx


@pytest.mark.asyncio
async def test_submit_bid_increments_counter(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        ben = await seed_worker(db, email="ben@workers.test", full_name="Ben")
        sh = await seed_shift(db, rest.id)
        await bid_ledger.submit_bid(db, worker_ctx(ana), sh.id, Decimal("16.00"))
        await bid_ledger.submit_bid(db, worker_ctx(ben), sh.id, Decimal("18.00"), "Can stay late")
        await db.commit()
        shift_id = sh.id

    async with async_session() as db:
        sh = await crud.get_shift(db, shift_id)
        assert sh.bids_count == 2
        assert sh.status == ShiftStatus.open
        r = await db.execute(select(ShiftBid).where(ShiftBid.shift_id == shift_id))
        bids = r.scalars().all()
        assert {b.worker_name for b in bids} == {"Ana", "Ben"}
        assert all(b.status == BidStatus.pending for b in bids)


@pytest.mark.asyncio
async def test_duplicate_bid_rejected(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        sh = await seed_shift(db, rest.id)
        await bid_ledger.submit_bid(db, worker_ctx(ana), sh.id, Decimal("16.00"))
        with pytest.raises(DuplicateBidError):
            await bid_ledger.submit_bid(db, worker_ctx(ana), sh.id, Decimal("17.00"))


@pytest.mark.asyncio
async def test_bid_on_shift_without_bidding_fails(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        sh = await seed_shift(db, rest.id, allow_bidding=False)
        with pytest.raises(ShiftNotBiddableError):
            await bid_ledger.submit_bid(db, worker_ctx(ana), sh.id, Decimal("16.00"))


@pytest.mark.asyncio
async def test_bid_on_missing_shift_is_not_found(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        ana = await seed_worker(db)
        with pytest.raises(NotFoundError):
            await bid_ledger.submit_bid(db, worker_ctx(ana), 999, Decimal("16.00"))


@pytest.mark.asyncio
async def test_manager_cannot_bid(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        sh = await seed_shift(db, rest.id)
        with pytest.raises(ForbiddenError):
            await bid_ledger.submit_bid(db, owner_ctx(rest), sh.id, Decimal("16.00"))


@pytest.mark.asyncio
async def test_accept_assigns_shift_and_rejects_siblings(async_engine_and_session):
    """Accepting bid k of N: k accepted, N-1 rejected, shift assigned to k's worker"""
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        workers = [await seed_worker(db, email=f"w{i}@workers.test", full_name=f"Worker {i}") for i in range(4)]
        sh = await seed_shift(db, rest.id)
        bids = [await bid_ledger.submit_bid(db, worker_ctx(w), sh.id, Decimal(15 + i)) for i, w in enumerate(workers)]
        await db.commit()
        winner_id, winner_worker = bids[2].id, workers[2]
        shift_id = sh.id

    async with async_session() as db:
        bid, shift, rejected_ids = await bid_ledger.accept_bid(db, owner_ctx(rest), winner_id)
        await db.commit()
        assert bid.status == BidStatus.accepted
        assert shift.status == ShiftStatus.assigned
        assert shift.assigned_worker_id == winner_worker.id
        assert shift.assigned_worker_name == "Worker 2"
        assert sorted(rejected_ids) == sorted(b.id for b in bids if b.id != winner_id)

    async with async_session() as db:
        r = await db.execute(select(ShiftBid).where(ShiftBid.shift_id == shift_id))
        statuses = {b.id: b.status for b in r.scalars().all()}
        assert statuses[winner_id] == BidStatus.accepted
        assert [s for bid_id, s in statuses.items() if bid_id != winner_id] == [BidStatus.rejected] * 3

        r = await db.execute(select(Notification).where(Notification.recipient_type == RecipientType.worker))
        notes = r.scalars().all()
        assert len(notes) == 4
        assert any(n.recipient_id == winner_worker.id and n.title == "Bid accepted" for n in notes)


@pytest.mark.asyncio
async def test_accept_twice_fails(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        sh = await seed_shift(db, rest.id)
        bid = await bid_ledger.submit_bid(db, worker_ctx(ana), sh.id, Decimal("16.00"))
        await bid_ledger.accept_bid(db, owner_ctx(rest), bid.id)
        with pytest.raises(BidNotPendingError):
            await bid_ledger.accept_bid(db, owner_ctx(rest), bid.id)


@pytest.mark.asyncio
async def test_accept_on_assigned_shift_fails(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        ben = await seed_worker(db, email="ben@workers.test", full_name="Ben")
        # shift already given to Ben, while Ana's bid is still pending
        sh = await seed_shift(db, rest.id, status=ShiftStatus.assigned, assigned_worker_id=ben.id, assigned_worker_name="Ben")
        stale = ShiftBid(shift_id=sh.id, worker_id=ana.id, worker_name="Ana", bid_amount=Decimal("14.00"))
        db.add(stale)
        await db.flush()
        with pytest.raises(ShiftAlreadyAssignedError):
            await bid_ledger.accept_bid(db, owner_ctx(rest), stale.id)


@pytest.mark.asyncio
async def test_bid_after_assignment_not_allowed(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        ben = await seed_worker(db, email="ben@workers.test", full_name="Ben")
        sh = await seed_shift(db, rest.id)
        bid = await bid_ledger.submit_bid(db, worker_ctx(ana), sh.id, Decimal("16.00"))
        await bid_ledger.accept_bid(db, owner_ctx(rest), bid.id)
        with pytest.raises(ShiftNotBiddableError):
            await bid_ledger.submit_bid(db, worker_ctx(ben), sh.id, Decimal("12.00"))


@pytest.mark.asyncio
async def test_other_restaurant_cannot_accept(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        other = await seed_restaurant(db, email="other@cafe.test", name="Cafe")
        ana = await seed_worker(db)
        sh = await seed_shift(db, rest.id)
        bid = await bid_ledger.submit_bid(db, worker_ctx(ana), sh.id, Decimal("16.00"))
        with pytest.raises(ForbiddenError):
            await bid_ledger.accept_bid(db, owner_ctx(other), bid.id)


@pytest.mark.asyncio
async def test_reject_bid_leaves_shift_open(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        sh = await seed_shift(db, rest.id)
        bid = await bid_ledger.submit_bid(db, worker_ctx(ana), sh.id, Decimal("16.00"))
        bid = await bid_ledger.reject_bid(db, owner_ctx(rest), bid.id)
        assert bid.status == BidStatus.rejected
        sh = await crud.get_shift(db, sh.id)
        assert sh.status == ShiftStatus.open
        assert sh.assigned_worker_id is None
        with pytest.raises(BidNotPendingError):
            await bid_ledger.reject_bid(db, owner_ctx(rest), bid.id)


@pytest.mark.asyncio
async def test_listings(async_engine_and_session):
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        ben = await seed_worker(db, email="ben@workers.test", full_name="Ben")
        sh = await seed_shift(db, rest.id)
        await bid_ledger.submit_bid(db, worker_ctx(ana), sh.id, Decimal("18.00"))
        await bid_ledger.submit_bid(db, worker_ctx(ben), sh.id, Decimal("16.00"))

        by_shift = await bid_ledger.list_shift_bids(db, owner_ctx(rest), sh.id)
        assert [b.bid_amount for b in by_shift] == [Decimal("16.00"), Decimal("18.00")]
        pending = await bid_ledger.list_restaurant_bids(db, rest.id)
        assert len(pending) == 2
        mine = await bid_ledger.list_worker_bids(db, ana.id)
        assert len(mine) == 1 and mine[0].worker_id == ana.id
        assert (await bid_ledger.get_worker_bid(db, sh.id, ben.id)).bid_amount == Decimal("16.00")


@pytest.mark.asyncio
async def test_end_to_end_server_shift(async_engine_and_session):
    """Server shift 2024-06-10 09:00-17:00 $15 with bidding; bids $16 and $18; accept $18"""
    engine, async_session = async_engine_and_session
    async with async_session() as db:
        rest = await seed_restaurant(db)
        ana = await seed_worker(db)
        ben = await seed_worker(db, email="ben@workers.test", full_name="Ben")
        created = await crud.create_shift(db, rest.id, ShiftCreate(
            job_type="Server",
            shift_date=date(2024, 6, 10),
            start_time=time(9, 0),
            end_time=time(17, 0),
            hourly_rate=Decimal("15"),
            allow_bidding=True,
        ))
        assert len(created) == 1
        shift_id = created[0].id
        low = await bid_ledger.submit_bid(db, worker_ctx(ana), shift_id, Decimal("16"))
        high = await bid_ledger.submit_bid(db, worker_ctx(ben), shift_id, Decimal("18"))
        await db.commit()
        low_id, high_id = low.id, high.id

    async with async_session() as db:
        await bid_ledger.accept_bid(db, owner_ctx(rest), high_id)
        await db.commit()

    async with async_session() as db:
        sh = (await db.execute(select(Shift).where(Shift.id == shift_id))).scalar_one()
        assert sh.status == ShiftStatus.assigned
        assert sh.assigned_worker_id == ben.id
        low = await bid_ledger.get_bid(db, low_id)
        high = await bid_ledger.get_bid(db, high_id)
        assert high.status == BidStatus.accepted
        assert low.status == BidStatus.rejected
