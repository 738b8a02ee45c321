"""The availability check and the write are separate steps.

Two creates for the same slot can both pass the check before either one
is written. Only a store that re-checks at write time keeps the room
from being double-booked; the service then reports the loser as a
time conflict.
"""

import asyncio

import pytest

from conftest import DAY, booking_input
from roombook.schemas.room import Room
from roombook.services.errors import TimeConflict, WriteConflict
from roombook.services.reservations import ReservationService
from roombook.storage import MemoryStore


async def _race(store):
    await store.save_room(Room(id="r1", name="R1", created_by="u-owner"))
    service = ReservationService(store)
    return await asyncio.gather(
        service.create(booking_input("r1", "09:00", "10:00"), "u1"),
        service.create(booking_input("r1", "09:30", "10:30"), "u2"),
        return_exceptions=True,
    )


async def test_guarded_store_lets_only_one_create_win():
    store = MemoryStore(guard_overlaps=True)
    results = await _race(store)

    winners = [r for r in results if not isinstance(r, Exception)]
    losers = [r for r in results if isinstance(r, Exception)]
    assert len(winners) == 1
    assert len(losers) == 1
    assert isinstance(losers[0], TimeConflict)
    assert losers[0].conflicting_ids == [winners[0].id]
    assert len(await store.get_bookings_for_room_on_day("r1", DAY)) == 1


async def test_unguarded_store_can_double_book():
    store = MemoryStore()
    results = await _race(store)

    assert not any(isinstance(r, Exception) for r in results)
    assert len(await store.get_bookings_for_room_on_day("r1", DAY)) == 2


async def test_stale_update_is_rejected(store, room, reservations):
    booking = await reservations.create(booking_input(room.id), "u1")
    await reservations.join(booking.id, "first@example.com")

    stale = booking.model_copy(update={"title": "Overwritten"})
    with pytest.raises(WriteConflict):
        await store.save_booking(stale)
    assert (await store.get_booking(booking.id)).title == "Standup"


async def test_retry_after_lost_race_reports_conflict():
    store = MemoryStore(guard_overlaps=True)
    await _race(store)
    service = ReservationService(store)

    with pytest.raises(TimeConflict):
        await service.create(booking_input("r1", "09:00", "10:00"), "u3")
