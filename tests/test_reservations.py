from datetime import date, datetime, timedelta, timezone
from unittest import mock

import pytest

from conftest import ADMIN_EMAIL, DAY, OWNER, USER_EMAIL, booking_input
from roombook.schemas.booking import BookingCreate, BookingStatus, BookingUpdate
from roombook.services.errors import (
    AlreadyAttendee,
    BookingTerminal,
    InvalidEmail,
    InvalidTimeRange,
    InvalidTransition,
    NotFound,
    TimeConflict,
    Unauthorized,
)
from roombook.services.intervals import overlaps
from roombook.services.reservations import ReservationService


async def test_create_sets_defaults(room, reservations):
    booking = await reservations.create(booking_input(room.id), "u1")

    assert booking.status is BookingStatus.PENDING
    assert booking.user_id == "u1"
    assert booking.attendees == []
    assert booking.date == DAY
    assert booking.version == 1
    assert booking.created_at is not None


async def test_create_normalizes_attendees(room, reservations):
    data = booking_input(room.id, attendees=["A@example.com", "a@example.com ", "b@example.com"])
    booking = await reservations.create(data, "u1")
    assert booking.attendees == ["a@example.com", "b@example.com"]


async def test_create_rejects_invalid_range(room, reservations):
    with pytest.raises(InvalidTimeRange):
        await reservations.create(booking_input(room.id, "10:00", "10:00"), "u1")
    with pytest.raises(InvalidTimeRange):
        await reservations.create(booking_input(room.id, "11:00", "10:00"), "u1")


async def test_create_requires_existing_room(reservations):
    with pytest.raises(NotFound):
        await reservations.create(booking_input("missing"), "u1")


async def test_overlapping_create_conflicts(room, reservations):
    first = await reservations.create(booking_input(room.id, "09:00", "10:00"), "u1")
    await reservations.confirm(first.id)

    with pytest.raises(TimeConflict) as info:
        await reservations.create(booking_input(room.id, "09:30", "10:30"), "u2")
    assert info.value.conflicting_ids == [first.id]


async def test_back_to_back_create_succeeds(room, reservations):
    await reservations.create(booking_input(room.id, "09:00", "10:00"), "u1")
    second = await reservations.create(booking_input(room.id, "10:00", "11:00"), "u2")
    assert second.start_time == "10:00"


async def test_create_pins_timestamp_to_canonical_day(store, room):
    service = ReservationService(store, timezone="Europe/Berlin")
    late_utc = datetime(2024, 5, 31, 23, 30, tzinfo=timezone.utc)
    booking = await service.create(booking_input(room.id, day=late_utc), "u1")
    assert booking.date == date(2024, 6, 1)


async def test_midnight_utc_lands_on_previous_zone_day(store, room):
    service = ReservationService(store, timezone="America/New_York")
    data = BookingCreate.model_validate(
        {
            "room_id": room.id,
            "title": "Early",
            "date": "2024-06-01T00:00:00+00:00",
            "start_time": "09:00",
            "end_time": "10:00",
        }
    )
    booking = await service.create(data, "u1")
    assert booking.date == date(2024, 5, 31)

    moved = await service.update(
        BookingUpdate.model_validate({"id": booking.id, "date": "2024-06-03T00:00:00Z"})
    )
    assert moved.date == date(2024, 6, 2)


async def test_accepted_bookings_never_overlap(room, reservations):
    requests = [
        ("08:00", "09:30"), ("09:00", "10:00"), ("09:30", "11:00"), ("10:30", "12:00"),
        ("11:00", "12:00"), ("12:00", "13:00"), ("08:30", "12:30"), ("13:00", "13:30"),
    ]
    for start, end in requests:
        try:
            await reservations.create(booking_input(room.id, start, end), "u1")
        except TimeConflict:
            pass

    active = [b for b in await reservations.list_bookings(room_id=room.id)]
    for i, a in enumerate(active):
        for b in active[i + 1:]:
            assert not overlaps(a.start_time, a.end_time, b.start_time, b.end_time)
    assert len(active) == 5


async def test_update_moves_booking(room, reservations):
    booking = await reservations.create(booking_input(room.id, "09:00", "10:00"), "u1")
    moved = await reservations.update(
        BookingUpdate(id=booking.id, start_time="09:30", end_time="10:30", title="Moved")
    )
    assert (moved.start_time, moved.end_time, moved.title) == ("09:30", "10:30", "Moved")
    assert moved.version == booking.version + 1


async def test_update_keeps_unsupplied_fields(room, reservations):
    booking = await reservations.create(
        booking_input(room.id, "09:00", "10:00", description="weekly"), "u1"
    )
    updated = await reservations.update(BookingUpdate(id=booking.id, end_time="09:45"))
    assert updated.start_time == "09:00"
    assert updated.description == "weekly"


async def test_update_into_another_booking_conflicts(room, reservations):
    await reservations.create(booking_input(room.id, "09:00", "10:00"), "u1")
    second = await reservations.create(booking_input(room.id, "10:00", "11:00"), "u2")

    with pytest.raises(TimeConflict):
        await reservations.update(BookingUpdate(id=second.id, start_time="09:45"))


async def test_update_merged_range_must_be_valid(room, reservations):
    booking = await reservations.create(booking_input(room.id, "09:00", "10:00"), "u1")
    with pytest.raises(InvalidTimeRange):
        await reservations.update(BookingUpdate(id=booking.id, start_time="10:00"))


async def test_update_to_another_day_checks_that_day(room, reservations):
    other_day = DAY + timedelta(days=1)
    await reservations.create(booking_input(room.id, "09:00", "10:00", day=other_day), "u1")
    booking = await reservations.create(booking_input(room.id, "09:00", "10:00"), "u2")

    with pytest.raises(TimeConflict):
        await reservations.update(BookingUpdate(id=booking.id, date=other_day))


async def test_update_missing_booking(reservations):
    with pytest.raises(NotFound):
        await reservations.update(BookingUpdate(id="nope", title="x"))


async def test_update_status_goes_through_lifecycle(room, reservations):
    booking = await reservations.create(booking_input(room.id), "u1")
    confirmed = await reservations.update(
        BookingUpdate(id=booking.id, status=BookingStatus.CONFIRMED)
    )
    assert confirmed.status is BookingStatus.CONFIRMED

    with pytest.raises(InvalidTransition):
        await reservations.update(BookingUpdate(id=booking.id, status=BookingStatus.PENDING))


async def test_cancel_then_update_is_terminal(room, reservations):
    booking = await reservations.create(booking_input(room.id), "u1")
    await reservations.cancel(booking.id)

    with pytest.raises(BookingTerminal):
        await reservations.update(BookingUpdate(id=booking.id, title="Too late"))


async def test_cancel_while_moving_skips_availability(room, reservations):
    await reservations.create(booking_input(room.id, "09:00", "10:00"), "u1")
    second = await reservations.create(booking_input(room.id, "10:00", "11:00"), "u2")

    cancelled = await reservations.update(
        BookingUpdate(id=second.id, start_time="09:30", status=BookingStatus.CANCELLED)
    )
    assert cancelled.status is BookingStatus.CANCELLED
    assert cancelled.start_time == "09:30"


async def test_cancel_frees_the_interval(room, reservations):
    booking = await reservations.create(booking_input(room.id, "09:00", "10:00"), "u1")
    await reservations.cancel(booking.id)

    assert await reservations.availability.is_available(room.id, DAY, "09:00", "10:00")
    again = await reservations.create(booking_input(room.id, "09:00", "10:00"), "u2")
    assert again.id != booking.id


async def test_cancel_twice_is_a_no_op(room, reservations):
    booking = await reservations.create(booking_input(room.id), "u1")
    cancelled = await reservations.cancel(booking.id)
    again = await reservations.cancel(booking.id)

    assert again.status is BookingStatus.CANCELLED
    assert again.version == cancelled.version


async def test_completed_booking_cannot_be_cancelled(room, reservations):
    booking = await reservations.create(booking_input(room.id), "u1")
    await reservations.confirm(booking.id)
    await reservations.complete(booking.id)

    with pytest.raises(InvalidTransition):
        await reservations.cancel(booking.id)


async def test_pending_booking_cannot_complete(room, reservations):
    booking = await reservations.create(booking_input(room.id), "u1")
    with pytest.raises(InvalidTransition):
        await reservations.complete(booking.id)


async def test_join_twice(room, reservations):
    booking = await reservations.create(booking_input(room.id), "u1")

    joined = await reservations.join(booking.id, "guest@example.com")
    with pytest.raises(AlreadyAttendee):
        await reservations.join(booking.id, "Guest@example.com")

    current = await reservations.get(booking.id)
    assert len(joined.attendees) == len(booking.attendees) + 1
    assert current.attendees == ["guest@example.com"]


async def test_join_needs_an_email(room, reservations):
    booking = await reservations.create(booking_input(room.id), "u1")
    with pytest.raises(InvalidEmail):
        await reservations.join(booking.id, "bob")
    assert (await reservations.get(booking.id)).attendees == []


async def test_join_terminal_booking(room, reservations):
    booking = await reservations.create(booking_input(room.id), "u1")
    await reservations.cancel(booking.id)
    with pytest.raises(BookingTerminal):
        await reservations.join(booking.id, "guest@example.com")


async def test_join_missing_booking(reservations):
    with pytest.raises(NotFound):
        await reservations.join("nope", "guest@example.com")


async def test_creator_may_add_own_email(room, reservations):
    booking = await reservations.create(booking_input(room.id), OWNER)
    joined = await reservations.join(booking.id, "owner@example.com")
    assert joined.attendees == ["owner@example.com"]


async def test_delete_removes_record(room, reservations):
    booking = await reservations.create(booking_input(room.id), "u1")
    await reservations.delete(booking.id)

    with pytest.raises(NotFound):
        await reservations.get(booking.id)
    with pytest.raises(NotFound):
        await reservations.delete(booking.id)


async def test_user_bookings(room, reservations):
    mine = await reservations.create(booking_input(room.id, "09:00", "10:00"), "u1")
    await reservations.create(booking_input(room.id, "10:00", "11:00"), "u2")
    assert [b.id for b in await reservations.user_bookings("u1")] == [mine.id]


async def test_edit_rights(room, reservations):
    booking = await reservations.create(booking_input(room.id), "u1")

    assert await reservations.can_edit(booking, "u1", "creator@example.com")
    assert await reservations.can_edit(booking, OWNER, None)
    assert await reservations.can_edit(booking, "u-admin", ADMIN_EMAIL)
    assert not await reservations.can_edit(booking, "u2", USER_EMAIL)

    with pytest.raises(Unauthorized):
        await reservations.ensure_can_edit(booking, "u2", USER_EMAIL)


async def test_delete_rights(room, reservations):
    booking = await reservations.create(booking_input(room.id), "u1")
    assert await reservations.can_delete_booking(booking, "u1")
    assert await reservations.can_delete_booking(booking, OWNER)
    assert not await reservations.can_delete_booking(booking, "u-admin")


async def test_retitle_skips_availability(room, reservations):
    booking = await reservations.create(booking_input(room.id), "u1")

    with mock.patch.object(
        reservations.availability, "conflicts", wraps=reservations.availability.conflicts
    ) as conflicts:
        await reservations.update(BookingUpdate(id=booking.id, title="Retro"))
        conflicts.assert_not_called()

        await reservations.update(BookingUpdate(id=booking.id, end_time="10:30"))
        conflicts.assert_awaited_once()
