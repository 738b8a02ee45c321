import asyncio
from datetime import date, datetime, timezone

from roombook.schemas.booking import Booking, BookingStatus
from roombook.schemas.room import Room
from roombook.services.errors import WriteConflict
from roombook.services.intervals import overlaps
from roombook.services.lifecycle import is_terminal


class MemoryStore:
    """Dict-backed store, used for tests and local runs.

    Records are deep-copied on the way in and out so callers never share
    state with the store. With ``guard_overlaps`` the store refuses a
    write that would leave two active bookings overlapping, the way a
    database with an exclusion constraint would.
    """

    def __init__(self, guard_overlaps: bool = False):
        self.rooms: dict[str, Room] = {}
        self.bookings: dict[str, Booking] = {}
        self.guard_overlaps = guard_overlaps
        self._lock = asyncio.Lock()

    async def get_room(self, room_id: str) -> Room | None:
        room = self.rooms.get(room_id)
        return room.model_copy(deep=True) if room else None

    async def list_rooms(self) -> list[Room]:
        rooms = sorted(self.rooms.values(), key=lambda r: r.name)
        return [room.model_copy(deep=True) for room in rooms]

    async def save_room(self, room: Room) -> Room:
        now = datetime.now(timezone.utc)
        existing = self.rooms.get(room.id)
        stored = room.model_copy(
            deep=True,
            update={
                "created_at": existing.created_at if existing else now,
                "updated_at": now,
            },
        )
        self.rooms[room.id] = stored
        return stored.model_copy(deep=True)

    async def delete_room(self, room_id: str) -> None:
        self.rooms.pop(room_id, None)

    async def get_booking(self, booking_id: str) -> Booking | None:
        booking = self.bookings.get(booking_id)
        return booking.model_copy(deep=True) if booking else None

    async def list_bookings(
        self,
        room_id: str | None = None,
        user_id: str | None = None,
        status: BookingStatus | None = None,
    ) -> list[Booking]:
        result = [
            b
            for b in self.bookings.values()
            if (room_id is None or b.room_id == room_id)
            and (user_id is None or b.user_id == user_id)
            and (status is None or b.status == status)
        ]
        result.sort(key=lambda b: (b.date, b.start_time), reverse=True)
        return [b.model_copy(deep=True) for b in result]

    async def get_bookings_for_room_on_day(self, room_id: str, day: date) -> list[Booking]:
        # Yield once so concurrent callers interleave between read and write.
        await asyncio.sleep(0)
        return [
            b.model_copy(deep=True)
            for b in self.bookings.values()
            if b.room_id == room_id and b.date == day
        ]

    async def save_booking(self, booking: Booking) -> Booking:
        async with self._lock:
            existing = self.bookings.get(booking.id)
            stored_version = existing.version if existing else 0
            if booking.version != stored_version:
                raise WriteConflict("booking", booking.id)
            if self.guard_overlaps and not is_terminal(booking.status):
                self._check_overlaps(booking)

            now = datetime.now(timezone.utc)
            stored = booking.model_copy(
                deep=True,
                update={
                    "version": stored_version + 1,
                    "created_at": existing.created_at if existing else now,
                    "updated_at": now,
                },
            )
            self.bookings[booking.id] = stored
            return stored.model_copy(deep=True)

    async def delete_booking(self, booking_id: str) -> None:
        self.bookings.pop(booking_id, None)

    def _check_overlaps(self, booking: Booking) -> None:
        for other in self.bookings.values():
            if (
                other.id != booking.id
                and other.room_id == booking.room_id
                and other.date == booking.date
                and not is_terminal(other.status)
                and overlaps(booking.start_time, booking.end_time, other.start_time, other.end_time)
            ):
                raise WriteConflict("booking", booking.id)
