"""Free/busy computation for a single room and calendar day.

Only pending and confirmed bookings block time; cancelled and completed
ones are ignored. Everything here is a read-only projection of the
store's current state.
"""

from datetime import date

from roombook.schemas.booking import Booking, TimeSlot
from roombook.services.intervals import overlaps
from roombook.services.lifecycle import is_terminal
from roombook.storage.base import ReservationStore
from roombook.utils.time import from_minutes, to_minutes


class AvailabilityEngine:
    def __init__(
        self,
        store: ReservationStore,
        opening_time: str = "08:00",
        closing_time: str = "18:00",
        slot_minutes: int = 60,
    ):
        if to_minutes(opening_time) >= to_minutes(closing_time):
            raise ValueError("opening_time must be before closing_time")
        if slot_minutes <= 0:
            raise ValueError("slot_minutes must be positive")
        self.store = store
        self.opening_time = opening_time
        self.closing_time = closing_time
        self.slot_minutes = slot_minutes

    async def bookings_for_room_on_day(
        self, room_id: str, day: date, active_only: bool = False
    ) -> list[Booking]:
        bookings = await self.store.get_bookings_for_room_on_day(room_id, day)
        if active_only:
            bookings = [b for b in bookings if not is_terminal(b.status)]
        return sorted(bookings, key=lambda b: (b.start_time, b.end_time))

    async def conflicts(
        self,
        room_id: str,
        day: date,
        start_time: str,
        end_time: str,
        exclude_booking_id: str | None = None,
    ) -> list[Booking]:
        """Active bookings whose interval overlaps [start_time, end_time).

        Assumes start_time < end_time was checked by the caller.
        """
        bookings = await self.bookings_for_room_on_day(room_id, day, active_only=True)
        return [
            b
            for b in bookings
            if b.id != exclude_booking_id
            and overlaps(start_time, end_time, b.start_time, b.end_time)
        ]

    async def is_available(
        self,
        room_id: str,
        day: date,
        start_time: str,
        end_time: str,
        exclude_booking_id: str | None = None,
    ) -> bool:
        found = await self.conflicts(room_id, day, start_time, end_time, exclude_booking_id)
        return not found

    def slot_bounds(self) -> list[tuple[str, str]]:
        """Consecutive slots covering the operating window.

        A trailing remainder shorter than ``slot_minutes`` becomes a final,
        shorter slot so the window is always covered exactly.
        """
        start = to_minutes(self.opening_time)
        close = to_minutes(self.closing_time)
        bounds = []
        while start < close:
            end = min(start + self.slot_minutes, close)
            bounds.append((from_minutes(start), from_minutes(end)))
            start = end
        return bounds

    async def available_slots(self, room_id: str, day: date) -> list[TimeSlot]:
        bookings = await self.bookings_for_room_on_day(room_id, day, active_only=True)
        return [
            TimeSlot(
                start_time=start,
                end_time=end,
                is_available=not any(
                    overlaps(start, end, b.start_time, b.end_time) for b in bookings
                ),
            )
            for start, end in self.slot_bounds()
        ]
