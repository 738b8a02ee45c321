from datetime import date
from typing import Protocol

from roombook.schemas.booking import Booking, BookingStatus
from roombook.schemas.room import Room


class ReservationStore(Protocol):
    """Persistence the reservation core relies on.

    ``save_booking`` compares ``booking.version`` with the stored one and
    raises ``WriteConflict`` when they differ; the returned record carries
    the bumped version and assigned timestamps.
    """

    async def get_room(self, room_id: str) -> Room | None: ...

    async def list_rooms(self) -> list[Room]: ...

    async def save_room(self, room: Room) -> Room: ...

    async def delete_room(self, room_id: str) -> None: ...

    async def get_booking(self, booking_id: str) -> Booking | None: ...

    async def list_bookings(
        self,
        room_id: str | None = None,
        user_id: str | None = None,
        status: BookingStatus | None = None,
    ) -> list[Booking]: ...

    async def get_bookings_for_room_on_day(self, room_id: str, day: date) -> list[Booking]: ...

    async def save_booking(self, booking: Booking) -> Booking: ...

    async def delete_booking(self, booking_id: str) -> None: ...
