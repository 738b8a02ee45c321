import logging

import shortuuid

from roombook.schemas.booking import (
    Booking,
    BookingCreate,
    BookingStatus,
    BookingUpdate,
)
from roombook.services import membership
from roombook.services.availability import AvailabilityEngine
from roombook.services.errors import (
    AlreadyAttendee,
    NotFound,
    TimeConflict,
    Unauthorized,
    WriteConflict,
)
from roombook.services.intervals import validate_range
from roombook.services.lifecycle import ensure_editable, is_terminal, transition
from roombook.storage.base import ReservationStore
from roombook.utils.time import to_day

logger = logging.getLogger(__name__)

TIME_FIELDS = ("date", "start_time", "end_time")


class ReservationService:
    """Create, edit, join, cancel and delete bookings.

    Time-affecting writes are checked against the room's active bookings
    first. The check and the write are not atomic: if the store rejects
    the write as concurrent, the check is re-run so a lost race surfaces
    as ``TimeConflict`` rather than a double booking.
    """

    def __init__(
        self,
        store: ReservationStore,
        availability: AvailabilityEngine | None = None,
        timezone: str = "UTC",
    ):
        self.store = store
        self.availability = availability or AvailabilityEngine(store)
        self.timezone = timezone

    async def get(self, booking_id: str) -> Booking:
        booking = await self.store.get_booking(booking_id)
        if booking is None:
            raise NotFound("booking", booking_id)
        return booking

    async def list_bookings(
        self,
        room_id: str | None = None,
        user_id: str | None = None,
        status: BookingStatus | None = None,
    ) -> list[Booking]:
        return await self.store.list_bookings(room_id=room_id, user_id=user_id, status=status)

    async def user_bookings(self, user_id: str) -> list[Booking]:
        return await self.list_bookings(user_id=user_id)

    async def create(self, data: BookingCreate, actor_id: str) -> Booking:
        validate_range(data.start_time, data.end_time)
        if await self.store.get_room(data.room_id) is None:
            raise NotFound("room", data.room_id)

        booking = Booking(
            id=shortuuid.uuid(),
            room_id=data.room_id,
            user_id=actor_id,
            title=data.title,
            description=data.description,
            date=to_day(data.date, self.timezone),
            start_time=data.start_time,
            end_time=data.end_time,
            status=BookingStatus.PENDING,
            attendees=data.attendees or [],
        )
        await self._ensure_free(booking)
        saved = await self._save(booking, recheck=True)
        logger.info(
            "Booking %s created in room %s on %s %s-%s by %s",
            saved.id, saved.room_id, saved.date, saved.start_time, saved.end_time, actor_id,
        )
        return saved

    async def update(self, data: BookingUpdate) -> Booking:
        current = await self.get(data.id)
        ensure_editable(current)

        changes = {
            key: value
            for key, value in data.model_dump(exclude_unset=True, exclude={"id"}).items()
            if value is not None
        }
        if "date" in changes:
            changes["date"] = to_day(changes["date"], self.timezone)
        if "status" in changes and changes["status"] != current.status:
            changes["status"] = transition(current.status, changes["status"])

        updated = current.model_copy(update=changes)
        moves = any(field in changes for field in TIME_FIELDS)
        if moves:
            validate_range(updated.start_time, updated.end_time)
        # A booking leaving the active states no longer blocks anything.
        blocks = moves and not is_terminal(updated.status)
        if blocks:
            await self._ensure_free(updated)

        saved = await self._save(updated, recheck=blocks)
        logger.info("Booking %s updated: %s", saved.id, ", ".join(sorted(changes)) or "no changes")
        return saved

    async def join(self, booking_id: str, email: str) -> Booking:
        booking = await self.get(booking_id)
        email = membership.checked_email(email)
        if email in booking.attendees:
            raise AlreadyAttendee(booking.id, email)
        ensure_editable(booking)

        joined = booking.model_copy(update={"attendees": [*booking.attendees, email]})
        saved = await self._save(joined)
        logger.info("%s joined booking %s", email, saved.id)
        return saved

    async def cancel(self, booking_id: str) -> Booking:
        booking = await self.get(booking_id)
        if booking.status == BookingStatus.CANCELLED:
            return booking
        return await self._move(booking, BookingStatus.CANCELLED)

    async def confirm(self, booking_id: str) -> Booking:
        return await self._move(await self.get(booking_id), BookingStatus.CONFIRMED)

    async def complete(self, booking_id: str) -> Booking:
        return await self._move(await self.get(booking_id), BookingStatus.COMPLETED)

    async def delete(self, booking_id: str) -> None:
        # Callers gate this with can_delete_booking first.
        await self.get(booking_id)
        await self.store.delete_booking(booking_id)
        logger.info("Booking %s deleted", booking_id)

    async def can_edit(self, booking: Booking, actor_id: str, actor_email: str | None) -> bool:
        if booking.user_id == actor_id:
            return True
        room = await self.store.get_room(booking.room_id)
        return room is not None and membership.can_manage(room, actor_id, actor_email)

    async def can_manage_room(self, booking: Booking, actor_id: str, actor_email: str | None) -> bool:
        room = await self.store.get_room(booking.room_id)
        return room is not None and membership.can_manage(room, actor_id, actor_email)

    async def can_delete_booking(self, booking: Booking, actor_id: str) -> bool:
        if booking.user_id == actor_id:
            return True
        room = await self.store.get_room(booking.room_id)
        return room is not None and membership.can_delete(room, actor_id)

    async def ensure_can_edit(self, booking: Booking, actor_id: str, actor_email: str | None) -> None:
        if not await self.can_edit(booking, actor_id, actor_email):
            raise Unauthorized(actor_id, f"edit booking {booking.id}")

    async def _move(self, booking: Booking, target: BookingStatus) -> Booking:
        status = transition(booking.status, target)
        saved = await self._save(booking.model_copy(update={"status": status}))
        logger.info("Booking %s is now %s", saved.id, saved.status.value)
        return saved

    async def _ensure_free(self, booking: Booking) -> None:
        found = await self.availability.conflicts(
            booking.room_id,
            booking.date,
            booking.start_time,
            booking.end_time,
            exclude_booking_id=booking.id,
        )
        if found:
            logger.warning(
                "Room %s is taken on %s %s-%s by %s",
                booking.room_id, booking.date, booking.start_time, booking.end_time,
                ", ".join(b.id for b in found),
            )
            raise TimeConflict(booking.room_id, [b.id for b in found])

    async def _save(self, booking: Booking, recheck: bool = False) -> Booking:
        try:
            return await self.store.save_booking(booking)
        except WriteConflict:
            logger.warning("Lost write race on booking %s", booking.id)
            if recheck:
                await self._ensure_free(booking)
            raise
