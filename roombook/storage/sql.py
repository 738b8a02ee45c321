import logging
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from roombook.models.bookings import BookingModel
from roombook.models.rooms import RoomMemberModel, RoomModel
from roombook.schemas.booking import Booking, BookingStatus
from roombook.schemas.room import Room, RoomMember, RoomRole
from roombook.services.errors import WriteConflict
from roombook.services.lifecycle import ACTIVE_STATUSES, is_terminal

logger = logging.getLogger(__name__)

ACTIVE_VALUES = [status.value for status in ACTIVE_STATUSES]


def room_from_row(row: RoomModel) -> Room:
    return Room(
        id=row.id,
        name=row.name,
        description=row.description or "",
        created_by=row.created_by,
        members={
            m.email: RoomMember(email=m.email, role=RoomRole(m.role), added_at=m.added_at)
            for m in row.members
        },
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def booking_from_row(row: BookingModel) -> Booking:
    return Booking(
        id=row.id,
        room_id=row.room_id,
        user_id=row.user_id,
        title=row.title,
        description=row.description or "",
        date=row.date,
        start_time=row.start_time,
        end_time=row.end_time,
        status=BookingStatus(row.status),
        attendees=list(row.attendees or []),
        version=row.version,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlStore:
    """ReservationStore over an async SQLAlchemy session.

    Every mutating call commits its own transaction. Booking rows are
    versioned through the mapper's ``version_id_col``, so a concurrent
    update of the same row fails the flush instead of overwriting it.
    """

    def __init__(self, session: AsyncSession, guard_overlaps: bool = True):
        self.session = session
        self.guard_overlaps = guard_overlaps

    async def get_room(self, room_id: str) -> Room | None:
        row = await self.session.get(RoomModel, room_id, populate_existing=True)
        return room_from_row(row) if row else None

    async def list_rooms(self) -> list[Room]:
        result = await self.session.execute(
            select(RoomModel)
            .order_by(RoomModel.name)
            .execution_options(populate_existing=True)
        )
        return [room_from_row(row) for row in result.scalars().all()]

    async def save_room(self, room: Room) -> Room:
        now = datetime.now(timezone.utc)
        row = await self.session.get(RoomModel, room.id, populate_existing=True)
        if row is None:
            row = RoomModel(id=room.id, created_by=room.created_by, created_at=now, members=[])
            self.session.add(row)

        row.name = room.name
        row.description = room.description
        row.updated_at = now

        # Reconcile in place: re-inserting an email before the old row is
        # deleted would trip the (room_id, email) unique constraint.
        current = {m.email: m for m in row.members}
        for email, member in room.members.items():
            existing = current.pop(email, None)
            if existing is None:
                row.members.append(
                    RoomMemberModel(email=email, role=member.role.value, added_at=member.added_at)
                )
            else:
                existing.role = member.role.value
        for stale in current.values():
            row.members.remove(stale)

        await self.session.commit()
        return room_from_row(row)

    async def delete_room(self, room_id: str) -> None:
        row = await self.session.get(RoomModel, room_id)
        if row is None:
            return
        await self.session.delete(row)
        await self.session.commit()

    async def get_booking(self, booking_id: str) -> Booking | None:
        row = await self.session.get(BookingModel, booking_id, populate_existing=True)
        return booking_from_row(row) if row else None

    async def list_bookings(
        self,
        room_id: str | None = None,
        user_id: str | None = None,
        status: BookingStatus | None = None,
    ) -> list[Booking]:
        stmt = select(BookingModel)
        if room_id is not None:
            stmt = stmt.where(BookingModel.room_id == room_id)
        if user_id is not None:
            stmt = stmt.where(BookingModel.user_id == user_id)
        if status is not None:
            stmt = stmt.where(BookingModel.status == status.value)
        stmt = stmt.order_by(BookingModel.date.desc(), BookingModel.start_time.desc())
        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        return [booking_from_row(row) for row in result.scalars().all()]

    async def get_bookings_for_room_on_day(self, room_id: str, day: date) -> list[Booking]:
        result = await self.session.execute(
            select(BookingModel)
            .where(BookingModel.room_id == room_id, BookingModel.date == day)
            .order_by(BookingModel.start_time)
            .execution_options(populate_existing=True)
        )
        return [booking_from_row(row) for row in result.scalars().all()]

    async def save_booking(self, booking: Booking) -> Booking:
        now = datetime.now(timezone.utc)
        try:
            if self.guard_overlaps and not is_terminal(booking.status):
                await self._check_overlaps(booking)

            row = await self.session.get(BookingModel, booking.id, populate_existing=True)
            if booking.version == 0:
                if row is not None:
                    raise WriteConflict("booking", booking.id)
                row = BookingModel(id=booking.id, created_at=now)
                self.session.add(row)
            elif row is None or row.version != booking.version:
                raise WriteConflict("booking", booking.id)

            row.room_id = booking.room_id
            row.user_id = booking.user_id
            row.title = booking.title
            row.description = booking.description
            row.date = booking.date
            row.start_time = booking.start_time
            row.end_time = booking.end_time
            row.status = booking.status.value
            row.attendees = list(booking.attendees)
            row.updated_at = now

            await self.session.commit()
        except (StaleDataError, IntegrityError):
            await self.session.rollback()
            logger.warning("Concurrent write rejected for booking %s", booking.id)
            raise WriteConflict("booking", booking.id)
        except WriteConflict:
            await self.session.rollback()
            raise
        return booking_from_row(row)

    async def delete_booking(self, booking_id: str) -> None:
        row = await self.session.get(BookingModel, booking_id)
        if row is None:
            return
        await self.session.delete(row)
        await self.session.commit()

    async def _check_overlaps(self, booking: Booking) -> None:
        # Serialize writers per room on backends that support row locks.
        await self.session.execute(
            select(RoomModel.id).where(RoomModel.id == booking.room_id).with_for_update()
        )
        result = await self.session.execute(
            select(BookingModel.id).where(
                BookingModel.room_id == booking.room_id,
                BookingModel.date == booking.date,
                BookingModel.status.in_(ACTIVE_VALUES),
                BookingModel.id != booking.id,
                BookingModel.start_time < booking.end_time,
                BookingModel.end_time > booking.start_time,
            )
        )
        if result.first() is not None:
            raise WriteConflict("booking", booking.id)
