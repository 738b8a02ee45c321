from fastapi import APIRouter

from roombook.dependencies import CurrentActor, Reservations
from roombook.schemas.booking import (
    Booking,
    BookingChanges,
    BookingCreate,
    BookingStatus,
    BookingUpdate,
    JoinRequest,
)
from roombook.services.errors import Unauthorized

router = APIRouter(prefix="/bookings", tags=["bookings"])

MANAGER_STATUSES = {BookingStatus.CONFIRMED, BookingStatus.COMPLETED}


@router.get("", response_model=list[Booking], description="List bookings, newest day first")
async def get_bookings(
    reservations: Reservations,
    room_id: str | None = None,
    user_id: str | None = None,
    status: BookingStatus | None = None,
):
    return await reservations.list_bookings(room_id=room_id, user_id=user_id, status=status)


@router.post(
    "",
    response_model=Booking,
    status_code=201,
    description="Book a room for a time window",
)
async def create_booking(data: BookingCreate, actor: CurrentActor, reservations: Reservations):
    return await reservations.create(data, actor.id)


@router.get("/{booking_id}", response_model=Booking)
async def get_booking(booking_id: str, reservations: Reservations):
    return await reservations.get(booking_id)


@router.patch(
    "/{booking_id}",
    response_model=Booking,
    description="Edit a booking (creator, room owner or room admin)",
)
async def update_booking(
    booking_id: str, data: BookingChanges, actor: CurrentActor, reservations: Reservations
):
    booking = await reservations.get(booking_id)
    await reservations.ensure_can_edit(booking, actor.id, actor.email)
    if data.status in MANAGER_STATUSES and not await reservations.can_manage_room(
        booking, actor.id, actor.email
    ):
        raise Unauthorized(actor.id, f"set booking {booking_id} to {data.status.value}")

    changes = data.model_dump(exclude_unset=True)
    return await reservations.update(BookingUpdate(id=booking_id, **changes))


@router.delete("/{booking_id}", description="Delete a booking (creator or room owner)")
async def delete_booking(booking_id: str, actor: CurrentActor, reservations: Reservations):
    booking = await reservations.get(booking_id)
    if not await reservations.can_delete_booking(booking, actor.id):
        raise Unauthorized(actor.id, f"delete booking {booking_id}")
    await reservations.delete(booking_id)
    return {"ok": True}


@router.post(
    "/{booking_id}/join",
    response_model=Booking,
    description="Add the caller (or, for editors, someone else) to the attendees",
)
async def join_booking(
    booking_id: str,
    actor: CurrentActor,
    reservations: Reservations,
    data: JoinRequest | None = None,
):
    email = data.email if data and data.email else actor.email
    if not email:
        raise Unauthorized(actor.id, f"join booking {booking_id} without an email")
    if email.strip().lower() != (actor.email or "").lower():
        booking = await reservations.get(booking_id)
        await reservations.ensure_can_edit(booking, actor.id, actor.email)
    return await reservations.join(booking_id, email)


@router.post("/{booking_id}/cancel", response_model=Booking)
async def cancel_booking(booking_id: str, actor: CurrentActor, reservations: Reservations):
    booking = await reservations.get(booking_id)
    await reservations.ensure_can_edit(booking, actor.id, actor.email)
    return await reservations.cancel(booking_id)


@router.post("/{booking_id}/confirm", response_model=Booking)
async def confirm_booking(booking_id: str, actor: CurrentActor, reservations: Reservations):
    booking = await reservations.get(booking_id)
    if not await reservations.can_manage_room(booking, actor.id, actor.email):
        raise Unauthorized(actor.id, f"confirm booking {booking_id}")
    return await reservations.confirm(booking_id)


@router.post("/{booking_id}/complete", response_model=Booking)
async def complete_booking(booking_id: str, actor: CurrentActor, reservations: Reservations):
    booking = await reservations.get(booking_id)
    if not await reservations.can_manage_room(booking, actor.id, actor.email):
        raise Unauthorized(actor.id, f"complete booking {booking_id}")
    return await reservations.complete(booking_id)
