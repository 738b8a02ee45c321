from datetime import date

from fastapi import APIRouter, Query, status

from roombook.dependencies import Availability, CurrentActor, Rooms
from roombook.schemas.booking import AvailabilityResponse, Booking, TimeSlot
from roombook.schemas.room import (
    MemberAdd,
    RoleResponse,
    RoomCreate,
    RoomResponse,
    RoomUpdate,
)
from roombook.services import membership
from roombook.services.intervals import validate_range
from roombook.utils.time import TIME_PATTERN

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.get("", response_model=list[RoomResponse], description="List rooms by name")
async def get_rooms(rooms: Rooms):
    return [RoomResponse.from_room(room) for room in await rooms.list_rooms()]


@router.post(
    "",
    response_model=RoomResponse,
    status_code=status.HTTP_201_CREATED,
    description="Create a room, the caller becomes its owner",
)
async def create_room(data: RoomCreate, actor: CurrentActor, rooms: Rooms):
    return RoomResponse.from_room(await rooms.create_room(data, actor.id))


@router.get("/{room_id}", response_model=RoomResponse)
async def get_room(room_id: str, rooms: Rooms):
    return RoomResponse.from_room(await rooms.get_room(room_id))


@router.patch(
    "/{room_id}", response_model=RoomResponse, description="Edit a room (owner or admin)"
)
async def update_room(room_id: str, data: RoomUpdate, actor: CurrentActor, rooms: Rooms):
    room = await rooms.update_room(room_id, data, actor.id, actor.email)
    return RoomResponse.from_room(room)


@router.delete("/{room_id}", description="Delete a room (owner only)")
async def delete_room(room_id: str, actor: CurrentActor, rooms: Rooms):
    await rooms.delete_room(room_id, actor.id)
    return {"ok": True}


@router.get(
    "/{room_id}/role",
    response_model=RoleResponse,
    description="What the caller may do in a room",
)
async def get_my_role(room_id: str, actor: CurrentActor, rooms: Rooms):
    room = await rooms.get_room(room_id)
    return RoleResponse(
        email=actor.email or "",
        role=membership.role_of(room, actor.email),
        can_manage=membership.can_manage(room, actor.id, actor.email),
        can_delete=membership.can_delete(room, actor.id),
    )


@router.post(
    "/{room_id}/members",
    response_model=RoomResponse,
    status_code=status.HTTP_201_CREATED,
    description="Add a member (owner or admin)",
)
async def add_member(room_id: str, data: MemberAdd, actor: CurrentActor, rooms: Rooms):
    room = await rooms.add_member(room_id, data.email, data.role, actor.id, actor.email)
    return RoomResponse.from_room(room)


@router.delete(
    "/{room_id}/members/{email}",
    response_model=RoomResponse,
    description="Remove a member (owner or admin)",
)
async def remove_member(room_id: str, email: str, actor: CurrentActor, rooms: Rooms):
    room = await rooms.remove_member(room_id, email, actor.id, actor.email)
    return RoomResponse.from_room(room)


@router.get(
    "/{room_id}/bookings",
    response_model=list[Booking],
    description="Bookings of a room on one day, any status",
)
async def get_room_bookings(
    room_id: str, rooms: Rooms, availability: Availability, day: date = Query(...)
):
    await rooms.get_room(room_id)
    return await availability.bookings_for_room_on_day(room_id, day)


@router.get(
    "/{room_id}/slots",
    response_model=list[TimeSlot],
    description="Slot grid of the operating window for one day",
)
async def get_room_slots(
    room_id: str, rooms: Rooms, availability: Availability, day: date = Query(...)
):
    await rooms.get_room(room_id)
    return await availability.available_slots(room_id, day)


@router.get("/{room_id}/availability", response_model=AvailabilityResponse)
async def check_availability(
    room_id: str,
    rooms: Rooms,
    availability: Availability,
    day: date = Query(...),
    start_time: str = Query(..., pattern=TIME_PATTERN),
    end_time: str = Query(..., pattern=TIME_PATTERN),
):
    validate_range(start_time, end_time)
    await rooms.get_room(room_id)
    return AvailabilityResponse(
        room_id=room_id,
        date=day,
        start_time=start_time,
        end_time=end_time,
        is_available=await availability.is_available(room_id, day, start_time, end_time),
    )
