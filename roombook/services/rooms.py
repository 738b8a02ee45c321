import logging

import shortuuid

from roombook.schemas.room import Room, RoomCreate, RoomRole, RoomUpdate
from roombook.services import membership
from roombook.services.errors import NotFound
from roombook.storage.base import ReservationStore

logger = logging.getLogger(__name__)


class RoomService:
    """Room records and their member lists.

    Every mutator takes the acting user and checks it against the room's
    owner and admin members before writing.
    """

    def __init__(self, store: ReservationStore):
        self.store = store

    async def get_room(self, room_id: str) -> Room:
        room = await self.store.get_room(room_id)
        if room is None:
            raise NotFound("room", room_id)
        return room

    async def list_rooms(self) -> list[Room]:
        return await self.store.list_rooms()

    async def create_room(self, data: RoomCreate, actor_id: str) -> Room:
        room = Room(
            id=shortuuid.uuid(),
            name=data.name,
            description=data.description,
            created_by=actor_id,
        )
        room = await self.store.save_room(room)
        logger.info("Room %s created by %s", room.id, actor_id)
        return room

    async def update_room(
        self, room_id: str, data: RoomUpdate, actor_id: str, actor_email: str | None
    ) -> Room:
        room = await self.get_room(room_id)
        membership.ensure_can_manage(room, actor_id, actor_email)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        room = await self.store.save_room(room.model_copy(update=changes))
        logger.info("Room %s updated by %s: %s", room_id, actor_id, ", ".join(sorted(changes)))
        return room

    async def delete_room(self, room_id: str, actor_id: str) -> None:
        room = await self.get_room(room_id)
        membership.ensure_can_delete(room, actor_id)
        await self.store.delete_room(room_id)
        logger.info("Room %s deleted by %s", room_id, actor_id)

    async def add_member(
        self, room_id: str, email: str, role: RoomRole, actor_id: str, actor_email: str | None
    ) -> Room:
        room = await self.get_room(room_id)
        membership.ensure_can_manage(room, actor_id, actor_email)
        room = await self.store.save_room(membership.add_member(room, email, role))
        logger.info("%s added to room %s as %s", email, room_id, role.value)
        return room

    async def remove_member(
        self, room_id: str, email: str, actor_id: str, actor_email: str | None
    ) -> Room:
        room = await self.get_room(room_id)
        membership.ensure_can_manage(room, actor_id, actor_email)
        room = await self.store.save_room(membership.remove_member(room, email))
        logger.info("%s removed from room %s", email, room_id)
        return room

    async def role_in_room(self, room_id: str, email: str | None) -> RoomRole | None:
        return membership.role_of(await self.get_room(room_id), email)
