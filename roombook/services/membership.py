"""Room ownership and member roles.

The owner (``Room.created_by``) is never a member row: owner authority
comes from the id match alone, so removing a member can't revoke it.
"""

from datetime import datetime, timezone

from roombook.schemas.room import Room, RoomMember, RoomRole, normalize_email
from roombook.services.errors import (
    DuplicateMember,
    InvalidEmail,
    MemberNotFound,
    Unauthorized,
)


def checked_email(value: str) -> str:
    try:
        return normalize_email(value)
    except ValueError:
        raise InvalidEmail(value) from None


def role_of(room: Room, email: str | None) -> RoomRole | None:
    if not email:
        return None
    member = room.members.get(email.strip().lower())
    return member.role if member else None


def can_manage(room: Room, actor_id: str, actor_email: str | None) -> bool:
    if actor_id == room.created_by:
        return True
    return role_of(room, actor_email) == RoomRole.ADMIN


def can_delete(room: Room, actor_id: str) -> bool:
    return actor_id == room.created_by


def ensure_can_manage(room: Room, actor_id: str, actor_email: str | None) -> None:
    if not can_manage(room, actor_id, actor_email):
        raise Unauthorized(actor_id, f"manage room {room.id}")


def ensure_can_delete(room: Room, actor_id: str) -> None:
    if not can_delete(room, actor_id):
        raise Unauthorized(actor_id, f"delete room {room.id}")


def add_member(room: Room, email: str, role: RoomRole, now: datetime | None = None) -> Room:
    email = checked_email(email)
    if email in room.members:
        raise DuplicateMember(room.id, email)
    members = dict(room.members)
    members[email] = RoomMember(
        email=email, role=role, added_at=now or datetime.now(timezone.utc)
    )
    return room.model_copy(update={"members": members})


def remove_member(room: Room, email: str) -> Room:
    email = email.strip().lower()
    if email not in room.members:
        raise MemberNotFound(room.id, email)
    members = {key: value for key, value in room.members.items() if key != email}
    return room.model_copy(update={"members": members})
