from datetime import datetime
from enum import Enum

from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field


def normalize_email(value: str) -> str:
    value = value.strip().lower()
    if "@" not in value:
        raise ValueError("not an email address")
    return value


Email = Annotated[str, AfterValidator(normalize_email)]


class RoomRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class RoomMember(BaseModel):
    """Member row of a room, keyed by email"""

    email: str = Field(..., description="Member email")
    role: RoomRole = Field(..., description="Role of the member in the room")
    added_at: datetime = Field(..., description="When the member was added")


class Room(BaseModel):
    """Room record as the core sees it"""

    id: str = Field(..., min_length=1, description="Opaque room identifier")
    name: str = Field(..., description="Display name")
    description: str = Field(default="", description="Display description")
    created_by: str = Field(..., min_length=1, description="Owner user id")
    members: dict[str, RoomMember] = Field(
        default_factory=dict, description="Members keyed by email"
    )
    created_at: datetime | None = Field(None, description="When the room was created")
    updated_at: datetime | None = Field(None, description="Last modification time")


class RoomCreate(BaseModel):
    """Room creation payload"""

    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    description: str = Field(default="", description="Display description")


class RoomUpdate(BaseModel):
    """Room edit payload"""

    name: str | None = Field(None, min_length=1, max_length=200, description="New name")
    description: str | None = Field(None, description="New description")


class MemberAdd(BaseModel):
    """Member addition payload"""

    email: Email = Field(..., description="Email of the member to add")
    role: RoomRole = Field(default=RoomRole.USER, description="Role to grant")


class RoomResponse(BaseModel):
    """Room as returned by the API"""

    id: str
    name: str
    description: str
    created_by: str = Field(..., description="Owner user id")
    members: list[RoomMember] = Field(..., description="Room members")
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_room(cls, room: Room) -> "RoomResponse":
        return cls(
            id=room.id,
            name=room.name,
            description=room.description,
            created_by=room.created_by,
            members=list(room.members.values()),
            created_at=room.created_at,
            updated_at=room.updated_at,
        )


class RoleResponse(BaseModel):
    """Role lookup answer"""

    email: str
    role: RoomRole | None = Field(None, description="Role in the room, null when not a member")
    can_manage: bool = Field(..., description="Whether the caller may manage the room")
    can_delete: bool = Field(..., description="Whether the caller may delete the room")
