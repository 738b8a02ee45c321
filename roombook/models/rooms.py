from datetime import datetime

from sqlalchemy import TIMESTAMP, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class RoomModel(Base):
    __tablename__ = "rooms"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), index=True, comment="Display name")
    description: Mapped[str] = mapped_column(Text, default="", comment="Display description")
    created_by: Mapped[str] = mapped_column(
        String(32), comment="Id of the user who created the room and owns it"
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), comment="When the room was created"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), comment="When the room was last changed"
    )

    members: Mapped[list["RoomMemberModel"]] = relationship(
        "RoomMemberModel",
        back_populates="room",
        lazy="selectin",
        cascade="all, delete-orphan",
    )


class RoomMemberModel(Base):
    """Member rows of a room, one per email"""

    __tablename__ = "room_members"
    __table_args__ = (UniqueConstraint("room_id", "email", name="uq_room_member_email"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    room_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("rooms.id", ondelete="CASCADE"),
        comment="Room the member belongs to",
    )
    email: Mapped[str] = mapped_column(String(320), comment="Member email")
    role: Mapped[str] = mapped_column(String(16), comment="admin or user")
    added_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), comment="When the member was added"
    )

    room: Mapped["RoomModel"] = relationship(
        "RoomModel", back_populates="members", lazy="selectin"
    )
