import datetime as dt

from sqlalchemy import JSON, TIMESTAMP, Date, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class BookingModel(Base):
    __tablename__ = "bookings"
    __table_args__ = (Index("ix_bookings_room_day", "room_id", "date"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    room_id: Mapped[str] = mapped_column(String(32), comment="Booked room")
    user_id: Mapped[str] = mapped_column(String(32), index=True, comment="Creator of the booking")
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text, default="")
    date: Mapped[dt.date] = mapped_column(Date, comment="Calendar day in the canonical zone")
    start_time: Mapped[str] = mapped_column(String(5), comment="HH:MM, inclusive")
    end_time: Mapped[str] = mapped_column(String(5), comment="HH:MM, exclusive")
    status: Mapped[str] = mapped_column(String(16), index=True)
    attendees: Mapped[list[str]] = mapped_column(JSON, default=list)
    version: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="Bumped on every write, compared on update"
    )
    created_at: Mapped[dt.datetime] = mapped_column(TIMESTAMP(timezone=True))
    updated_at: Mapped[dt.datetime] = mapped_column(TIMESTAMP(timezone=True))

    __mapper_args__ = {"version_id_col": version}
