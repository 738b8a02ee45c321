import datetime as dt
from enum import Enum
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field

from roombook.schemas.room import Email, normalize_email
from roombook.utils.time import TIME_PATTERN


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


def unique_emails(values: list[str]) -> list[str]:
    """Normalize emails and drop repeats, keeping first-seen order."""
    seen: dict[str, None] = {}
    for value in values:
        seen.setdefault(normalize_email(value), None)
    return list(seen)


Attendees = Annotated[list[str], AfterValidator(unique_emails)]

# Tried left to right: an aware midnight stays a timestamp.
DayOrTimestamp = Annotated[dt.datetime | dt.date, Field(union_mode="left_to_right")]


class Booking(BaseModel):
    """Booking record as the core sees it"""

    id: str = Field(..., min_length=1, description="Opaque booking identifier")
    room_id: str = Field(..., min_length=1, description="Booked room")
    user_id: str = Field(..., min_length=1, description="Creator of the booking")
    title: str = Field(..., description="Display title")
    description: str = Field(default="", description="Display description")
    date: dt.date = Field(..., description="Calendar day of the booking")
    start_time: str = Field(..., pattern=TIME_PATTERN, description="Start, HH:MM inclusive")
    end_time: str = Field(..., pattern=TIME_PATTERN, description="End, HH:MM exclusive")
    status: BookingStatus = Field(default=BookingStatus.PENDING)
    attendees: Attendees = Field(default_factory=list, description="Attendee emails")
    version: int = Field(default=0, description="Write counter used for optimistic updates")
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class BookingCreate(BaseModel):
    """Booking creation payload"""

    room_id: str = Field(..., min_length=1, description="Room to book")
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="")
    date: DayOrTimestamp = Field(..., description="Day to book, or a timestamp on it")
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    attendees: Attendees | None = Field(None, description="Initial attendee emails")


class BookingChanges(BaseModel):
    """Partial booking edit, only supplied fields are applied"""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    date: DayOrTimestamp | None = None
    start_time: str | None = Field(None, pattern=TIME_PATTERN)
    end_time: str | None = Field(None, pattern=TIME_PATTERN)
    status: BookingStatus | None = None
    attendees: Attendees | None = None


class BookingUpdate(BookingChanges):
    id: str = Field(..., min_length=1, description="Booking to edit")


class JoinRequest(BaseModel):
    email: Email | None = Field(
        None, description="Email to add, defaults to the caller's own email"
    )


class TimeSlot(BaseModel):
    """One cell of the day grid"""

    start_time: str
    end_time: str
    is_available: bool


class AvailabilityResponse(BaseModel):
    room_id: str
    date: dt.date
    start_time: str
    end_time: str
    is_available: bool
