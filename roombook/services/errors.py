class ReservationError(Exception):
    """Base class for every failure the reservation core reports."""


class InvalidTimeRange(ReservationError):
    def __init__(self, start_time: str, end_time: str):
        super().__init__(f"start {start_time} is not before end {end_time}")
        self.start_time = start_time
        self.end_time = end_time


class TimeConflict(ReservationError):
    def __init__(self, room_id: str, conflicting_ids: list[str] | None = None):
        super().__init__(f"room {room_id} is already booked in that interval")
        self.room_id = room_id
        self.conflicting_ids = conflicting_ids or []


class NotFound(ReservationError):
    def __init__(self, kind: str, identifier: str):
        super().__init__(f"{kind} {identifier} not found")
        self.kind = kind
        self.identifier = identifier


class BookingTerminal(ReservationError):
    def __init__(self, booking_id: str, status: str):
        super().__init__(f"booking {booking_id} is {status}")
        self.booking_id = booking_id
        self.status = status


class InvalidTransition(ReservationError):
    def __init__(self, current: str, target: str):
        super().__init__(f"no transition from {current} to {target}")
        self.current = current
        self.target = target


class DuplicateMember(ReservationError):
    def __init__(self, room_id: str, email: str):
        super().__init__(f"{email} is already a member of room {room_id}")
        self.room_id = room_id
        self.email = email


class MemberNotFound(ReservationError):
    def __init__(self, room_id: str, email: str):
        super().__init__(f"{email} is not a member of room {room_id}")
        self.room_id = room_id
        self.email = email


class AlreadyAttendee(ReservationError):
    def __init__(self, booking_id: str, email: str):
        super().__init__(f"{email} already attends booking {booking_id}")
        self.booking_id = booking_id
        self.email = email


class Unauthorized(ReservationError):
    def __init__(self, actor_id: str, action: str):
        super().__init__(f"{actor_id} may not {action}")
        self.actor_id = actor_id
        self.action = action


class WriteConflict(ReservationError):
    """The store rejected a write because the record changed underneath it."""

    def __init__(self, kind: str, identifier: str):
        super().__init__(f"concurrent write on {kind} {identifier}")
        self.kind = kind
        self.identifier = identifier


class InvalidEmail(ReservationError):
    def __init__(self, email: str):
        super().__init__(f"{email!r} is not an email address")
        self.email = email
