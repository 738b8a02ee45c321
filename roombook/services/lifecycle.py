from roombook.schemas.booking import Booking, BookingStatus
from roombook.services.errors import BookingTerminal, InvalidTransition

TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}

ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


def is_terminal(status: BookingStatus) -> bool:
    return status not in ACTIVE_STATUSES


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in TRANSITIONS[current]


def transition(current: BookingStatus, target: BookingStatus) -> BookingStatus:
    """Validate a single edge of the status machine and return the new state."""
    if not can_transition(current, target):
        raise InvalidTransition(current.value, target.value)
    return target


def ensure_editable(booking: Booking) -> None:
    if is_terminal(booking.status):
        raise BookingTerminal(booking.id, booking.status.value)
