from .base import Base
from .users import User
from .rooms import RoomModel, RoomMemberModel
from .bookings import BookingModel

__all__ = ["Base", "User", "RoomModel", "RoomMemberModel", "BookingModel"]
