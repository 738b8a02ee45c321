from .base import ReservationStore
from .memory import MemoryStore
from .sql import SqlStore

__all__ = ["ReservationStore", "MemoryStore", "SqlStore"]
