import os

os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_PORT", "5432")
os.environ.setdefault("POSTGRES_USER", "roombook")
os.environ.setdefault("POSTGRES_PASSWORD", "roombook")
os.environ.setdefault("POSTGRES_DB", "roombook")
os.environ.setdefault("POSTGRES_DSN", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTH_SECRET_KEY", "test-secret-key")
os.environ.setdefault("AUTH_COOKIE_SECURE", "false")

from datetime import date

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from roombook.models import Base
from roombook.schemas.booking import BookingCreate
from roombook.schemas.room import RoomCreate, RoomRole
from roombook.schemas.user import Actor
from roombook.services import membership
from roombook.services.reservations import ReservationService
from roombook.services.rooms import RoomService
from roombook.storage import MemoryStore

DAY = date(2024, 6, 1)
OWNER = "u-owner"
ADMIN_EMAIL = "admin@example.com"
USER_EMAIL = "user@example.com"

OWNER_ACTOR = Actor(id=OWNER, email="owner@example.com")
ADMIN_ACTOR = Actor(id="u-admin", email=ADMIN_EMAIL)
USER_ACTOR = Actor(id="u-user", email=USER_EMAIL)
OTHER_ACTOR = Actor(id="u-other", email="other@example.com")


class Caller:
    """Stands in for the cookie-based current user; switch `actor` mid-test."""

    def __init__(self):
        self.actor = OWNER_ACTOR

    def __call__(self) -> Actor:
        return self.actor


@pytest.fixture
def caller():
    return Caller()


@pytest.fixture
async def session_maker():
    """Session factory over a fresh in-memory SQLite database."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, autoflush=False, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def rooms(store):
    return RoomService(store)


@pytest.fixture
def reservations(store):
    return ReservationService(store)


@pytest.fixture
async def room(store, rooms):
    """Room R1 owned by u-owner with one admin and one plain member."""
    room = await rooms.create_room(RoomCreate(name="R1", description="4th floor"), OWNER)
    room = membership.add_member(room, ADMIN_EMAIL, RoomRole.ADMIN)
    room = membership.add_member(room, USER_EMAIL, RoomRole.USER)
    return await store.save_room(room)


def booking_input(room_id, start="09:00", end="10:00", day=DAY, **extra):
    return BookingCreate(
        room_id=room_id,
        title=extra.pop("title", "Standup"),
        date=day,
        start_time=start,
        end_time=end,
        **extra,
    )
