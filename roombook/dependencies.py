from typing import Annotated, AsyncIterable

from fastapi import Cookie, Depends, HTTPException, status
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from roombook.config import settings
from roombook.models.users import User
from roombook.schemas.user import Actor
from roombook.services.availability import AvailabilityEngine
from roombook.services.reservations import ReservationService
from roombook.services.rooms import RoomService
from roombook.storage import ReservationStore, SqlStore
from roombook.utils.auth import decode_token

engine = create_async_engine(settings.postgres.build_dsn())
session_maker = async_sessionmaker(engine, autoflush=False, expire_on_commit=False)


async def get_db() -> AsyncIterable[AsyncSession]:
    async with session_maker() as session:
        yield session


async def get_store(db: AsyncSession = Depends(get_db)) -> ReservationStore:
    return SqlStore(db)


def get_room_service(store: ReservationStore = Depends(get_store)) -> RoomService:
    return RoomService(store)


def get_availability(store: ReservationStore = Depends(get_store)) -> AvailabilityEngine:
    return AvailabilityEngine(
        store,
        opening_time=settings.booking.opening_time,
        closing_time=settings.booking.closing_time,
        slot_minutes=settings.booking.slot_minutes,
    )


def get_reservation_service(
    store: ReservationStore = Depends(get_store),
    availability: AvailabilityEngine = Depends(get_availability),
) -> ReservationService:
    return ReservationService(store, availability, timezone=settings.booking.timezone)


async def get_current_user_from_token(
    access_token: str | None = Cookie(None, include_in_schema=False),
    db: AsyncSession = Depends(get_db),
) -> User:
    if not access_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    try:
        payload = decode_token(access_token)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    user_id = payload.get("sub")
    if user_id is None or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )
    return user


async def get_actor(user: User = Depends(get_current_user_from_token)) -> Actor:
    return Actor(id=user.id, email=user.email)


CurrentUser = Annotated[User, Depends(get_current_user_from_token)]
CurrentActor = Annotated[Actor, Depends(get_actor)]
Rooms = Annotated[RoomService, Depends(get_room_service)]
Reservations = Annotated[ReservationService, Depends(get_reservation_service)]
Availability = Annotated[AvailabilityEngine, Depends(get_availability)]
