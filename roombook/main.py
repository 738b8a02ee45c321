import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from roombook.config import settings
from roombook.dependencies import engine
from roombook.models import Base
from roombook.routers import router
from roombook.services.errors import (
    AlreadyAttendee,
    BookingTerminal,
    DuplicateMember,
    InvalidEmail,
    InvalidTimeRange,
    InvalidTransition,
    MemberNotFound,
    NotFound,
    ReservationError,
    TimeConflict,
    Unauthorized,
    WriteConflict,
)
from roombook.utils.log import configure_logging

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[ReservationError], int] = {
    NotFound: 404,
    Unauthorized: 403,
    TimeConflict: 409,
    DuplicateMember: 409,
    AlreadyAttendee: 409,
    WriteConflict: 409,
    InvalidTimeRange: 400,
    InvalidEmail: 400,
    BookingTerminal: 400,
    InvalidTransition: 400,
    MemberNotFound: 400,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.logging)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables ready, serving bookings from %s", engine.url.render_as_string())
    yield
    await engine.dispose()


app = FastAPI(
    title="Roombook - Meeting Room Reservations",
    description="API for booking shared meeting rooms without double-booking",
    version="1.0.0",
    docs_url="/docs",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ReservationError)
async def reservation_error_handler(request: Request, exc: ReservationError):
    return JSONResponse(
        status_code=ERROR_STATUS.get(type(exc), 400),
        content={"detail": str(exc), "code": type(exc).__name__},
    )


app.include_router(router)
