from fastapi import APIRouter
from .auth import router as auth_router
from .users import router as users_router
from .rooms import router as rooms_router
from .bookings import router as bookings_router

router = APIRouter(prefix="")

router.include_router(auth_router)
router.include_router(users_router)
router.include_router(rooms_router)
router.include_router(bookings_router)
