from fastapi import APIRouter

from roombook.dependencies import CurrentActor, CurrentUser, Reservations
from roombook.schemas.booking import Booking
from roombook.schemas.user import UserResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_me_user(current_user: CurrentUser):
    return UserResponse(
        id=current_user.id,
        email=current_user.email,
        display_name=current_user.display_name or "",
        created_at=current_user.created_at,
    )


@router.get("/me/bookings", response_model=list[Booking], description="Bookings I created")
async def get_my_bookings(actor: CurrentActor, reservations: Reservations):
    return await reservations.user_bookings(actor.id)
