from datetime import datetime

from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    id: str = Field(..., description="Unique user id")
    email: str = Field(..., description="User email")
    display_name: str = Field(..., description="Name shown to other users")
    created_at: datetime | None = Field(None, description="When the account was created")


class Actor(BaseModel):
    """Identity of the caller as the reservation core needs it"""

    id: str
    email: str | None = None
