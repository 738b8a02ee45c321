from pydantic import BaseModel, Field

from roombook.schemas.room import Email


class RegisterRequest(BaseModel):
    email: Email
    password: str = Field(..., min_length=8)
    display_name: str = ""


class LoginRequest(BaseModel):
    email: Email
    password: str
