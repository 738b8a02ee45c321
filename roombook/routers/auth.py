import shortuuid
from fastapi import APIRouter, Cookie, Depends, HTTPException, Response
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roombook.config import settings
from roombook.dependencies import get_db
from roombook.models.users import User
from roombook.schemas.auth import LoginRequest, RegisterRequest
from roombook.utils.auth import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)

router = APIRouter(prefix="/auth", tags=["auth"])


def set_auth_cookies(response: Response, access_token: str, refresh_token: str):
    """Put both tokens into cookies"""

    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=settings.auth.cookie_httponly,
        secure=settings.auth.cookie_secure,
        samesite=settings.auth.cookie_samesite,
        max_age=settings.auth.access_token_expire_minutes * 60,
        domain=settings.auth.cookie_domain,
    )

    response.set_cookie(
        key="refresh_token",
        value=refresh_token,
        httponly=True,
        secure=settings.auth.cookie_secure,
        samesite=settings.auth.cookie_samesite,
        max_age=settings.auth.refresh_token_expire_days * 24 * 60 * 60,
        domain=settings.auth.cookie_domain,
    )


def issue_tokens(response: Response, user: User) -> None:
    set_auth_cookies(
        response,
        create_access_token({"sub": user.id}),
        create_refresh_token({"sub": user.id}),
    )


@router.post("/login")
async def login(
    data: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)
):
    """Log in and set the auth cookies"""
    result = await db.execute(select(User).where(User.email == data.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    issue_tokens(response, user)
    return {"message": "Login successful"}


@router.post("/register")
async def register(
    data: RegisterRequest, response: Response, db: AsyncSession = Depends(get_db)
):
    """Register and set the auth cookies"""
    result = await db.execute(select(User).where(User.email == data.email))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="User already exists")

    user = User(
        id=shortuuid.uuid(),
        email=data.email,
        display_name=data.display_name,
        password_hash=hash_password(data.password),
    )
    db.add(user)
    await db.commit()

    issue_tokens(response, user)
    return {"message": "User registered successfully", "id": user.id}


@router.post("/logout")
async def logout(response: Response):
    """Drop the auth cookies"""
    for key in ("access_token", "refresh_token"):
        response.delete_cookie(
            key=key,
            httponly=settings.auth.cookie_httponly,
            secure=settings.auth.cookie_secure,
            samesite=settings.auth.cookie_samesite,
            domain=settings.auth.cookie_domain,
        )
    return {"message": "Logout successful"}


@router.post("/refresh")
async def refresh(
    response: Response,
    refresh_token: str = Cookie(None, include_in_schema=False),
    db: AsyncSession = Depends(get_db),
):
    """Swap a refresh token for a new token pair"""

    if not refresh_token:
        raise HTTPException(status_code=401, detail="Refresh token missing")

    try:
        payload = decode_token(refresh_token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired refresh token")

    if payload.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    issue_tokens(response, user)
    return {"message": "Token refreshed successfully"}
