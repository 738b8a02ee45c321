from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from roombook.config import settings

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def _encode(data: dict, lifetime: timedelta, token_type: str) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": datetime.now(timezone.utc) + lifetime, "type": token_type})
    return jwt.encode(
        to_encode,
        settings.auth.secret_key.get_secret_value(),
        algorithm=settings.auth.algorithm,
    )


def create_access_token(data: dict) -> str:
    return _encode(
        data, timedelta(minutes=settings.auth.access_token_expire_minutes), "access"
    )


def create_refresh_token(data: dict) -> str:
    return _encode(data, timedelta(days=settings.auth.refresh_token_expire_days), "refresh")


def decode_token(token: str) -> dict:
    return jwt.decode(
        token,
        settings.auth.secret_key.get_secret_value(),
        algorithms=[settings.auth.algorithm],
    )
