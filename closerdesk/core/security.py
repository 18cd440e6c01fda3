from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from closerdesk.core.config import settings


class TokenError(Exception):
    pass


def _secret() -> str:
    if not settings.JWT_SECRET:
        raise RuntimeError("JWT_SECRET or NEXTAUTH_SECRET environment variable is required")
    return settings.JWT_SECRET


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, _secret(), algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, _secret(), algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise TokenError(str(e)) from e


def strip_bearer(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    if value.startswith("Bearer "):
        return value[len("Bearer "):]
    return value
