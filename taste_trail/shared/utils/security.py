import uuid
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from taste_trail.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: timedelta | None = None):
    to_encode = data.copy()
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "iat": now, "type": ACCESS_TOKEN_TYPE})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def create_refresh_token(user_id: str) -> tuple[str, datetime]:
    """Refresh tokens use their own secret; jti keeps two logins in the same second distinct."""
    expire = datetime.utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    to_encode = {
        "sub": user_id,
        "jti": uuid.uuid4().hex,
        "exp": expire,
        "type": REFRESH_TOKEN_TYPE,
    }
    token = jwt.encode(to_encode, settings.JWT_REFRESH_SECRET, algorithm=settings.JWT_ALG)
    return token, expire


def decode_token(token: str) -> Optional[dict]:
    """Verify an access token's signature and expiry. Returns the claims or None."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except JWTError:
        return None
    if payload.get("type") != ACCESS_TOKEN_TYPE or not payload.get("sub"):
        return None
    return payload


def decode_refresh_token(token: str) -> Optional[dict]:
    try:
        payload = jwt.decode(token, settings.JWT_REFRESH_SECRET, algorithms=[settings.JWT_ALG])
    except JWTError:
        return None
    if payload.get("type") != REFRESH_TOKEN_TYPE or not payload.get("sub"):
        return None
    return payload
