from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.database import get_db
from taste_trail.core.exceptions import AuthenticationRequired, PermissionDenied
from taste_trail.shared.utils.security import decode_token
from . import repository
from .entities import UserRole
from .models import User

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if not creds or creds.scheme.lower() != "bearer":
        raise AuthenticationRequired("Missing bearer token")
    payload = decode_token(creds.credentials)
    if not payload:
        raise AuthenticationRequired("Invalid or expired token")
    user = await repository.get_user_by_id(db, payload["sub"])
    if not user:
        raise AuthenticationRequired("User not found")
    return user


async def get_optional_user(request: Request, db: AsyncSession = Depends(get_db)) -> Optional[User]:
    """Viewer for public routes; claims were already verified by auth_middleware."""
    claims = getattr(request.state, "claims", None)
    if not claims:
        return None
    return await repository.get_user_by_id(db, claims["sub"])


def require_roles(*roles: UserRole):
    allowed = {r.value for r in roles}

    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise PermissionDenied()
        return user

    return checker


def has_role(user: Optional[User], *roles: UserRole) -> bool:
    return bool(user) and user.role in {r.value for r in roles}
