from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.config import settings
from taste_trail.core.database import get_db
from taste_trail.core.exception_handlers import AUTH_COOKIES
from taste_trail.domains.social import repository as social_repository
from . import repository
from .dependencies import get_current_user
from .models import User
from .schemas import (
    AuthResponse,
    BanInfo,
    CheckBanRequest,
    CheckBanResponse,
    LoginRequest,
    ProfileOut,
    RegisterRequest,
    UserOut,
)
from .service import IssuedTokens, auth_service

router = APIRouter()


def _set_auth_cookies(response: Response, tokens: IssuedTokens):
    response.set_cookie(
        "refreshToken",
        tokens.refresh_token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 3600,
        path="/",
    )
    _set_access_cookie(response, tokens.access_token)


def _set_access_cookie(response: Response, access_token: str):
    # readable by the client on purpose; the middleware re-verifies it on every request
    response.set_cookie(
        "accessToken",
        access_token,
        httponly=False,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/",
    )


@router.post("/register", status_code=201)
async def register(data: RegisterRequest, response: Response, db: AsyncSession = Depends(get_db)):
    user, tokens = await auth_service.register(db, data)
    _set_auth_cookies(response, tokens)
    return AuthResponse(user=UserOut.model_validate(user), access_token=tokens.access_token)


@router.post("/login")
async def login(data: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)):
    user, tokens = await auth_service.login(db, data)
    _set_auth_cookies(response, tokens)
    return AuthResponse(user=UserOut.model_validate(user), access_token=tokens.access_token)


@router.post("/refresh")
async def refresh(request: Request, response: Response, db: AsyncSession = Depends(get_db)):
    user, access_token = await auth_service.refresh(db, request.cookies.get("refreshToken"))
    _set_access_cookie(response, access_token)
    return AuthResponse(user=UserOut.model_validate(user), access_token=access_token)


@router.post("/logout")
async def logout(request: Request, response: Response, db: AsyncSession = Depends(get_db)):
    await auth_service.logout(db, request.cookies.get("refreshToken"))
    for cookie in AUTH_COOKIES:
        response.delete_cookie(cookie, path="/")
    return {"success": True}


@router.get("/me")
async def me(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    profile = await repository.get_profile(db, user.id)
    counts = await social_repository.get_follow_counts(db, user.id)
    return {
        "user": UserOut.model_validate(user),
        "profile": ProfileOut.model_validate(profile) if profile else None,
        **counts,
    }


@router.post("/check-ban")
async def check_ban(data: CheckBanRequest, db: AsyncSession = Depends(get_db)):
    ban = await auth_service.check_ban(db, data.email)
    if not ban:
        return CheckBanResponse(banned=False)
    return CheckBanResponse(
        banned=True,
        ban=BanInfo(reason=ban.reason, type=ban.action, expires_at=ban.expires_at),
    )
