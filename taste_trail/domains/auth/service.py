from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.exceptions import AuthenticationRequired, Conflict, UserBanned
from taste_trail.domains.moderation import repository as moderation_repository
from taste_trail.domains.notifications.service import notification_service
from taste_trail.shared.utils.logger import get_logger
from taste_trail.shared.utils.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_password_hash,
    verify_password,
)
from . import repository
from .models import Profile, User
from .schemas import LoginRequest, RegisterRequest

logger = get_logger(__name__)


@dataclass
class IssuedTokens:
    access_token: str
    refresh_token: str
    refresh_expires_at: datetime


def access_token_for(user: User) -> str:
    return create_access_token({"sub": user.id, "email": user.email, "role": user.role})


class AuthService:
    async def register(self, db: AsyncSession, data: RegisterRequest) -> tuple[User, IssuedTokens]:
        if await repository.get_user_by_email(db, data.email):
            raise Conflict("Email already registered")

        user = User(
            email=data.email,
            password_hash=get_password_hash(data.password),
            name=data.name.strip(),
            role=data.role.value,
            verified=False,
        )
        db.add(user)
        try:
            await db.flush()
            db.add(Profile(user_id=user.id, dietary_prefs=[], social_links={}))
            tokens = await self._issue_tokens(db, user)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise Conflict("Email already registered")

        logger.info(f"Registered user {user.id} as {user.role}")
        await notification_service.send_welcome(user.id, user.name)
        return user, tokens

    async def login(self, db: AsyncSession, data: LoginRequest) -> tuple[User, IssuedTokens]:
        user = await repository.get_user_by_email(db, data.email)
        if not user or not verify_password(data.password, user.password_hash):
            raise AuthenticationRequired("Invalid email or password")

        await self.ensure_not_banned(db, user.id)

        tokens = await self._issue_tokens(db, user)
        await db.commit()
        return user, tokens

    async def refresh(self, db: AsyncSession, refresh_token: Optional[str]) -> tuple[User, str]:
        if not refresh_token:
            raise AuthenticationRequired("No refresh token")
        payload = decode_refresh_token(refresh_token)
        if not payload:
            raise AuthenticationRequired("Invalid refresh token")

        session = await repository.get_session_by_token(db, refresh_token)
        if not session:
            raise AuthenticationRequired("Invalid refresh token")
        if session.expires_at < datetime.utcnow():
            await repository.delete_session_by_token(db, refresh_token)
            await db.commit()
            raise AuthenticationRequired("Refresh token expired")

        user = await repository.get_user_by_id(db, session.user_id)
        if not user or user.id != payload["sub"]:
            raise AuthenticationRequired("Invalid refresh token")

        await self.ensure_not_banned(db, user.id)
        return user, access_token_for(user)

    async def logout(self, db: AsyncSession, refresh_token: Optional[str]):
        if refresh_token:
            await repository.delete_session_by_token(db, refresh_token)
            await db.commit()

    async def check_ban(self, db: AsyncSession, email: str):
        user = await repository.get_user_by_email(db, email)
        if not user:
            return None
        return await moderation_repository.get_active_ban(db, user.id)

    async def ensure_not_banned(self, db: AsyncSession, user_id: str):
        ban = await moderation_repository.get_active_ban(db, user_id)
        if ban:
            raise UserBanned(reason=ban.reason, ban_type=ban.action, expires_at=ban.expires_at)

    async def _issue_tokens(self, db: AsyncSession, user: User) -> IssuedTokens:
        refresh_token, expires_at = create_refresh_token(user.id)
        await repository.create_session(db, user.id, refresh_token, expires_at)
        return IssuedTokens(
            access_token=access_token_for(user),
            refresh_token=refresh_token,
            refresh_expires_at=expires_at,
        )


auth_service = AuthService()
