from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from taste_trail.shared.schemas.base import CamelModel
from .entities import SELF_ASSIGNABLE_ROLES, UserRole


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    name: str = Field(min_length=2, max_length=100)
    role: UserRole = UserRole.USER

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("role")
    @classmethod
    def _self_assignable(cls, v: UserRole) -> UserRole:
        if v not in SELF_ASSIGNABLE_ROLES:
            raise ValueError("role must be USER, INFLUENCER or OWNER")
        return v


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return v.lower()


class CheckBanRequest(CamelModel):
    email: EmailStr


class ProfileOut(CamelModel):
    bio: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None
    dietary_prefs: List[str] = []
    social_links: dict = {}
    follower_count: int = 0


class UserOut(CamelModel):
    id: str
    email: str
    name: str
    role: str
    verified: bool
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None


class UserSummary(CamelModel):
    """Author / actor shape embedded in reviews, comments and notifications."""

    id: str
    name: str
    role: str
    verified: bool
    avatar: Optional[str] = None


class AuthResponse(CamelModel):
    user: UserOut
    access_token: str


class BanInfo(CamelModel):
    reason: str
    type: str
    expires_at: Optional[datetime] = None


class CheckBanResponse(CamelModel):
    banned: bool
    ban: Optional[BanInfo] = None
