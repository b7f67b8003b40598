from typing import List, Optional

from pydantic import Field

from taste_trail.shared.schemas.base import CamelModel


class UpdateProfileRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    bio: Optional[str] = Field(default=None, max_length=500)
    location: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=30)
    dietary_prefs: Optional[List[str]] = None
    avatar: Optional[str] = None


class FollowStatus(CamelModel):
    is_following: bool
    followers_count: int
    following_count: int
