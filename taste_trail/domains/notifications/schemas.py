from datetime import datetime
from typing import List, Optional

from pydantic import Field

from taste_trail.domains.auth.entities import UserRole
from taste_trail.shared.schemas.base import CamelModel


class NotificationOut(CamelModel):
    id: str
    type: str
    title: str
    message: str
    from_id: Optional[str] = None
    review_id: Optional[str] = None
    comment_id: Optional[str] = None
    data: dict = {}
    read: bool
    created_at: datetime


class MarkReadRequest(CamelModel):
    ids: Optional[List[str]] = None


class PreferencesOut(CamelModel):
    push_enabled: bool
    email_enabled: bool


class PreferencesUpdate(CamelModel):
    push_enabled: Optional[bool] = None
    email_enabled: Optional[bool] = None


class AnnouncementRequest(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1, max_length=2000)
    roles: Optional[List[UserRole]] = None
    verified: Optional[bool] = None
