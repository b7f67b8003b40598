from datetime import datetime
from typing import Optional

from pydantic import Field

from taste_trail.shared.schemas.base import CamelModel
from .entities import ModerationCommand, ReportStatus, ReportType, ResolutionAction


class SubmitReportRequest(CamelModel):
    type: ReportType
    target_id: str = Field(min_length=1)
    reason: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)


class ResolveReportRequest(CamelModel):
    report_id: str
    action: ResolutionAction
    notes: Optional[str] = Field(default=None, max_length=1000)


class ReportStatusUpdate(CamelModel):
    status: ReportStatus


class ModerateUserRequest(CamelModel):
    user_id: str
    action: ModerationCommand
    reason: str = Field(min_length=1, max_length=500)
    duration: Optional[int] = Field(default=None, ge=1, le=3650)


class ReportOut(CamelModel):
    id: str
    reporter_id: str
    type: str
    target_id: str
    reason: str
    description: Optional[str] = None
    status: str
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    resolution_notes: Optional[str] = None
    created_at: datetime


class ContentFlagOut(CamelModel):
    id: str
    content_id: str
    content_type: str
    reason: str
    severity: int
    report_count: int
    created_at: datetime


class ModerationActionOut(CamelModel):
    id: str
    moderator_id: str
    target_id: str
    target_type: str
    action: str
    reason: str
    expires_at: Optional[datetime] = None
    report_id: Optional[str] = None
    created_at: datetime
