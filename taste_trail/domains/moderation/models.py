# taste_trail/domains/moderation/models.py
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from taste_trail.shared.database.mixins import TimestampMixin, generate_id
from taste_trail.shared.models.base import Base
from .entities import ReportStatus


class Report(Base, TimestampMixin):
    __tablename__ = "moderation_reports"
    __table_args__ = (
        UniqueConstraint("reporter_id", "type", "target_id", name="uq_report_reporter_target"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    reporter_id: Mapped[str] = mapped_column(
        String, ForeignKey("auth_users.id", ondelete="CASCADE"), index=True
    )
    type: Mapped[str] = mapped_column(String(20))
    target_id: Mapped[str] = mapped_column(String, index=True)
    reason: Mapped[str] = mapped_column(String(100))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=ReportStatus.PENDING.value, index=True)
    resolved_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class ContentFlag(Base, TimestampMixin):
    __tablename__ = "moderation_content_flags"
    __table_args__ = (
        UniqueConstraint("content_id", "content_type", name="uq_flag_content"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    content_id: Mapped[str] = mapped_column(String)
    content_type: Mapped[str] = mapped_column(String(20))
    reason: Mapped[str] = mapped_column(String(100))
    severity: Mapped[int] = mapped_column(Integer, index=True)
    report_count: Mapped[int] = mapped_column(Integer, default=1)


class ModerationAction(Base):
    __tablename__ = "moderation_actions"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    moderator_id: Mapped[str] = mapped_column(String, index=True)
    target_id: Mapped[str] = mapped_column(String, index=True)
    target_type: Mapped[str] = mapped_column(String(20))
    action: Mapped[str] = mapped_column(String(30))
    reason: Mapped[str] = mapped_column(Text)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    report_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)


class UserStrike(Base):
    __tablename__ = "moderation_user_strikes"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("auth_users.id", ondelete="CASCADE"), index=True
    )
    action_id: Mapped[str] = mapped_column(
        String, ForeignKey("moderation_actions.id", ondelete="CASCADE")
    )
    reason: Mapped[str] = mapped_column(Text)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
