# taste_trail/domains/applications/models.py
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from taste_trail.shared.database.mixins import TimestampMixin, generate_id
from taste_trail.shared.models.base import Base


class RestaurantClaim(Base, TimestampMixin):
    __tablename__ = "restaurant_claims"
    __table_args__ = (UniqueConstraint("user_id", "restaurant_id", name="uq_claim_user_restaurant"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(String, ForeignKey("auth_users.id", ondelete="CASCADE"), index=True)
    restaurant_id: Mapped[str] = mapped_column(
        String, ForeignKey("restaurants.id", ondelete="CASCADE"), index=True
    )
    status: Mapped[str] = mapped_column(String(20), default="PENDING", index=True)
    is_dispute: Mapped[bool] = mapped_column(Boolean, default=False)

    phone_number: Mapped[str] = mapped_column(String(30))
    email: Mapped[str] = mapped_column(String(255))
    position: Mapped[str] = mapped_column(String(100))
    message: Mapped[str] = mapped_column(Text)
    business_license: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    ownership_proof: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    tax_document: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    additional_documents: Mapped[list] = mapped_column(JSON, default=list)

    reviewed_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    reviewer_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class InfluencerApplication(Base, TimestampMixin):
    __tablename__ = "influencer_applications"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("auth_users.id", ondelete="CASCADE"), unique=True
    )
    status: Mapped[str] = mapped_column(String(20), default="PENDING", index=True)

    instagram_handle: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    youtube_channel: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    tiktok_handle: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    follower_count: Mapped[int] = mapped_column(Integer, default=0)
    content_type: Mapped[str] = mapped_column(String(100))
    reason: Mapped[str] = mapped_column(Text)

    reviewed_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    reviewer_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
