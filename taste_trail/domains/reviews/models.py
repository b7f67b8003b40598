# taste_trail/domains/reviews/models.py
from datetime import datetime
from typing import Optional

from sqlalchemy import (JSON, Boolean, DateTime, Float, ForeignKey, Integer,
                        String, Text, UniqueConstraint)
from sqlalchemy.orm import Mapped, mapped_column

from taste_trail.shared.database.mixins import TimestampMixin, generate_id
from taste_trail.shared.models.base import Base


class Review(Base, TimestampMixin):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "restaurant_id", name="uq_review_user_restaurant"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("auth_users.id", ondelete="CASCADE"), index=True
    )
    restaurant_id: Mapped[str] = mapped_column(
        String, ForeignKey("restaurants.id", ondelete="CASCADE"), index=True
    )
    rating: Mapped[int] = mapped_column(Integer)
    title: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    content: Mapped[str] = mapped_column(Text)
    visit_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    price_per_person: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    dishes: Mapped[list] = mapped_column(JSON, default=list)
    images: Mapped[list] = mapped_column(JSON, default=list)
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    is_promoted: Mapped[bool] = mapped_column(Boolean, default=False)
    sentiment: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    tags: Mapped[list] = mapped_column(JSON, default=list)


class Comment(Base, TimestampMixin):
    __tablename__ = "review_comments"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    review_id: Mapped[str] = mapped_column(
        String, ForeignKey("reviews.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("auth_users.id", ondelete="CASCADE"), index=True
    )
    parent_id: Mapped[Optional[str]] = mapped_column(
        String, ForeignKey("review_comments.id", ondelete="CASCADE"), nullable=True, index=True
    )
    content: Mapped[str] = mapped_column(Text)
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False)


class Like(Base):
    __tablename__ = "review_likes"
    __table_args__ = (UniqueConstraint("user_id", "review_id", name="uq_like_user_review"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("auth_users.id", ondelete="CASCADE"), index=True
    )
    review_id: Mapped[str] = mapped_column(
        String, ForeignKey("reviews.id", ondelete="CASCADE"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class OwnerResponse(Base, TimestampMixin):
    __tablename__ = "review_owner_responses"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    review_id: Mapped[str] = mapped_column(
        String, ForeignKey("reviews.id", ondelete="CASCADE"), unique=True
    )
    owner_id: Mapped[str] = mapped_column(String, ForeignKey("auth_users.id", ondelete="CASCADE"))
    content: Mapped[str] = mapped_column(Text)
