# taste_trail/domains/restaurants/models.py
from typing import Optional

from sqlalchemy import JSON, Boolean, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from taste_trail.shared.database.mixins import TimestampMixin, generate_id
from taste_trail.shared.models.base import Base


class Restaurant(Base, TimestampMixin):
    __tablename__ = "restaurants"
    __table_args__ = (Index("ix_restaurants_lat_lng", "latitude", "longitude"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_id)
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    description: Mapped[str] = mapped_column(Text)
    address: Mapped[str] = mapped_column(String(300))
    latitude: Mapped[float] = mapped_column(Float)
    longitude: Mapped[float] = mapped_column(Float)
    price_range: Mapped[int] = mapped_column(Integer, default=2)
    categories: Mapped[list] = mapped_column(JSON, default=list)
    amenities: Mapped[list] = mapped_column(JSON, default=list)
    images: Mapped[list] = mapped_column(JSON, default=list)
    opening_hours: Mapped[dict] = mapped_column(JSON, default=dict)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    owner_id: Mapped[Optional[str]] = mapped_column(
        String, ForeignKey("auth_users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_by: Mapped[Optional[str]] = mapped_column(
        String, ForeignKey("auth_users.id", ondelete="SET NULL"), nullable=True
    )
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
