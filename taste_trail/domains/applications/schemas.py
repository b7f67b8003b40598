from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, model_validator

from taste_trail.domains.auth.schemas import UserSummary
from taste_trail.domains.restaurants.schemas import RestaurantSummary
from taste_trail.shared.schemas.base import CamelModel
from .transitions import ApplicationStatus


class ClaimRequest(CamelModel):
    phone_number: str = Field(min_length=10, max_length=30)
    email: EmailStr
    position: str = Field(min_length=2, max_length=100)
    message: str = Field(min_length=50, max_length=2000)
    business_license: Optional[str] = None
    ownership_proof: Optional[str] = None
    tax_document: Optional[str] = None
    additional_documents: List[str] = []


class ClaimOut(CamelModel):
    id: str
    user_id: str
    restaurant_id: str
    status: str
    is_dispute: bool
    phone_number: str
    email: str
    position: str
    message: str
    business_license: Optional[str] = None
    ownership_proof: Optional[str] = None
    tax_document: Optional[str] = None
    additional_documents: List[str] = []
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    reviewer_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    user: Optional[UserSummary] = None
    restaurant: Optional[RestaurantSummary] = None


class InfluencerApplyRequest(CamelModel):
    instagram_handle: Optional[str] = Field(default=None, max_length=100)
    youtube_channel: Optional[str] = Field(default=None, max_length=200)
    tiktok_handle: Optional[str] = Field(default=None, max_length=100)
    follower_count: int = Field(ge=0)
    content_type: str = Field(min_length=2, max_length=100)
    reason: str = Field(min_length=50, max_length=2000)

    @model_validator(mode="after")
    def _needs_a_channel(self):
        if not (self.instagram_handle or self.youtube_channel or self.tiktok_handle):
            raise ValueError("Provide at least one social channel")
        return self


class InfluencerApplicationOut(CamelModel):
    id: str
    user_id: str
    status: str
    instagram_handle: Optional[str] = None
    youtube_channel: Optional[str] = None
    tiktok_handle: Optional[str] = None
    follower_count: int
    content_type: str
    reason: str
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    reviewer_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    user: Optional[UserSummary] = None


class ReviewDecision(CamelModel):
    status: ApplicationStatus
    notes: Optional[str] = Field(default=None, max_length=1000)
