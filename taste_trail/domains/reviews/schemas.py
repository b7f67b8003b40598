from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from taste_trail.domains.auth.schemas import UserSummary
from taste_trail.domains.restaurants.schemas import RestaurantSummary
from taste_trail.shared.schemas.base import CamelModel


class TimelineFilter(str, Enum):
    ALL = "all"
    TRENDING = "trending"
    VERIFIED = "verified"
    HIGH_RATED = "high-rated"
    FOLLOWING = "following"


class CreateReviewRequest(CamelModel):
    restaurant_id: str
    rating: int = Field(ge=1, le=5)
    title: Optional[str] = Field(default=None, max_length=100)
    content: str = Field(min_length=20, max_length=5000)
    visit_date: Optional[datetime] = None
    price_per_person: Optional[float] = Field(default=None, gt=0)
    dishes: List[str] = []
    images: List[str] = Field(default_factory=list, max_length=10)


class UpdateReviewRequest(CamelModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    title: Optional[str] = Field(default=None, max_length=100)
    content: Optional[str] = Field(default=None, min_length=20, max_length=5000)
    visit_date: Optional[datetime] = None
    price_per_person: Optional[float] = Field(default=None, gt=0)
    dishes: Optional[List[str]] = None
    images: Optional[List[str]] = Field(default=None, max_length=10)


class OwnerResponseOut(CamelModel):
    id: str
    review_id: str
    owner_id: str
    content: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OwnerResponseRequest(CamelModel):
    content: str = Field(min_length=10, max_length=1000)


class ReviewOut(CamelModel):
    id: str
    restaurant_id: str
    user_id: str
    rating: int
    title: Optional[str] = None
    content: str
    visit_date: Optional[datetime] = None
    price_per_person: Optional[float] = None
    dishes: List[str] = []
    images: List[str] = []
    is_hidden: bool = False
    is_promoted: bool = False
    sentiment: Optional[str] = None
    tags: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: Optional[UserSummary] = None
    restaurant: Optional[RestaurantSummary] = None
    like_count: int = 0
    comment_count: int = 0
    is_liked: bool = False
    owner_response: Optional[OwnerResponseOut] = None
    trending_score: Optional[float] = None


class LikeStatus(CamelModel):
    liked: bool
    like_count: int


class CreateCommentRequest(CamelModel):
    content: str = Field(min_length=1, max_length=500)
    parent_id: Optional[str] = None


class UpdateCommentRequest(CamelModel):
    content: str = Field(min_length=1, max_length=500)


class CommentOut(CamelModel):
    id: str
    review_id: str
    user_id: str
    parent_id: Optional[str] = None
    content: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: Optional[UserSummary] = None
    replies: List["CommentOut"] = []
