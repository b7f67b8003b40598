from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from taste_trail.domains.auth.schemas import UserSummary
from taste_trail.shared.schemas.base import CamelModel


class RestaurantBase(CamelModel):
    description: str = Field(min_length=10, max_length=500)
    address: str = Field(min_length=5, max_length=300)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    price_range: int = Field(default=2, ge=1, le=4)
    categories: List[str] = []
    amenities: List[str] = []
    images: List[str] = []
    phone: Optional[str] = None
    website: Optional[str] = None
    opening_hours: dict = {}


class CreateRestaurantRequest(RestaurantBase):
    name: str = Field(min_length=2, max_length=100)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        return v.strip()


class UpdateRestaurantRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, min_length=10, max_length=500)
    address: Optional[str] = Field(default=None, min_length=5, max_length=300)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    price_range: Optional[int] = Field(default=None, ge=1, le=4)
    categories: Optional[List[str]] = None
    amenities: Optional[List[str]] = None
    images: Optional[List[str]] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    opening_hours: Optional[dict] = None


class RestaurantOut(CamelModel):
    id: str
    name: str
    description: str
    address: str
    latitude: float
    longitude: float
    price_range: int
    categories: List[str] = []
    amenities: List[str] = []
    images: List[str] = []
    phone: Optional[str] = None
    website: Optional[str] = None
    opening_hours: dict = {}
    owner_id: Optional[str] = None
    verified: bool = False
    created_at: Optional[datetime] = None
    average_rating: float = 0.0
    review_count: int = 0


class RestaurantDetail(RestaurantOut):
    owner: Optional[UserSummary] = None


class NearbyRestaurant(RestaurantOut):
    distance: float


class TrendingRestaurant(RestaurantOut):
    recent_reviews: int
    previous_reviews: int
    trend: Literal["up", "down", "stable"]
    score: float


class RestaurantSummary(CamelModel):
    id: str
    name: str
