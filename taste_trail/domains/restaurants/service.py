# taste_trail/domains/restaurants/service.py
from datetime import datetime, timedelta
from typing import Optional, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.config import settings
from taste_trail.core.exceptions import Conflict, NotFound, PermissionDenied
from taste_trail.core.redis import cache
from taste_trail.domains.auth import repository as auth_repository
from taste_trail.domains.auth.dependencies import has_role
from taste_trail.domains.auth.entities import UserRole
from taste_trail.domains.auth.models import User
from taste_trail.domains.auth.schemas import UserSummary
from taste_trail.domains.reviews import repository as review_repository
from taste_trail.shared.schemas.base import page_offset, paginated
from taste_trail.shared.utils.logger import get_logger
from taste_trail.shared.utils.ranking import restaurant_trending_policy, trend_direction
from . import repository
from .geo import bounding_box, within_radius
from .models import Restaurant
from .schemas import (
    CreateRestaurantRequest,
    NearbyRestaurant,
    RestaurantDetail,
    RestaurantOut,
    TrendingRestaurant,
    UpdateRestaurantRequest,
)

logger = get_logger(__name__)

TRENDING_KEY = "restaurants:trending"
TRENDING_WINDOW = timedelta(days=7)


def present(restaurant: Restaurant, average: float, count: int, cls: Type[RestaurantOut] = RestaurantOut, **extra):
    fields = RestaurantOut.model_validate(restaurant).model_dump()
    fields.update(average_rating=round(average, 2), review_count=count, **extra)
    return cls(**fields)


class RestaurantService:
    async def list_restaurants(self, db: AsyncSession, page: int, limit: int, **filters) -> dict:
        rows, total = await repository.list_restaurants(
            db, offset=page_offset(page, limit), limit=limit, **filters
        )
        return paginated("restaurants", [present(*row) for row in rows], page, limit, total)

    async def check_name(self, db: AsyncSession, name: str) -> dict:
        return {"available": await repository.get_by_name(db, name) is None}

    async def create(self, db: AsyncSession, user: User, data: CreateRestaurantRequest) -> RestaurantOut:
        if await repository.get_by_name(db, data.name):
            raise Conflict("A restaurant with this name already exists")

        restaurant = Restaurant(
            **data.model_dump(),
            owner_id=user.id if user.role == UserRole.OWNER.value else None,
            created_by=user.id,
            verified=False,
        )
        db.add(restaurant)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise Conflict("A restaurant with this name already exists")

        logger.info(f"Restaurant {restaurant.id} created by {user.id}")
        return present(restaurant, 0.0, 0)

    async def get_detail(self, db: AsyncSession, restaurant_id: str) -> RestaurantDetail:
        row = await repository.get_rated(db, restaurant_id)
        if not row:
            raise NotFound("Restaurant")
        restaurant = row[0]
        owner = await auth_repository.get_user_by_id(db, restaurant.owner_id) if restaurant.owner_id else None
        return present(
            *row,
            cls=RestaurantDetail,
            owner=UserSummary.model_validate(owner) if owner else None,
        )

    async def update(
        self, db: AsyncSession, user: User, restaurant_id: str, data: UpdateRestaurantRequest
    ) -> RestaurantOut:
        restaurant = await repository.get_restaurant(db, restaurant_id)
        if not restaurant:
            raise NotFound("Restaurant")
        if restaurant.owner_id != user.id and not has_role(user, UserRole.ADMIN):
            raise PermissionDenied("Only the owner or an admin can edit this restaurant")

        changes = data.model_dump(exclude_unset=True)
        name = changes.get("name")
        if name and name.strip().lower() != restaurant.name.lower():
            if await repository.get_by_name(db, name):
                raise Conflict("A restaurant with this name already exists")
            changes["name"] = name.strip()
        for field, value in changes.items():
            if value is not None:
                setattr(restaurant, field, value)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise Conflict("A restaurant with this name already exists")
        return await self.get_detail(db, restaurant_id)

    async def delete(self, db: AsyncSession, restaurant_id: str):
        restaurant = await repository.get_restaurant(db, restaurant_id)
        if not restaurant:
            raise NotFound("Restaurant")
        removed = await review_repository.delete_for_restaurant(db, restaurant_id)
        await db.delete(restaurant)
        await db.commit()
        await cache.delete(TRENDING_KEY)
        logger.info(f"Restaurant {restaurant_id} deleted with {removed} reviews")

    async def trending(self, db: AsyncSession, now: Optional[datetime] = None) -> dict:
        cached = await cache.get_json(TRENDING_KEY)
        if cached is not None:
            return cached

        now = now or datetime.utcnow()
        recent = await repository.review_counts_between(db, now - TRENDING_WINDOW)
        previous = await repository.review_counts_between(db, now - 2 * TRENDING_WINDOW, now - TRENDING_WINDOW)
        candidates = await repository.get_rated_by_ids(db, recent.keys())
        candidates.sort(key=lambda row: row[0].created_at, reverse=True)

        ranked = restaurant_trending_policy().rank(
            candidates,
            lambda row: {"recent_reviews": recent.get(row[0].id, 0), "rating_volume": row[1] * row[2]},
        )
        items = []
        for (restaurant, average, count), score in ranked[: settings.TRENDING_RESTAURANTS_LIMIT]:
            this_week, last_week = recent.get(restaurant.id, 0), previous.get(restaurant.id, 0)
            items.append(
                present(
                    restaurant,
                    average,
                    count,
                    cls=TrendingRestaurant,
                    recent_reviews=this_week,
                    previous_reviews=last_week,
                    trend=trend_direction(this_week, last_week),
                    score=round(score, 4),
                )
            )
        payload = {"restaurants": items}
        await cache.set_json(TRENDING_KEY, payload, settings.TRENDING_CACHE_TTL)
        return payload

    async def nearby(
        self,
        db: AsyncSession,
        lat: float,
        lng: float,
        radius_km: float,
        limit: int,
        category: Optional[str] = None,
        min_rating: Optional[float] = None,
        max_price: Optional[int] = None,
    ) -> dict:
        candidates = await repository.find_in_box(
            db, bounding_box(lat, lng, radius_km), category=category, min_rating=min_rating, max_price=max_price
        )
        hits = within_radius(lat, lng, radius_km, candidates, lambda row: (row[0].latitude, row[0].longitude), limit)
        return {
            "restaurants": [
                present(*row, cls=NearbyRestaurant, distance=round(distance, 2)) for row, distance in hits
            ],
            "center": {"lat": lat, "lng": lng},
            "radius": radius_km,
        }


restaurant_service = RestaurantService()
