# taste_trail/domains/restaurants/repository.py
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import String, and_, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.domains.reviews.models import Review
from .geo import BoundingBox
from .models import Restaurant

RatedRestaurant = Tuple[Restaurant, float, int]


def rating_stats():
    """Average rating and review count per restaurant over visible reviews."""
    return (
        select(
            Review.restaurant_id.label("restaurant_id"),
            func.avg(Review.rating).label("average_rating"),
            func.count(Review.id).label("review_count"),
        )
        .where(Review.is_hidden.is_(False))
        .group_by(Review.restaurant_id)
        .subquery()
    )


def _rated_query():
    stats = rating_stats()
    average = func.coalesce(stats.c.average_rating, 0)
    count = func.coalesce(stats.c.review_count, 0)
    query = select(Restaurant, average.label("average_rating"), count.label("review_count")).outerjoin(
        stats, stats.c.restaurant_id == Restaurant.id
    )
    return query, average, count


def _has_category(category: str):
    # categories is a JSON array; match the quoted element in its text form
    return cast(Restaurant.categories, String).like(f'%"{category}"%')


def _rows(result) -> List[RatedRestaurant]:
    return [(r, float(avg or 0), int(cnt or 0)) for r, avg, cnt in result.all()]


async def get_restaurant(db: AsyncSession, restaurant_id: str) -> Optional[Restaurant]:
    return await db.get(Restaurant, restaurant_id)


async def get_by_name(db: AsyncSession, name: str) -> Optional[Restaurant]:
    result = await db.execute(select(Restaurant).where(func.lower(Restaurant.name) == name.strip().lower()))
    return result.scalars().first()


async def get_rated(db: AsyncSession, restaurant_id: str) -> Optional[RatedRestaurant]:
    query, _, _ = _rated_query()
    rows = _rows(await db.execute(query.where(Restaurant.id == restaurant_id)))
    return rows[0] if rows else None


async def list_restaurants(
    db: AsyncSession,
    *,
    search: Optional[str] = None,
    category: Optional[str] = None,
    price_range: Optional[int] = None,
    min_rating: Optional[float] = None,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
    offset: int = 0,
    limit: int = 20,
) -> Tuple[List[RatedRestaurant], int]:
    query, average, count = _rated_query()
    if search:
        pattern = f"%{search.lower()}%"
        query = query.where(
            or_(
                func.lower(Restaurant.name).like(pattern),
                func.lower(Restaurant.description).like(pattern),
                func.lower(Restaurant.address).like(pattern),
            )
        )
    if category:
        query = query.where(_has_category(category))
    if price_range:
        query = query.where(Restaurant.price_range == price_range)
    if min_rating is not None:
        query = query.where(average >= min_rating)

    total = await db.scalar(select(func.count()).select_from(query.subquery()))

    column = {"rating": average, "reviews": count}.get(sort_by, Restaurant.created_at)
    ordering = column.asc() if sort_order == "asc" else column.desc()
    result = await db.execute(query.order_by(ordering, Restaurant.id).offset(offset).limit(limit))
    return _rows(result), total or 0


async def find_in_box(
    db: AsyncSession,
    box: BoundingBox,
    *,
    category: Optional[str] = None,
    min_rating: Optional[float] = None,
    max_price: Optional[int] = None,
) -> List[RatedRestaurant]:
    """Coarse prefilter for the nearby search; callers apply the exact distance."""
    query, average, _ = _rated_query()
    query = query.where(Restaurant.latitude.between(box.min_lat, box.max_lat))
    if box.min_lng is not None:
        query = query.where(Restaurant.longitude.between(box.min_lng, box.max_lng))
    if category:
        query = query.where(_has_category(category))
    if min_rating is not None:
        query = query.where(average >= min_rating)
    if max_price:
        query = query.where(Restaurant.price_range <= max_price)
    return _rows(await db.execute(query))


async def review_counts_between(db: AsyncSession, start: datetime, end: Optional[datetime] = None) -> Dict[str, int]:
    conditions = [Review.is_hidden.is_(False), Review.created_at >= start]
    if end is not None:
        conditions.append(Review.created_at < end)
    result = await db.execute(
        select(Review.restaurant_id, func.count(Review.id)).where(and_(*conditions)).group_by(Review.restaurant_id)
    )
    return {restaurant_id: count for restaurant_id, count in result.all()}


async def get_rated_by_ids(db: AsyncSession, restaurant_ids) -> List[RatedRestaurant]:
    ids = list(restaurant_ids)
    if not ids:
        return []
    query, _, _ = _rated_query()
    return _rows(await db.execute(query.where(Restaurant.id.in_(ids))))


async def list_owned(db: AsyncSession, owner_id: Optional[str]) -> List[RatedRestaurant]:
    query, _, _ = _rated_query()
    if owner_id:
        query = query.where(Restaurant.owner_id == owner_id)
    return _rows(await db.execute(query.order_by(Restaurant.name)))


async def get_names(db: AsyncSession, restaurant_ids) -> Dict[str, str]:
    ids = {i for i in restaurant_ids if i}
    if not ids:
        return {}
    result = await db.execute(select(Restaurant.id, Restaurant.name).where(Restaurant.id.in_(ids)))
    return {rid: name for rid, name in result.all()}


async def count_restaurants(db: AsyncSession) -> int:
    return await db.scalar(select(func.count()).select_from(Restaurant)) or 0


async def owns_any(db: AsyncSession, user_id: str) -> bool:
    return await db.scalar(select(Restaurant.id).where(Restaurant.owner_id == user_id).limit(1)) is not None
