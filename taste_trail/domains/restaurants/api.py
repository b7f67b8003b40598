# taste_trail/domains/restaurants/api.py
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.database import get_db
from taste_trail.domains.applications.schemas import ClaimRequest
from taste_trail.domains.applications.service import application_service
from taste_trail.domains.auth.dependencies import get_current_user, get_optional_user, require_roles
from taste_trail.domains.auth.entities import UserRole
from taste_trail.domains.auth.models import User
from taste_trail.domains.reviews.service import review_service
from .schemas import CreateRestaurantRequest, UpdateRestaurantRequest
from .service import restaurant_service

router = APIRouter()


@router.get("")
async def list_restaurants(
    search: Optional[str] = Query(None, max_length=100),
    category: Optional[str] = Query(None),
    price_range: Optional[int] = Query(None, ge=1, le=4, alias="priceRange"),
    min_rating: Optional[float] = Query(None, ge=0, le=5, alias="minRating"),
    sort_by: Literal["createdAt", "rating", "reviews"] = Query("createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await restaurant_service.list_restaurants(
        db,
        page,
        limit,
        search=search,
        category=category,
        price_range=price_range,
        min_rating=min_rating,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.post("", status_code=201)
async def create_restaurant(
    data: CreateRestaurantRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"restaurant": await restaurant_service.create(db, user, data)}


@router.get("/check-name")
async def check_name(name: str = Query(..., min_length=1), db: AsyncSession = Depends(get_db)):
    return await restaurant_service.check_name(db, name)


@router.get("/trending")
async def trending_restaurants(db: AsyncSession = Depends(get_db)):
    return await restaurant_service.trending(db)


@router.get("/nearby")
async def nearby_restaurants(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius: float = Query(10.0, ge=0, le=500),
    limit: int = Query(50, ge=1, le=200),
    category: Optional[str] = Query(None),
    min_rating: Optional[float] = Query(None, ge=0, le=5, alias="minRating"),
    max_price: Optional[int] = Query(None, ge=1, le=4, alias="maxPrice"),
    db: AsyncSession = Depends(get_db),
):
    return await restaurant_service.nearby(db, lat, lng, radius, limit, category, min_rating, max_price)


@router.get("/{restaurant_id}")
async def get_restaurant(restaurant_id: str, db: AsyncSession = Depends(get_db)):
    return {"restaurant": await restaurant_service.get_detail(db, restaurant_id)}


@router.put("/{restaurant_id}")
async def update_restaurant(
    restaurant_id: str,
    data: UpdateRestaurantRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"restaurant": await restaurant_service.update(db, user, restaurant_id, data)}


@router.delete("/{restaurant_id}", status_code=204)
async def delete_restaurant(
    restaurant_id: str,
    admin: User = Depends(require_roles(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    await restaurant_service.delete(db, restaurant_id)
    return Response(status_code=204)


@router.get("/{restaurant_id}/reviews")
async def restaurant_reviews(
    restaurant_id: str,
    sort: Literal["recent", "rating-high", "rating-low", "likes"] = Query("recent"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return await review_service.list_for_restaurant(db, restaurant_id, viewer, sort, page, limit)


@router.post("/{restaurant_id}/claim", status_code=201)
async def claim_restaurant(
    restaurant_id: str,
    data: ClaimRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.submit_claim(db, user, restaurant_id, data)


@router.get("/{restaurant_id}/claim")
async def my_claim(restaurant_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return {"claim": await application_service.get_my_claim(db, user, restaurant_id)}
