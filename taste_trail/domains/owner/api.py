# taste_trail/domains/owner/api.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.database import get_db
from taste_trail.core.exceptions import PermissionDenied
from taste_trail.domains.auth.dependencies import get_current_user, has_role
from taste_trail.domains.auth.entities import UserRole
from taste_trail.domains.auth.models import User
from taste_trail.domains.restaurants import repository as restaurant_repository
from taste_trail.domains.reviews.schemas import OwnerResponseRequest
from .service import owner_service

router = APIRouter()


async def owner_or_admin(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)) -> User:
    # an influencer whose claim was approved keeps the INFLUENCER role but owns the restaurant
    if has_role(user, UserRole.OWNER, UserRole.ADMIN) or await restaurant_repository.owns_any(db, user.id):
        return user
    raise PermissionDenied("Access denied. Owner privileges required.")


@router.get("/restaurants")
async def my_restaurants(user: User = Depends(owner_or_admin), db: AsyncSession = Depends(get_db)):
    return await owner_service.list_restaurants(db, user)


@router.get("/restaurants/{restaurant_id}/stats")
async def restaurant_stats(restaurant_id: str, user: User = Depends(owner_or_admin), db: AsyncSession = Depends(get_db)):
    return await owner_service.restaurant_stats(db, user, restaurant_id)


@router.post("/reviews/{review_id}/respond")
async def respond_to_review(
    review_id: str,
    data: OwnerResponseRequest,
    user: User = Depends(owner_or_admin),
    db: AsyncSession = Depends(get_db),
):
    return {"response": await owner_service.respond(db, user, review_id, data.content)}


@router.get("/reviews/{review_id}/respond")
async def get_response(review_id: str, user: User = Depends(owner_or_admin), db: AsyncSession = Depends(get_db)):
    return {"response": await owner_service.get_response(db, user, review_id)}


@router.delete("/reviews/{review_id}/respond")
async def delete_response(review_id: str, user: User = Depends(owner_or_admin), db: AsyncSession = Depends(get_db)):
    await owner_service.delete_response(db, user, review_id)
    return {"message": "Response deleted successfully"}
