# taste_trail/domains/owner/service.py
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.exceptions import Conflict, NotFound, PermissionDenied
from taste_trail.domains.auth.dependencies import has_role
from taste_trail.domains.auth.entities import UserRole
from taste_trail.domains.auth.models import User
from taste_trail.domains.notifications.service import notification_service
from taste_trail.domains.restaurants import repository as restaurant_repository
from taste_trail.domains.restaurants.models import Restaurant
from taste_trail.domains.restaurants.service import present
from taste_trail.domains.reviews import repository as review_repository
from taste_trail.domains.reviews.models import Review
from taste_trail.domains.reviews.schemas import OwnerResponseOut
from taste_trail.domains.reviews.service import present_reviews
from taste_trail.shared.utils.logger import get_logger

logger = get_logger(__name__)

RECENT_WINDOW = timedelta(days=30)


class OwnerService:
    async def _managed_restaurant(self, db: AsyncSession, user: User, restaurant_id: str) -> Restaurant:
        restaurant = await restaurant_repository.get_restaurant(db, restaurant_id)
        if not restaurant:
            raise NotFound("Restaurant")
        if restaurant.owner_id != user.id and not has_role(user, UserRole.ADMIN):
            raise PermissionDenied("Access denied. Owner privileges required.")
        return restaurant

    async def _owned_review(
        self, db: AsyncSession, user: User, review_id: str, admin_ok: bool = False
    ) -> tuple[Review, Restaurant]:
        review = await review_repository.get_review(db, review_id)
        if not review:
            raise NotFound("Review")
        restaurant = await restaurant_repository.get_restaurant(db, review.restaurant_id)
        if admin_ok and restaurant and has_role(user, UserRole.ADMIN):
            return review, restaurant
        if not restaurant or restaurant.owner_id != user.id:
            raise PermissionDenied("Only the restaurant owner can respond to its reviews")
        return review, restaurant

    async def list_restaurants(self, db: AsyncSession, user: User) -> dict:
        # admins oversee every restaurant
        owner_id = None if has_role(user, UserRole.ADMIN) else user.id
        rows = await restaurant_repository.list_owned(db, owner_id)
        return {"restaurants": [present(*row) for row in rows]}

    async def restaurant_stats(self, db: AsyncSession, user: User, restaurant_id: str) -> dict:
        await self._managed_restaurant(db, user, restaurant_id)
        _, average, total = await restaurant_repository.get_rated(db, restaurant_id)
        responded = await review_repository.count_responded(db, restaurant_id)
        recent, _ = await review_repository.list_reviews(db, restaurant_id=restaurant_id, limit=5)
        return {
            "totalReviews": total,
            "averageRating": round(average, 2),
            "ratingDistribution": await review_repository.rating_distribution(db, restaurant_id),
            "reviewsLast30Days": await review_repository.count_restaurant_reviews_since(
                db, restaurant_id, datetime.utcnow() - RECENT_WINDOW
            ),
            "responseRate": round(responded / total * 100, 1) if total else 0.0,
            "totalLikes": await review_repository.count_restaurant_likes(db, restaurant_id),
            "recentReviews": await present_reviews(db, recent, user.id),
        }

    async def respond(self, db: AsyncSession, user: User, review_id: str, content: str) -> OwnerResponseOut:
        review, restaurant = await self._owned_review(db, user, review_id)
        reviewer_id, restaurant_name, owner_id = review.user_id, restaurant.name, user.id

        response = await review_repository.get_owner_response(db, review_id)
        created = response is None
        if created:
            try:
                response = await review_repository.create_owner_response(db, review_id, owner_id, content.strip())
                await db.commit()
            except IntegrityError:
                await db.rollback()
                raise Conflict("This review already has a response")
        else:
            response.content = content.strip()
            await db.commit()
        await db.refresh(response)

        if created and reviewer_id != owner_id:
            await notification_service.notify(
                "owner_response",
                reviewer_id,
                from_id=owner_id,
                review_id=review_id,
                data={"restaurant_name": restaurant_name},
            )
        return OwnerResponseOut.model_validate(response)

    async def get_response(self, db: AsyncSession, user: User, review_id: str) -> OwnerResponseOut:
        await self._owned_review(db, user, review_id, admin_ok=True)
        response = await review_repository.get_owner_response(db, review_id)
        if not response:
            raise NotFound("Response")
        return OwnerResponseOut.model_validate(response)

    async def delete_response(self, db: AsyncSession, user: User, review_id: str):
        await self._owned_review(db, user, review_id, admin_ok=True)
        if not await review_repository.delete_owner_response(db, review_id):
            raise NotFound("Response")
        await db.commit()


owner_service = OwnerService()
