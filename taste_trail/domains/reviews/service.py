# taste_trail/domains/reviews/service.py
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.event_bus import event_bus
from taste_trail.core.exceptions import AuthenticationRequired, Conflict, NotFound, PermissionDenied
from taste_trail.domains.auth import repository as auth_repository
from taste_trail.domains.auth.dependencies import has_role
from taste_trail.domains.auth.entities import STAFF_ROLES
from taste_trail.domains.auth.models import User
from taste_trail.domains.auth.schemas import UserSummary
from taste_trail.domains.notifications.service import notification_service
from taste_trail.domains.restaurants import repository as restaurant_repository
from taste_trail.domains.restaurants.schemas import RestaurantSummary
from taste_trail.domains.social import repository as social_repository
from taste_trail.shared.schemas.base import page_offset, paginated
from taste_trail.shared.schemas.events import ReviewChanged, ReviewCreated
from taste_trail.shared.utils.logger import get_logger
from . import repository
from .models import Comment, Review
from .schemas import (
    CommentOut,
    CreateCommentRequest,
    CreateReviewRequest,
    LikeStatus,
    OwnerResponseOut,
    ReviewOut,
    UpdateReviewRequest,
)

logger = get_logger(__name__)


def can_see_hidden(review: Review, viewer: Optional[User], restaurant_owner_id: Optional[str] = None) -> bool:
    """Hidden reviews stay visible to their author, the restaurant owner and staff."""
    if not viewer:
        return False
    return viewer.id in (review.user_id, restaurant_owner_id) or has_role(viewer, *STAFF_ROLES)


async def review_visible_to(db: AsyncSession, review: Optional[Review], viewer: Optional[User]) -> bool:
    if not review:
        return False
    if not review.is_hidden:
        return True
    restaurant = await restaurant_repository.get_restaurant(db, review.restaurant_id)
    return can_see_hidden(review, viewer, restaurant.owner_id if restaurant else None)


async def present_reviews(db: AsyncSession, reviews: Sequence[Review], viewer_id: Optional[str] = None) -> List[ReviewOut]:
    """Attach author, restaurant, counters, owner response and the viewer's like in batch."""
    if not reviews:
        return []
    ids = [r.id for r in reviews]
    authors = await auth_repository.get_users_by_ids(db, (r.user_id for r in reviews))
    names = await restaurant_repository.get_names(db, (r.restaurant_id for r in reviews))
    likes = await repository.like_counts(db, ids)
    comments = await repository.comment_counts(db, ids)
    liked = await repository.liked_review_ids(db, viewer_id, ids)
    responses = await repository.owner_responses(db, ids)

    items = []
    for review in reviews:
        item = ReviewOut.model_validate(review)
        author = authors.get(review.user_id)
        item.author = UserSummary.model_validate(author) if author else None
        item.restaurant = RestaurantSummary(id=review.restaurant_id, name=names.get(review.restaurant_id, ""))
        item.like_count = likes.get(review.id, 0)
        item.comment_count = comments.get(review.id, 0)
        item.is_liked = review.id in liked
        response = responses.get(review.id)
        item.owner_response = OwnerResponseOut.model_validate(response) if response else None
        items.append(item)
    return items


class ReviewService:
    async def list_reviews(
        self,
        db: AsyncSession,
        viewer: Optional[User],
        *,
        restaurant_id: Optional[str] = None,
        user_id: Optional[str] = None,
        following: bool = False,
        sort_by: str = "recent",
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        author_ids = None
        if following:
            if not viewer:
                raise AuthenticationRequired("Sign in to see reviews from people you follow")
            author_ids = await social_repository.get_following_ids(db, viewer.id)
        reviews, total = await repository.list_reviews(
            db,
            restaurant_id=restaurant_id,
            user_id=user_id,
            author_ids=author_ids,
            exclude_reported=True,
            sort_by=sort_by,
            offset=page_offset(page, limit),
            limit=limit,
        )
        items = await present_reviews(db, reviews, viewer.id if viewer else None)
        return paginated("reviews", items, page, limit, total)

    async def list_for_restaurant(
        self,
        db: AsyncSession,
        restaurant_id: str,
        viewer: Optional[User],
        sort: str = "recent",
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        restaurant = await restaurant_repository.get_restaurant(db, restaurant_id)
        if not restaurant:
            raise NotFound("Restaurant")
        include_hidden = bool(viewer) and (
            viewer.id == restaurant.owner_id or has_role(viewer, *STAFF_ROLES)
        )
        reviews, total = await repository.list_reviews(
            db,
            restaurant_id=restaurant_id,
            include_hidden=include_hidden,
            sort_by=sort,
            offset=page_offset(page, limit),
            limit=limit,
        )
        items = await present_reviews(db, reviews, viewer.id if viewer else None)
        return paginated("reviews", items, page, limit, total)

    async def get(self, db: AsyncSession, review_id: str, viewer: Optional[User]) -> ReviewOut:
        review = await repository.get_review(db, review_id)
        if not await review_visible_to(db, review, viewer):
            raise NotFound("Review")
        return (await present_reviews(db, [review], viewer.id if viewer else None))[0]

    async def create(self, db: AsyncSession, user: User, data: CreateReviewRequest) -> ReviewOut:
        restaurant = await restaurant_repository.get_restaurant(db, data.restaurant_id)
        if not restaurant:
            raise NotFound("Restaurant")

        author_id, author_name = user.id, user.name
        try:
            review = await repository.create_review(
                db,
                user_id=author_id,
                restaurant_id=data.restaurant_id,
                rating=data.rating,
                title=data.title,
                content=data.content,
                visit_date=data.visit_date,
                price_per_person=data.price_per_person,
                dishes=data.dishes,
                images=data.images,
                tags=[],
            )
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise Conflict("You have already reviewed this restaurant")

        logger.info(f"Review {review.id} created for restaurant {review.restaurant_id}")
        await event_bus.publish(
            "review:created",
            ReviewCreated(
                review_id=review.id,
                restaurant_id=review.restaurant_id,
                author_id=author_id,
                author_name=author_name,
                rating=review.rating,
                title=review.title,
                content=review.content,
            ),
        )
        await db.refresh(review)
        return (await present_reviews(db, [review], author_id))[0]

    async def update(self, db: AsyncSession, user: User, review_id: str, data: UpdateReviewRequest) -> ReviewOut:
        review = await repository.get_review(db, review_id)
        if not review:
            raise NotFound("Review")
        if review.user_id != user.id:
            raise PermissionDenied("You can only edit your own reviews")

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field in ("rating", "content", "dishes", "images"):
                continue
            setattr(review, field, value)
        await db.commit()
        await db.refresh(review)

        await event_bus.publish(
            "review:changed",
            ReviewChanged(review_id=review.id, restaurant_id=review.restaurant_id, change="updated"),
        )
        return (await present_reviews(db, [review], user.id))[0]

    async def delete(self, db: AsyncSession, user: User, review_id: str):
        review = await repository.get_review(db, review_id)
        if not review:
            raise NotFound("Review")
        if review.user_id != user.id and not has_role(user, *STAFF_ROLES):
            raise PermissionDenied("You can only delete your own reviews")

        restaurant_id = review.restaurant_id
        await repository.delete_review_children(db, review_id)
        await db.delete(review)
        await db.commit()

        logger.info(f"Review {review_id} deleted by {user.id}")
        await event_bus.publish(
            "review:changed",
            ReviewChanged(review_id=review_id, restaurant_id=restaurant_id, change="deleted"),
        )

    async def like(self, db: AsyncSession, user: User, review_id: str) -> LikeStatus:
        review = await repository.get_review(db, review_id)
        if not review or review.is_hidden:
            raise NotFound("Review")

        liker_id, liker_name = user.id, user.name
        author_id, restaurant_id = review.user_id, review.restaurant_id
        try:
            await repository.create_like(db, liker_id, review_id)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise Conflict("You already liked this review")

        count = await repository.count_likes(db, review_id)
        if author_id != liker_id:
            names = await restaurant_repository.get_names(db, [restaurant_id])
            await notification_service.notify(
                "like",
                author_id,
                from_id=liker_id,
                review_id=review_id,
                data={"liker_name": liker_name, "restaurant_name": names.get(restaurant_id, "")},
                skip_if_exists=True,
            )
        return LikeStatus(liked=True, like_count=count)

    async def unlike(self, db: AsyncSession, user: User, review_id: str) -> LikeStatus:
        if not await repository.delete_like(db, user.id, review_id):
            raise NotFound("Like")
        await db.commit()
        return LikeStatus(liked=False, like_count=await repository.count_likes(db, review_id))

    async def likers(self, db: AsyncSession, review_id: str, page: int, limit: int) -> dict:
        if not await repository.get_review(db, review_id):
            raise NotFound("Review")
        users, total = await repository.list_likers(db, review_id, page_offset(page, limit), limit)
        return paginated("users", [UserSummary.model_validate(u) for u in users], page, limit, total)


class CommentService:
    async def _present(self, db: AsyncSession, comments: Sequence[Comment]) -> List[CommentOut]:
        authors = await auth_repository.get_users_by_ids(db, (c.user_id for c in comments))
        items = []
        for comment in comments:
            item = CommentOut.model_validate(comment)
            author = authors.get(comment.user_id)
            item.author = UserSummary.model_validate(author) if author else None
            items.append(item)
        return items

    async def list_comments(self, db: AsyncSession, review_id: str, viewer: Optional[User]) -> List[CommentOut]:
        review = await repository.get_review(db, review_id)
        if not await review_visible_to(db, review, viewer):
            raise NotFound("Review")

        items = await self._present(db, await repository.list_visible_comments(db, review_id))
        threads: Dict[str, CommentOut] = {c.id: c for c in items if c.parent_id is None}
        for item in items:
            # replies under a hidden parent stay hidden with it
            if item.parent_id and item.parent_id in threads:
                threads[item.parent_id].replies.append(item)
        return sorted(threads.values(), key=lambda c: c.created_at, reverse=True)

    async def add_comment(self, db: AsyncSession, user: User, review_id: str, data: CreateCommentRequest) -> CommentOut:
        review = await repository.get_review(db, review_id)
        if not review or review.is_hidden:
            raise NotFound("Review")

        parent_id, parent_author = None, None
        if data.parent_id:
            parent = await repository.get_comment(db, data.parent_id)
            if not parent or parent.review_id != review_id or parent.is_hidden:
                raise NotFound("Parent comment")
            parent_author = parent.user_id
            # threads are one level deep
            parent_id = parent.parent_id or parent.id

        names = await restaurant_repository.get_names(db, [review.restaurant_id])
        comment = await repository.create_comment(db, review_id, user.id, data.content.strip(), parent_id)
        payload = {"commenter_name": user.name, "restaurant_name": names.get(review.restaurant_id, "")}
        staged = []
        if review.user_id != user.id:
            staged.append(
                notification_service.stage(
                    db, "comment", review.user_id,
                    from_id=user.id, review_id=review_id, comment_id=comment.id, data=payload,
                )
            )
        if parent_author and parent_author != user.id:
            staged.append(
                notification_service.stage(
                    db, "reply", parent_author,
                    from_id=user.id, review_id=review_id, comment_id=comment.id, data=payload,
                )
            )
        await db.commit()
        await db.refresh(comment)

        await notification_service.deliver(staged)
        return (await self._present(db, [comment]))[0]

    async def _owned(self, db: AsyncSession, user: User, comment_id: str, allow_staff: bool) -> Comment:
        comment = await repository.get_comment(db, comment_id)
        if not comment:
            raise NotFound("Comment")
        if comment.user_id != user.id and not (allow_staff and has_role(user, *STAFF_ROLES)):
            raise PermissionDenied("You can only change your own comments")
        return comment

    async def update_comment(self, db: AsyncSession, user: User, comment_id: str, content: str) -> CommentOut:
        comment = await self._owned(db, user, comment_id, allow_staff=False)
        comment.content = content.strip()
        await db.commit()
        await db.refresh(comment)
        return (await self._present(db, [comment]))[0]

    async def delete_comment(self, db: AsyncSession, user: User, comment_id: str):
        await self._owned(db, user, comment_id, allow_staff=True)
        await repository.delete_comment(db, comment_id)
        await db.commit()


review_service = ReviewService()
comment_service = CommentService()
