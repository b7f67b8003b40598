# taste_trail/domains/reviews/repository.py
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.domains.auth.models import User
from taste_trail.domains.moderation.entities import ReportStatus, ReportType
from taste_trail.domains.moderation.repository import open_report_targets
from .models import Comment, Like, OwnerResponse, Review

OPEN_REPORT_STATUSES = (ReportStatus.PENDING.value, ReportStatus.INVESTIGATING.value)


# Reviews

async def get_review(db: AsyncSession, review_id: str) -> Optional[Review]:
    return await db.get(Review, review_id)


async def create_review(db: AsyncSession, **values) -> Review:
    review = Review(is_hidden=False, is_promoted=False, **values)
    db.add(review)
    await db.flush()
    return review


async def set_review_hidden(db: AsyncSession, review_id: str, hidden: bool) -> int:
    result = await db.execute(
        update(Review)
        .where(Review.id == review_id)
        .values(is_hidden=hidden)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount or 0


async def set_enrichment(db: AsyncSession, review_id: str, sentiment: Optional[str], tags: List[str]) -> int:
    result = await db.execute(update(Review).where(Review.id == review_id).values(sentiment=sentiment, tags=tags))
    return result.rowcount or 0


async def count_user_reviews(db: AsyncSession, user_id: str) -> int:
    return await db.scalar(
        select(func.count()).where(Review.user_id == user_id, Review.is_hidden.is_(False))
    ) or 0


async def count_reviews(db: AsyncSession) -> int:
    return await db.scalar(select(func.count()).select_from(Review)) or 0


def _like_counts():
    return select(Like.review_id, func.count(Like.id).label("likes")).group_by(Like.review_id).subquery()


async def list_reviews(
    db: AsyncSession,
    *,
    restaurant_id: Optional[str] = None,
    user_id: Optional[str] = None,
    author_ids: Optional[Iterable[str]] = None,
    author_roles: Optional[Iterable[str]] = None,
    min_rating: Optional[int] = None,
    include_hidden: bool = False,
    exclude_reported: bool = False,
    sort_by: str = "recent",
    offset: int = 0,
    limit: int = 20,
) -> Tuple[List[Review], int]:
    query = select(Review)
    if restaurant_id:
        query = query.where(Review.restaurant_id == restaurant_id)
    if user_id:
        query = query.where(Review.user_id == user_id)
    if author_ids is not None:
        query = query.where(Review.user_id.in_(list(author_ids)))
    if author_roles:
        query = query.join(User, User.id == Review.user_id).where(User.role.in_(list(author_roles)))
    if min_rating is not None:
        query = query.where(Review.rating >= min_rating)
    if not include_hidden:
        query = query.where(Review.is_hidden.is_(False))
    if exclude_reported:
        query = query.where(
            Review.id.not_in(open_report_targets(ReportType.REVIEW.value, OPEN_REPORT_STATUSES))
        )

    total = await db.scalar(select(func.count()).select_from(query.subquery()))

    if sort_by == "likes":
        likes = _like_counts()
        query = query.outerjoin(likes, likes.c.review_id == Review.id).order_by(
            func.coalesce(likes.c.likes, 0).desc(), Review.created_at.desc()
        )
    elif sort_by in ("rating", "rating-high"):
        query = query.order_by(Review.rating.desc(), Review.created_at.desc())
    elif sort_by == "rating-low":
        query = query.order_by(Review.rating.asc(), Review.created_at.desc())
    else:
        query = query.order_by(Review.created_at.desc())

    result = await db.execute(query.offset(offset).limit(limit))
    return list(result.scalars().all()), total or 0


# Likes

async def create_like(db: AsyncSession, user_id: str, review_id: str) -> Like:
    like = Like(user_id=user_id, review_id=review_id)
    db.add(like)
    await db.flush()
    return like


async def delete_like(db: AsyncSession, user_id: str, review_id: str) -> int:
    result = await db.execute(delete(Like).where(Like.user_id == user_id, Like.review_id == review_id))
    return result.rowcount or 0


async def count_likes(db: AsyncSession, review_id: str) -> int:
    return await db.scalar(select(func.count()).where(Like.review_id == review_id)) or 0


async def like_counts(db: AsyncSession, review_ids: Iterable[str]) -> Dict[str, int]:
    ids = list(review_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(Like.review_id, func.count(Like.id)).where(Like.review_id.in_(ids)).group_by(Like.review_id)
    )
    return {rid: c for rid, c in result.all()}


async def liked_review_ids(db: AsyncSession, user_id: Optional[str], review_ids: Iterable[str]) -> Set[str]:
    ids = list(review_ids)
    if not user_id or not ids:
        return set()
    result = await db.execute(select(Like.review_id).where(Like.user_id == user_id, Like.review_id.in_(ids)))
    return set(result.scalars().all())


async def list_likers(db: AsyncSession, review_id: str, offset: int, limit: int) -> Tuple[List[User], int]:
    total = await db.scalar(select(func.count()).where(Like.review_id == review_id))
    result = await db.execute(
        select(User)
        .join(Like, Like.user_id == User.id)
        .where(Like.review_id == review_id)
        .order_by(Like.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


# Comments

async def get_comment(db: AsyncSession, comment_id: str) -> Optional[Comment]:
    return await db.get(Comment, comment_id)


async def create_comment(
    db: AsyncSession, review_id: str, user_id: str, content: str, parent_id: Optional[str] = None
) -> Comment:
    comment = Comment(review_id=review_id, user_id=user_id, content=content, parent_id=parent_id, is_hidden=False)
    db.add(comment)
    await db.flush()
    return comment


async def set_comment_hidden(db: AsyncSession, comment_id: str, hidden: bool) -> int:
    result = await db.execute(
        update(Comment)
        .where(Comment.id == comment_id)
        .values(is_hidden=hidden)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount or 0


async def list_visible_comments(db: AsyncSession, review_id: str) -> List[Comment]:
    result = await db.execute(
        select(Comment)
        .where(Comment.review_id == review_id, Comment.is_hidden.is_(False))
        .order_by(Comment.created_at.asc())
    )
    return list(result.scalars().all())


async def comment_counts(db: AsyncSession, review_ids: Iterable[str]) -> Dict[str, int]:
    ids = list(review_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(Comment.review_id, func.count(Comment.id))
        .where(Comment.review_id.in_(ids), Comment.is_hidden.is_(False))
        .group_by(Comment.review_id)
    )
    return {rid: c for rid, c in result.all()}


async def delete_comment(db: AsyncSession, comment_id: str) -> int:
    # replies first: sqlite does not enforce the cascade unless foreign keys are switched on
    await db.execute(delete(Comment).where(Comment.parent_id == comment_id))
    result = await db.execute(delete(Comment).where(Comment.id == comment_id))
    return result.rowcount or 0


# Owner responses

async def get_owner_response(db: AsyncSession, review_id: str) -> Optional[OwnerResponse]:
    result = await db.execute(select(OwnerResponse).where(OwnerResponse.review_id == review_id))
    return result.scalar_one_or_none()


async def owner_responses(db: AsyncSession, review_ids: Iterable[str]) -> Dict[str, OwnerResponse]:
    ids = list(review_ids)
    if not ids:
        return {}
    result = await db.execute(select(OwnerResponse).where(OwnerResponse.review_id.in_(ids)))
    return {r.review_id: r for r in result.scalars().all()}


async def create_owner_response(db: AsyncSession, review_id: str, owner_id: str, content: str) -> OwnerResponse:
    response = OwnerResponse(review_id=review_id, owner_id=owner_id, content=content)
    db.add(response)
    await db.flush()
    return response


async def delete_owner_response(db: AsyncSession, review_id: str) -> int:
    result = await db.execute(delete(OwnerResponse).where(OwnerResponse.review_id == review_id))
    return result.rowcount or 0


async def delete_review_children(db: AsyncSession, review_id: str):
    for model in (Like, Comment, OwnerResponse):
        await db.execute(delete(model).where(model.review_id == review_id))


# Owner statistics

async def rating_distribution(db: AsyncSession, restaurant_id: str) -> Dict[int, int]:
    result = await db.execute(
        select(Review.rating, func.count(Review.id))
        .where(Review.restaurant_id == restaurant_id, Review.is_hidden.is_(False))
        .group_by(Review.rating)
    )
    counts = {star: 0 for star in range(1, 6)}
    counts.update({rating: c for rating, c in result.all()})
    return counts


async def count_restaurant_reviews_since(db: AsyncSession, restaurant_id: str, since: datetime) -> int:
    return await db.scalar(
        select(func.count()).where(
            Review.restaurant_id == restaurant_id,
            Review.is_hidden.is_(False),
            Review.created_at >= since,
        )
    ) or 0


async def count_responded(db: AsyncSession, restaurant_id: str) -> int:
    return await db.scalar(
        select(func.count())
        .select_from(OwnerResponse)
        .join(Review, Review.id == OwnerResponse.review_id)
        .where(Review.restaurant_id == restaurant_id, Review.is_hidden.is_(False))
    ) or 0


async def count_restaurant_likes(db: AsyncSession, restaurant_id: str) -> int:
    return await db.scalar(
        select(func.count())
        .select_from(Like)
        .join(Review, Review.id == Like.review_id)
        .where(Review.restaurant_id == restaurant_id)
    ) or 0


async def delete_for_restaurant(db: AsyncSession, restaurant_id: str) -> int:
    review_ids = select(Review.id).where(Review.restaurant_id == restaurant_id)
    for model in (Like, Comment, OwnerResponse):
        await db.execute(delete(model).where(model.review_id.in_(review_ids)))
    result = await db.execute(delete(Review).where(Review.restaurant_id == restaurant_id))
    return result.rowcount or 0
