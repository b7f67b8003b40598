# taste_trail/domains/reviews/api.py
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.database import get_db
from taste_trail.domains.auth.dependencies import get_current_user, get_optional_user
from taste_trail.domains.auth.models import User
from .schemas import (
    CreateCommentRequest,
    CreateReviewRequest,
    TimelineFilter,
    UpdateCommentRequest,
    UpdateReviewRequest,
)
from .service import comment_service, review_service
from .timeline import timeline_service

router = APIRouter()
comments_router = APIRouter()
timeline_router = APIRouter()


@router.get("")
async def list_reviews(
    restaurant_id: Optional[str] = Query(None, alias="restaurantId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    filter: Optional[str] = Query(None),
    sort_by: Literal["recent", "rating", "likes"] = Query("recent", alias="sortBy"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return await review_service.list_reviews(
        db,
        viewer,
        restaurant_id=restaurant_id,
        user_id=user_id,
        following=filter == "following",
        sort_by=sort_by,
        page=page,
        limit=limit,
    )


@router.post("", status_code=201)
async def create_review(
    data: CreateReviewRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"review": await review_service.create(db, user, data)}


@router.get("/{review_id}")
async def get_review(
    review_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return {"review": await review_service.get(db, review_id, viewer)}


@router.put("/{review_id}")
async def update_review(
    review_id: str,
    data: UpdateReviewRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"review": await review_service.update(db, user, review_id, data)}


@router.delete("/{review_id}", status_code=204)
async def delete_review(review_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    await review_service.delete(db, user, review_id)
    return Response(status_code=204)


@router.post("/{review_id}/like")
async def like_review(review_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await review_service.like(db, user, review_id)


@router.delete("/{review_id}/like")
async def unlike_review(review_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await review_service.unlike(db, user, review_id)


@router.get("/{review_id}/likes")
async def list_likes(
    review_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await review_service.likers(db, review_id, page, limit)


@router.get("/{review_id}/comments")
async def list_comments(
    review_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return {"comments": await comment_service.list_comments(db, review_id, viewer)}


@router.post("/{review_id}/comments", status_code=201)
async def add_comment(
    review_id: str,
    data: CreateCommentRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"comment": await comment_service.add_comment(db, user, review_id, data)}


@comments_router.put("/{comment_id}")
async def update_comment(
    comment_id: str,
    data: UpdateCommentRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"comment": await comment_service.update_comment(db, user, comment_id, data.content)}


@comments_router.delete("/{comment_id}", status_code=204)
async def delete_comment(comment_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    await comment_service.delete_comment(db, user, comment_id)
    return Response(status_code=204)


@timeline_router.get("")
async def get_timeline(
    filter: TimelineFilter = Query(TimelineFilter.ALL),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    return await timeline_service.timeline(db, viewer, filter, page, limit)
