# taste_trail/domains/applications/repository.py
from datetime import datetime
from typing import List, Optional, Type, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import InfluencerApplication, RestaurantClaim
from .transitions import ApplicationStatus

Record = TypeVar("Record", RestaurantClaim, InfluencerApplication)


async def create_claim(db: AsyncSession, **values) -> RestaurantClaim:
    claim = RestaurantClaim(status=ApplicationStatus.PENDING.value, **values)
    db.add(claim)
    await db.flush()
    return claim


async def get_claim(db: AsyncSession, claim_id: str) -> Optional[RestaurantClaim]:
    return await db.get(RestaurantClaim, claim_id)


async def get_user_claim(db: AsyncSession, user_id: str, restaurant_id: str) -> Optional[RestaurantClaim]:
    result = await db.execute(
        select(RestaurantClaim).where(
            RestaurantClaim.user_id == user_id, RestaurantClaim.restaurant_id == restaurant_id
        )
    )
    return result.scalar_one_or_none()


async def create_application(db: AsyncSession, **values) -> InfluencerApplication:
    application = InfluencerApplication(status=ApplicationStatus.PENDING.value, **values)
    db.add(application)
    await db.flush()
    return application


async def get_application(db: AsyncSession, application_id: str) -> Optional[InfluencerApplication]:
    return await db.get(InfluencerApplication, application_id)


async def get_user_application(db: AsyncSession, user_id: str) -> Optional[InfluencerApplication]:
    result = await db.execute(select(InfluencerApplication).where(InfluencerApplication.user_id == user_id))
    return result.scalar_one_or_none()


async def list_records(
    db: AsyncSession, model: Type[Record], status: Optional[str], offset: int, limit: int
) -> tuple[List[Record], int]:
    query = select(model)
    if status:
        query = query.where(model.status == status)
    total = await db.scalar(select(func.count()).select_from(query.subquery()))
    result = await db.execute(query.order_by(model.created_at.desc()).offset(offset).limit(limit))
    return list(result.scalars().all()), total or 0


async def count_pending(db: AsyncSession, model: Type[Record]) -> int:
    return await db.scalar(
        select(func.count()).select_from(model).where(model.status == ApplicationStatus.PENDING.value)
    ) or 0


async def mark_reviewed(
    db: AsyncSession, model: Type[Record], record_id: str, status: str, reviewer_id: str, notes: Optional[str]
) -> bool:
    """Only a PENDING record can be reviewed; False means someone else reviewed it first."""
    result = await db.execute(
        update(model)
        .where(model.id == record_id, model.status == ApplicationStatus.PENDING.value)
        .values(
            status=status,
            reviewed_by=reviewer_id,
            reviewed_at=datetime.utcnow(),
            reviewer_notes=notes,
            updated_at=datetime.utcnow(),
        )
        .execution_options(synchronize_session="fetch")
    )
    return (result.rowcount or 0) == 1
