# taste_trail/domains/applications/api.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.database import get_db
from taste_trail.domains.auth.dependencies import get_current_user, require_roles
from taste_trail.domains.auth.entities import UserRole
from taste_trail.domains.auth.models import User
from .schemas import InfluencerApplyRequest, ReviewDecision
from .service import application_service
from .transitions import ApplicationStatus

router = APIRouter()
admin_router = APIRouter()

admin_only = require_roles(UserRole.ADMIN)


@router.post("/apply", status_code=201)
async def apply(
    data: InfluencerApplyRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {
        "message": "Application submitted successfully",
        "application": await application_service.apply_influencer(db, user, data),
    }


@router.get("/apply")
async def my_application(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return {"application": await application_service.get_my_application(db, user)}


@admin_router.get("/influencer-applications")
async def list_applications(
    status: Optional[ApplicationStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: User = Depends(admin_only),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.list_applications(db, status.value if status else None, page, limit)


@admin_router.put("/influencer-applications/{application_id}")
async def review_application(
    application_id: str,
    decision: ReviewDecision,
    admin: User = Depends(admin_only),
    db: AsyncSession = Depends(get_db),
):
    application = await application_service.review_application(db, admin, application_id, decision)
    return {"message": f"Application {application.status.lower()}", "application": application}


@admin_router.get("/restaurant-claims")
async def list_claims(
    status: Optional[ApplicationStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: User = Depends(admin_only),
    db: AsyncSession = Depends(get_db),
):
    return await application_service.list_claims(db, status.value if status else None, page, limit)


@admin_router.put("/restaurant-claims/{claim_id}")
async def review_claim(
    claim_id: str,
    decision: ReviewDecision,
    admin: User = Depends(admin_only),
    db: AsyncSession = Depends(get_db),
):
    claim = await application_service.review_claim(db, admin, claim_id, decision)
    return {"message": f"Claim {claim.status.lower()}", "claim": claim}
