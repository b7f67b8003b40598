# taste_trail/domains/moderation/api.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.database import get_db
from taste_trail.domains.auth import repository as auth_repository
from taste_trail.domains.auth.dependencies import get_current_user, require_roles
from taste_trail.domains.auth.entities import STAFF_ROLES
from taste_trail.domains.auth.models import User
from taste_trail.domains.auth.schemas import UserSummary
from taste_trail.shared.schemas.base import page_offset, paginated
from . import repository
from .entities import ReportStatus
from .schemas import (
    ContentFlagOut,
    ModerateUserRequest,
    ModerationActionOut,
    ReportOut,
    ReportStatusUpdate,
    ResolveReportRequest,
    SubmitReportRequest,
)
from .service import moderation_service

router = APIRouter()
admin_router = APIRouter()

staff_only = require_roles(*STAFF_ROLES)


@router.post("", status_code=201)
async def submit_report(
    data: SubmitReportRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    report = await moderation_service.submit_report(db, user, data)
    return {"report": ReportOut.model_validate(report)}


@router.get("")
async def my_reports(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    reports, total = await repository.list_reports(
        db, page_offset(page, limit), limit, reporter_id=user.id
    )
    return paginated("reports", [ReportOut.model_validate(r) for r in reports], page, limit, total)


@admin_router.get("/reports")
async def list_reports(
    status: Optional[ReportStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    staff: User = Depends(staff_only),
    db: AsyncSession = Depends(get_db),
):
    reports, total = await repository.list_reports(
        db, page_offset(page, limit), limit, status=status.value if status else None
    )
    reporters = await auth_repository.get_users_by_ids(db, (r.reporter_id for r in reports))
    items = []
    for r in reports:
        reporter = reporters.get(r.reporter_id)
        items.append({
            **ReportOut.model_validate(r).model_dump(by_alias=True),
            "reporter": UserSummary.model_validate(reporter) if reporter else None,
        })
    return paginated("reports", items, page, limit, total)


@admin_router.post("/reports/resolve")
async def resolve_report(
    data: ResolveReportRequest,
    staff: User = Depends(staff_only),
    db: AsyncSession = Depends(get_db),
):
    report = await moderation_service.resolve_report(db, staff, data.report_id, data.action, data.notes)
    return {"report": ReportOut.model_validate(report)}


@admin_router.patch("/reports/{report_id}/status")
async def update_report_status(
    report_id: str,
    data: ReportStatusUpdate,
    staff: User = Depends(staff_only),
    db: AsyncSession = Depends(get_db),
):
    report = await moderation_service.update_report_status(db, report_id, data.status)
    return {"report": ReportOut.model_validate(report)}


@admin_router.post("/moderation", status_code=201)
async def moderate_user(
    data: ModerateUserRequest,
    staff: User = Depends(staff_only),
    db: AsyncSession = Depends(get_db),
):
    record = await moderation_service.moderate_user(db, staff, data)
    return {"action": ModerationActionOut.model_validate(record)}


@admin_router.get("/moderation")
async def moderation_queue(
    type: str = Query("actions", pattern="^(reports|flags|actions)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    staff: User = Depends(staff_only),
    db: AsyncSession = Depends(get_db),
):
    offset = page_offset(page, limit)
    if type == "reports":
        rows, total = await repository.list_reports(db, offset, limit, status=ReportStatus.PENDING.value)
        return paginated("items", [ReportOut.model_validate(r) for r in rows], page, limit, total, type=type)
    if type == "flags":
        rows, total = await repository.list_flags(db, offset, limit)
        return paginated("items", [ContentFlagOut.model_validate(f) for f in rows], page, limit, total, type=type)
    rows, total = await repository.list_actions(db, offset, limit)
    return paginated("items", [ModerationActionOut.model_validate(a) for a in rows], page, limit, total, type=type)


@admin_router.get("/users/{user_id}/moderation")
async def user_moderation_status(
    user_id: str,
    staff: User = Depends(staff_only),
    db: AsyncSession = Depends(get_db),
):
    ban = await moderation_service.check_user_ban(db, user_id)
    return {
        "banned": ban is not None,
        "ban": ModerationActionOut.model_validate(ban) if ban else None,
        "activeStrikes": await moderation_service.get_user_strike_count(db, user_id),
    }
