# taste_trail/domains/moderation/service.py
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.config import settings
from taste_trail.core.event_bus import event_bus
from taste_trail.core.exceptions import Conflict, NotFound, PermissionDenied, ValidationFailed
from taste_trail.domains.applications.transitions import promoted_role
from taste_trail.domains.auth import repository as auth_repository
from taste_trail.domains.auth.entities import UserRole
from taste_trail.domains.auth.models import User
from taste_trail.domains.notifications.service import notification_service
from taste_trail.domains.restaurants import repository as restaurant_repository
from taste_trail.domains.reviews import repository as review_repository
from taste_trail.shared.schemas.events import ModerationApplied, ReportSubmitted
from taste_trail.shared.utils.logger import get_logger
from . import repository
from .entities import (
    HIDEABLE_TYPES,
    ModerationActionType,
    ModerationCommand,
    ReportStatus,
    ReportType,
    ResolutionAction,
    STATUS_TRANSITIONS,
    action_for_reason,
    severity_for_reason,
)
from .models import ModerationAction, Report
from .schemas import ModerateUserRequest, SubmitReportRequest

logger = get_logger(__name__)


class ModerationService:
    async def _target_exists(self, db: AsyncSession, report_type: ReportType, target_id: str) -> bool:
        lookups = {
            ReportType.REVIEW: review_repository.get_review,
            ReportType.COMMENT: review_repository.get_comment,
            ReportType.RESTAURANT: restaurant_repository.get_restaurant,
            ReportType.USER: auth_repository.get_user_by_id,
        }
        return await lookups[report_type](db, target_id) is not None

    async def submit_report(self, db: AsyncSession, reporter: User, data: SubmitReportRequest) -> Report:
        if not await self._target_exists(db, data.type, data.target_id):
            raise NotFound(data.type.value.capitalize())
        if data.type == ReportType.USER and data.target_id == reporter.id:
            raise ValidationFailed("You cannot report yourself")

        try:
            report = await repository.create_report(
                db, reporter.id, data.type.value, data.target_id, data.reason, data.description
            )
            severity = severity_for_reason(data.reason)
            if severity >= settings.FLAG_SEVERITY_THRESHOLD:
                await repository.upsert_flag(
                    db, data.target_id, data.type.value.lower(), data.reason, severity
                )
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise Conflict("You have already reported this content")

        logger.info(f"Report {report.id} on {report.type}:{report.target_id} ({report.reason})")
        await event_bus.publish(
            "report:submitted",
            ReportSubmitted(
                report_id=report.id,
                reporter_id=report.reporter_id,
                report_type=report.type,
                target_id=report.target_id,
                reason=report.reason,
            ),
        )
        return report

    async def resolve_report(
        self,
        db: AsyncSession,
        moderator: User,
        report_id: str,
        action: ResolutionAction,
        notes: Optional[str] = None,
    ) -> Report:
        report = await repository.get_report(db, report_id)
        if not report:
            raise NotFound("Report")
        if report.status != ReportStatus.PENDING.value:
            raise Conflict("Report has already been reviewed")

        moderator_id = moderator.id
        report_type = ReportType(report.type)
        target_id, reason, reporter_id = report.target_id, report.reason, report.reporter_id
        approve = action == ResolutionAction.APPROVE
        now = datetime.utcnow()

        claimed = await repository.transition_report(
            db,
            report_id,
            [ReportStatus.PENDING.value],
            ReportStatus.RESOLVED.value if approve else ReportStatus.REJECTED.value,
            resolved_by=moderator_id,
            resolved_at=now,
            resolution_notes=notes,
        )
        if not claimed:
            await db.rollback()
            raise Conflict("Report has already been reviewed")

        record: Optional[ModerationAction] = None
        hidden = False
        if approve:
            kind = action_for_reason(reason)
            record = await repository.create_action(
                db,
                moderator_id=moderator_id,
                target_id=target_id,
                target_type=report_type.value.lower(),
                action=kind.value,
                reason=f"Report approved: {reason}",
                report_id=report_id,
            )
            if kind == ModerationActionType.CONTENT_REMOVAL and report_type in HIDEABLE_TYPES:
                hidden = await self._hide_content(db, report_type, target_id)
            if report_type == ReportType.USER:
                await repository.create_strike(
                    db,
                    target_id,
                    record.id,
                    f"Report approved: {reason}",
                    now + timedelta(days=settings.STRIKE_EXPIRY_DAYS),
                )
            await repository.delete_flag(db, target_id, report_type.value.lower())
        await db.commit()
        await db.refresh(report)

        # everything below is best-effort
        await notification_service.notify(
            "report_resolved",
            reporter_id,
            from_id=moderator_id,
            data={
                "report_id": report_id,
                "outcome": "approved and action was taken" if approve else "reviewed and rejected",
                "notes": notes or "",
            },
        )
        if record is not None:
            if report_type == ReportType.USER:
                await notification_service.notify(
                    "moderation_action",
                    target_id,
                    data={"action": record.action, "reason": reason},
                )
            await event_bus.publish(
                "moderation:applied",
                ModerationApplied(
                    action_id=record.id,
                    action=record.action,
                    target_id=target_id,
                    target_type=record.target_type,
                    hidden_content=hidden,
                ),
            )
        return report

    async def _hide_content(self, db: AsyncSession, report_type: ReportType, target_id: str) -> bool:
        if report_type == ReportType.REVIEW:
            return await review_repository.set_review_hidden(db, target_id, True) > 0
        return await review_repository.set_comment_hidden(db, target_id, True) > 0

    async def update_report_status(self, db: AsyncSession, report_id: str, status: ReportStatus) -> Report:
        report = await repository.get_report(db, report_id)
        if not report:
            raise NotFound("Report")
        current = ReportStatus(report.status)
        if status not in STATUS_TRANSITIONS.get(current, set()):
            raise Conflict(f"Cannot move report from {current.value} to {status.value}")
        if not await repository.transition_report(db, report_id, [current.value], status.value):
            await db.rollback()
            raise Conflict("Report changed concurrently")
        await db.commit()
        await db.refresh(report)
        return report

    async def moderate_user(self, db: AsyncSession, moderator: User, data: ModerateUserRequest) -> ModerationAction:
        target = await auth_repository.get_user_by_id(db, data.user_id)
        if not target:
            raise NotFound("User")
        if target.id == moderator.id:
            raise ValidationFailed("You cannot moderate your own account")
        if target.role == UserRole.ADMIN.value and moderator.role != UserRole.ADMIN.value:
            raise PermissionDenied("Only admins can act on admin accounts")
        if data.action == ModerationCommand.PROMOTE and moderator.role != UserRole.ADMIN.value:
            raise PermissionDenied("Only admins can promote users")

        now = datetime.utcnow()
        expires_at: Optional[datetime] = None
        strike_expiry: Optional[datetime] = None
        add_strike = data.action in (ModerationCommand.BAN, ModerationCommand.TEMPBAN, ModerationCommand.WARN)

        if data.action == ModerationCommand.BAN:
            kind = ModerationActionType.PERMANENT_BAN
        elif data.action == ModerationCommand.TEMPBAN:
            if not data.duration:
                raise ValidationFailed("Temporary bans need a duration in days")
            kind = ModerationActionType.TEMPORARY_BAN
            expires_at = strike_expiry = now + timedelta(days=data.duration)
        elif data.action == ModerationCommand.WARN:
            kind = ModerationActionType.WARNING
            strike_expiry = now + timedelta(days=settings.STRIKE_EXPIRY_DAYS)
        elif data.action == ModerationCommand.PROMOTE:
            kind = ModerationActionType.ACCOUNT_REINSTATEMENT
            target.role = promoted_role(target.role, UserRole.MODERATOR).value
        else:
            kind = ModerationActionType.ACCOUNT_REINSTATEMENT
            target.verified = True

        record = await repository.create_action(
            db,
            moderator_id=moderator.id,
            target_id=target.id,
            target_type="user",
            action=kind.value,
            reason=data.reason,
            expires_at=expires_at,
        )
        if add_strike:
            await repository.create_strike(db, target.id, record.id, data.reason, strike_expiry)
        await db.commit()

        logger.info(f"{moderator.id} applied {kind.value} to {target.id}")
        if data.action == ModerationCommand.WARN:
            notification_type = "moderation_warning"
        elif kind in (ModerationActionType.PERMANENT_BAN, ModerationActionType.TEMPORARY_BAN):
            notification_type = "moderation_ban"
        else:
            notification_type = "moderation_action"
        await notification_service.notify(
            notification_type,
            target.id,
            from_id=moderator.id,
            data={"action": kind.value, "reason": data.reason, "command": data.action.value},
        )
        await event_bus.publish(
            "moderation:applied",
            ModerationApplied(
                action_id=record.id, action=kind.value, target_id=target.id, target_type="user"
            ),
        )
        return record

    async def check_user_ban(self, db: AsyncSession, user_id: str) -> Optional[ModerationAction]:
        return await repository.get_active_ban(db, user_id)

    async def get_user_strike_count(self, db: AsyncSession, user_id: str) -> int:
        return await repository.count_active_strikes(db, user_id)


moderation_service = ModerationService()
