# taste_trail/domains/notifications/events.py
from taste_trail.core.event_bus import event_bus
from taste_trail.domains.auth.entities import STAFF_ROLES
from taste_trail.shared.schemas.events import ReportSubmitted
from .service import notification_service


async def handle_report_submitted(event: ReportSubmitted):
    await notification_service.notify_roles(
        [r.value for r in STAFF_ROLES],
        "report_submitted",
        exclude=event.reporter_id,
        from_id=event.reporter_id,
        data={
            "report_id": event.report_id,
            "report_type": event.report_type.lower(),
            "target_id": event.target_id,
            "reason": event.reason,
        },
    )


def register_event_handlers():
    event_bus.subscribe("report:submitted", handle_report_submitted)
