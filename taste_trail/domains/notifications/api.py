# taste_trail/domains/notifications/api.py
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.database import get_db, session_scope
from taste_trail.core.websocket_manager import connection_manager
from taste_trail.domains.auth.dependencies import get_current_user, require_roles
from taste_trail.domains.auth.entities import UserRole
from taste_trail.domains.auth.models import User
from taste_trail.shared.schemas.base import page_offset, paginated
from taste_trail.shared.utils.logger import get_logger
from taste_trail.shared.utils.security import decode_token
from . import repository
from .schemas import (
    AnnouncementRequest,
    MarkReadRequest,
    NotificationOut,
    PreferencesOut,
    PreferencesUpdate,
)
from .service import notification_service

logger = get_logger(__name__)

router = APIRouter()
admin_router = APIRouter()

STREAM_BACKLOG = 50


@router.get("")
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread: bool = Query(False),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    items, total = await repository.list_notifications(db, user.id, unread, page_offset(page, limit), limit)
    return paginated(
        "notifications",
        [NotificationOut.model_validate(n) for n in items],
        page,
        limit,
        total,
        unreadCount=await repository.count_unread(db, user.id),
    )


@router.put("/read")
async def mark_read(
    data: MarkReadRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    updated = await notification_service.mark_read(db, user.id, data.ids)
    return {"updated": updated}


@router.get("/stats")
async def notification_stats(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return {
        "total": await repository.count_notifications(db, user_id=user.id),
        "unread": await repository.count_unread(db, user.id),
        "byType": await repository.count_by_type(db, user.id),
    }


@router.get("/preferences")
async def get_preferences(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    prefs = await repository.get_or_create_preferences(db, user.id)
    await db.commit()
    return PreferencesOut.model_validate(prefs)


@router.put("/preferences")
async def update_preferences(
    data: PreferencesUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    prefs = await repository.get_or_create_preferences(db, user.id)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(prefs, field, value)
    await db.commit()
    return PreferencesOut.model_validate(prefs)


@router.websocket("/ws")
async def notification_stream(websocket: WebSocket):
    # browsers cannot set headers on a socket handshake, so the token rides in the query
    token = websocket.query_params.get("token")
    payload = decode_token(token) if token else None
    if not payload:
        await websocket.close(code=4401)
        return
    user_id = str(payload["sub"])

    await connection_manager.connect(websocket, user_id)
    try:
        async with session_scope() as db:
            backlog, _ = await repository.list_notifications(db, user_id, True, 0, STREAM_BACKLOG)
            unread = await repository.count_unread(db, user_id)
        for notification in backlog:
            await connection_manager.send(websocket, {
                "type": "notification",
                "notification": jsonable_encoder(NotificationOut.model_validate(notification)),
            })
        await connection_manager.send(websocket, {"type": "unread_count", "unreadCount": unread})

        while True:
            data = await websocket.receive_text()
            await connection_manager.handle_message(websocket, data)
    except WebSocketDisconnect:
        pass
    finally:
        connection_manager.disconnect(websocket)


@admin_router.post("/notifications")
async def send_announcement(
    data: AnnouncementRequest,
    admin: User = Depends(require_roles(UserRole.ADMIN)),
):
    sent = await notification_service.announce(
        data.title,
        data.message,
        sender_id=admin.id,
        roles=[r.value for r in data.roles] if data.roles else None,
        verified=data.verified,
    )
    return {"sent": sent}


@admin_router.get("/notifications")
async def admin_notification_stats(
    admin: User = Depends(require_roles(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    now = datetime.utcnow()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    announcements = await repository.latest_of_type(db, "system_announcement", 50)
    recent, seen = [], set()
    for n in announcements:
        key = (n.title, n.message)
        if key in seen:
            continue
        seen.add(key)
        recent.append({"title": n.title, "message": n.message, "createdAt": n.created_at})
    return {
        "total": await repository.count_notifications(db),
        "today": await repository.count_notifications(db, since=today),
        "week": await repository.count_notifications(db, since=now - timedelta(days=7)),
        "unread": await repository.count_notifications(db, unread_only=True),
        "byType": await repository.count_by_type(db),
        "activeConnections": connection_manager.get_connection_stats()["total_connections"],
        "recentAnnouncements": recent[:5],
    }
