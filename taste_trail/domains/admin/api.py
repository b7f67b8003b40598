# taste_trail/domains/admin/api.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taste_trail.core.database import get_db
from taste_trail.domains.auth.dependencies import require_roles
from taste_trail.domains.auth.entities import STAFF_ROLES, UserRole
from taste_trail.domains.auth.models import User
from .service import admin_service

admin_router = APIRouter()

staff_only = require_roles(*STAFF_ROLES)


@admin_router.get("/dashboard")
async def dashboard(user: User = Depends(staff_only), db: AsyncSession = Depends(get_db)):
    return await admin_service.dashboard(db)


@admin_router.get("/users")
async def list_users(
    role: Optional[UserRole] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(staff_only),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.list_users(db, role.value if role else None, search, page, limit)
