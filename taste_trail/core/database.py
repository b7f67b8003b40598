from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from taste_trail.shared.models.base import Base
from taste_trail.shared.utils.logger import get_logger
from .config import settings

logger = get_logger(__name__)


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # aiosqlite connections are bound to the loop that opened them
        return {"poolclass": NullPool, "connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 20,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }


engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Request-scoped session. Services commit explicitly; anything left pending is rolled back."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Session for work outside a request (post-commit effects, celery tasks, scripts)."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def import_models():
    # Registers every table on Base.metadata
    from taste_trail.domains.applications import models as _applications  # noqa: F401
    from taste_trail.domains.auth import models as _auth  # noqa: F401
    from taste_trail.domains.moderation import models as _moderation  # noqa: F401
    from taste_trail.domains.notifications import models as _notifications  # noqa: F401
    from taste_trail.domains.restaurants import models as _restaurants  # noqa: F401
    from taste_trail.domains.reviews import models as _reviews  # noqa: F401
    from taste_trail.domains.social import models as _social  # noqa: F401


async def init_db():
    if settings.AUTO_CREATE_TABLES:
        import_models()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")
    else:
        # Outside local/dev/test the schema is owned by alembic
        logger.info("Skipping auto table creation, migrations manage the schema")


async def drop_db():
    import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def check_connection() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
            return True
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return False
