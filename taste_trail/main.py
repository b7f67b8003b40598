from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from taste_trail.core import (
    celery,
    config,
    database,
    exception_handlers,
    redis,
)
from taste_trail.core.middleware import auth_middleware
from taste_trail.core.pubsub import push_broker
from taste_trail.core.websocket_manager import connection_manager
from taste_trail.domains import (
    admin,
    applications,
    auth,
    moderation,
    notifications,
    owner,
    restaurants,
    reviews,
    social,
)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    celery.init_celery()
    await database.init_db()
    reviews.register_event_handlers()
    notifications.register_event_handlers()
    await connection_manager.start()
    await push_broker.start()
    yield
    await push_broker.stop()
    await connection_manager.close_all()
    await connection_manager.stop()
    await redis.RedisManager.close()


app = FastAPI(title="Taste Trail API", version=VERSION, lifespan=lifespan)

app.middleware("http")(auth_middleware)
exception_handlers.setup_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(social.router, prefix="/api/users", tags=["Users"])
app.include_router(restaurants.router, prefix="/api/restaurants", tags=["Restaurants"])
app.include_router(reviews.router, prefix="/api/reviews", tags=["Reviews"])
app.include_router(reviews.comments_router, prefix="/api/comments", tags=["Comments"])
app.include_router(reviews.timeline_router, prefix="/api/timeline", tags=["Timeline"])
app.include_router(owner.router, prefix="/api/owner", tags=["Owner"])
app.include_router(applications.router, prefix="/api/influencer", tags=["Influencer"])
app.include_router(moderation.router, prefix="/api/reports", tags=["Reports"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])

app.include_router(admin.admin_router, prefix="/api/admin", tags=["Admin"])
app.include_router(moderation.admin_router, prefix="/api/admin", tags=["Admin"])
app.include_router(applications.admin_router, prefix="/api/admin", tags=["Admin"])
app.include_router(notifications.admin_router, prefix="/api/admin", tags=["Admin"])


@app.get("/health")
async def health():
    services = {
        "database": await database.check_connection(),
        "redis": await redis.check_connection(),
        "rabbitmq": await celery.check_connection(),
    }
    status = "healthy" if all(services.values()) else "degraded"
    return {
        "status": status,
        "services": services,
        "version": VERSION,
        "environment": config.settings.ENVIRONMENT.value,
        "activeConnections": connection_manager.get_connection_stats()["total_connections"],
    }
