"""Initialize local development data"""
import asyncio
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

from sqlalchemy import select

from taste_trail.core.database import AsyncSessionLocal, init_db
from taste_trail.domains.auth.entities import UserRole
from taste_trail.domains.auth.models import Profile, User
from taste_trail.domains.restaurants.models import Restaurant
from taste_trail.shared.utils.logger import get_logger
from taste_trail.shared.utils.security import get_password_hash

logger = get_logger(__name__)

ADMIN_EMAIL = "admin@tastetrail.local"
ADMIN_PASSWORD = "admin12345"

SAMPLE_RESTAURANTS = [
    {
        "name": "Trattoria Lucia",
        "description": "Family-run Italian kitchen with fresh pasta made every morning.",
        "address": "12 Via Roma, Old Town",
        "latitude": 40.7128,
        "longitude": -74.0060,
        "price_range": 2,
        "categories": ["italian", "pasta"],
        "amenities": ["wifi", "outdoor seating"],
    },
    {
        "name": "Sakura Sushi Bar",
        "description": "Omakase counter and classic rolls from a third-generation chef.",
        "address": "48 Cherry Lane",
        "latitude": 40.7306,
        "longitude": -73.9866,
        "price_range": 3,
        "categories": ["japanese", "sushi"],
        "amenities": ["reservations"],
    },
]


async def init_local_data():
    """Seed an admin account and a couple of restaurants"""
    await init_db()

    logger.info("Initializing local development data...")
    async with AsyncSessionLocal() as db:
        try:
            existing = await db.execute(select(User).where(User.email == ADMIN_EMAIL))
            if existing.scalar_one_or_none():
                logger.info("Local data already exists, skipping")
                return

            admin = User(
                email=ADMIN_EMAIL,
                password_hash=get_password_hash(ADMIN_PASSWORD),
                name="Local Admin",
                role=UserRole.ADMIN.value,
                verified=True,
            )
            db.add(admin)
            await db.flush()
            db.add(Profile(user_id=admin.id, dietary_prefs=[], social_links={}))

            for data in SAMPLE_RESTAURANTS:
                db.add(Restaurant(created_by=admin.id, images=[], opening_hours={}, **data))

            await db.commit()
            logger.info(f"Local data initialized, admin login: {ADMIN_EMAIL} / {ADMIN_PASSWORD}")
        except Exception as e:
            logger.error(f"Error initializing data: {e}")
            await db.rollback()
            raise


if __name__ == "__main__":
    asyncio.run(init_local_data())
