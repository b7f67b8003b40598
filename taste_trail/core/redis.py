import json
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from redis.asyncio import Redis
from redis.exceptions import RedisError

from taste_trail.shared.utils.logger import get_logger
from .config import settings

logger = get_logger(__name__)


class RedisManager:
    _instance = None

    @classmethod
    def get_client(cls) -> Redis:
        if cls._instance is None:
            cls._instance = Redis.from_url(settings.REDIS_URL, decode_responses=True)
        return cls._instance

    @classmethod
    async def close(cls):
        if cls._instance is not None:
            await cls._instance.aclose()
            cls._instance = None


class ResponseCache:
    """
    Best-effort JSON cache. Redis being down is a miss, never an error:
    callers always fall back to querying the database.
    """

    def __init__(self, prefix: str = "tt"):
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    @property
    def enabled(self) -> bool:
        return settings.CACHE_ENABLED

    async def get_json(self, key: str) -> Optional[Any]:
        if not self.enabled:
            return None
        try:
            raw = await RedisManager.get_client().get(self._key(key))
        except (RedisError, OSError) as e:
            logger.warning(f"Cache get failed for {key}: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Dropping undecodable cache entry {key}")
            await self.delete(key)
            return None

    async def set_json(self, key: str, value: Any, ttl: int) -> bool:
        if not self.enabled:
            return False
        try:
            payload = json.dumps(jsonable_encoder(value))
            await RedisManager.get_client().set(self._key(key), payload, ex=ttl)
            return True
        except (RedisError, OSError) as e:
            logger.warning(f"Cache set failed for {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        if not self.enabled:
            return False
        try:
            await RedisManager.get_client().delete(self._key(key))
            return True
        except (RedisError, OSError) as e:
            logger.warning(f"Cache delete failed for {key}: {e}")
            return False

    async def invalidate_pattern(self, pattern: str) -> int:
        if not self.enabled:
            return 0
        client = RedisManager.get_client()
        removed = 0
        try:
            async for key in client.scan_iter(match=self._key(pattern), count=200):
                removed += await client.delete(key)
        except (RedisError, OSError) as e:
            logger.warning(f"Cache invalidation failed for {pattern}: {e}")
        return removed


cache = ResponseCache()


async def check_connection() -> bool:
    try:
        client = RedisManager.get_client()
        await client.ping()
        return True
    except (RedisError, OSError):
        return False
