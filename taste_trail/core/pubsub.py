# taste_trail/core/pubsub.py
"""
Live-push bus.

With the redis backend every worker publishes to one channel and every
worker runs a listener that forwards messages for users whose sockets it
holds. The local backend skips redis and delivers in-process.
"""
import asyncio
import json
from typing import Optional

from redis.exceptions import RedisError

from taste_trail.shared.utils.logger import get_logger
from .config import settings
from .redis import RedisManager
from .websocket_manager import ConnectionManager, connection_manager

logger = get_logger(__name__)


class PushBroker:
    def __init__(self, manager: ConnectionManager):
        self.manager = manager
        self._listener: Optional[asyncio.Task] = None

    @property
    def uses_redis(self) -> bool:
        return settings.PUSH_BACKEND == "redis"

    async def start(self):
        if not self.uses_redis or self._listener is not None:
            return
        self._listener = asyncio.get_running_loop().create_task(
            self._listen(), name="push-listener"
        )
        logger.info(f"Push listener subscribed to {settings.PUSH_CHANNEL}")

    async def stop(self):
        if self._listener is None:
            return
        self._listener.cancel()
        await asyncio.gather(self._listener, return_exceptions=True)
        self._listener = None

    async def publish(self, user_id: str, message: dict):
        """Best-effort: never raises."""
        if self.uses_redis:
            try:
                envelope = json.dumps({"user_id": user_id, "message": message}, default=str)
                await RedisManager.get_client().publish(settings.PUSH_CHANNEL, envelope)
                return
            except (RedisError, OSError) as e:
                logger.warning(f"Push publish failed, delivering locally: {e}")
        try:
            await self.manager.send_local(user_id, message)
        except Exception as e:
            logger.warning(f"Local push to {user_id} failed: {e}")

    async def _listen(self):
        while True:
            pubsub = RedisManager.get_client().pubsub()
            try:
                await pubsub.subscribe(settings.PUSH_CHANNEL)
                async for item in pubsub.listen():
                    if item.get("type") != "message":
                        continue
                    await self._dispatch(item.get("data"))
            except asyncio.CancelledError:
                await pubsub.aclose()
                raise
            except (RedisError, OSError) as e:
                logger.warning(f"Push listener lost redis, retrying: {e}")
                await pubsub.aclose()
                await asyncio.sleep(5)

    async def _dispatch(self, raw):
        try:
            envelope = json.loads(raw)
            user_id = envelope["user_id"]
        except (TypeError, ValueError, KeyError):
            logger.warning("Ignoring malformed push envelope")
            return
        # Only users with a socket on this worker are of interest
        if self.manager.is_connected(user_id):
            await self.manager.send_local(user_id, envelope.get("message", {}))


push_broker = PushBroker(connection_manager)
