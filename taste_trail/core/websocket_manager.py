# taste_trail/core/websocket_manager.py
"""
Per-process registry of open notification sockets with heartbeat.

Cross-process fan-out goes through core.pubsub; this module only knows
about sockets held by the current worker.
"""
import asyncio
import json
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from taste_trail.shared.utils.logger import get_logger
from .config import settings

logger = get_logger(__name__)


class ConnectionInfo:
    """Information about a WebSocket connection"""

    def __init__(self, websocket: WebSocket, user_id: str):
        self.websocket = websocket
        self.user_id = user_id
        self.connected_at = datetime.utcnow()
        self.last_ping = datetime.utcnow()
        self.last_pong = datetime.utcnow()

    def update_activity(self):
        self.last_pong = datetime.utcnow()


class ConnectionManager:
    def __init__(self):
        self.user_connections: Dict[str, List[WebSocket]] = {}
        self.connection_info: Dict[WebSocket, ConnectionInfo] = {}

        self.ping_interval = settings.PUSH_HEARTBEAT_SECONDS
        self.max_message_size = 4096

        self._tasks: list[asyncio.Task] = []
        self._started: bool = False

    async def start(self):
        """Start the heartbeat (must be called inside a running event loop)"""
        if self._started:
            return
        loop = asyncio.get_running_loop()
        self._tasks = [loop.create_task(self._heartbeat_loop(), name="notifications-heartbeat")]
        self._started = True
        logger.info("ConnectionManager heartbeat started")

    async def stop(self):
        if not self._started:
            return
        for t in self._tasks:
            t.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        self._started = False
        logger.info("ConnectionManager heartbeat stopped")

    async def connect(self, websocket: WebSocket, user_id: str):
        await websocket.accept()
        self.connection_info[websocket] = ConnectionInfo(websocket, user_id)
        self.user_connections.setdefault(user_id, []).append(websocket)

        await self._send_direct(websocket, {
            "type": "connected",
            "timestamp": datetime.utcnow().isoformat(),
        })
        logger.info(f"Notification socket connected: user={user_id}")

    def disconnect(self, websocket: WebSocket):
        info = self.connection_info.pop(websocket, None)
        if not info:
            return

        sockets = self.user_connections.get(info.user_id)
        if sockets and websocket in sockets:
            sockets.remove(websocket)
        if not sockets:
            self.user_connections.pop(info.user_id, None)

        logger.info(f"Notification socket disconnected: user={info.user_id}")

    def is_connected(self, user_id: str) -> bool:
        return bool(self.user_connections.get(user_id))

    async def send_local(self, user_id: str, message: dict) -> int:
        """Send to every socket this process holds for the user. Returns deliveries."""
        delivered = 0
        for websocket in list(self.user_connections.get(user_id, [])):
            if await self._send_direct(websocket, message):
                delivered += 1
            else:
                self.disconnect(websocket)
        return delivered

    async def send(self, websocket: WebSocket, message: dict) -> bool:
        return await self._send_direct(websocket, message)

    async def handle_message(self, websocket: WebSocket, message: str):
        """Handle incoming message from client (only keepalive traffic is expected)"""
        if len(message) > self.max_message_size:
            await self._send_direct(websocket, {"type": "error", "error": "Message too large"})
            return
        try:
            data = json.loads(message)
        except json.JSONDecodeError:
            await self._send_direct(websocket, {"type": "error", "error": "Invalid JSON"})
            return

        info = self.connection_info.get(websocket)
        if not info or not isinstance(data, dict):
            return

        if data.get("type") == "ping":
            info.last_ping = datetime.utcnow()
            await self._send_direct(websocket, {"type": "pong"})
        elif data.get("type") == "pong":
            info.update_activity()

    async def _send_direct(self, websocket: WebSocket, message: dict) -> bool:
        try:
            if websocket.client_state == WebSocketState.CONNECTED:
                await websocket.send_json(message)
                return True
        except Exception as e:
            logger.debug(f"Direct send failed: {e}")
        return False

    async def _heartbeat_loop(self):
        while True:
            await asyncio.sleep(self.ping_interval)
            try:
                for websocket, info in list(self.connection_info.items()):
                    if websocket.client_state != WebSocketState.CONNECTED:
                        self.disconnect(websocket)
                        continue
                    if await self._send_direct(websocket, {"type": "ping"}):
                        info.last_ping = datetime.utcnow()
                    else:
                        self.disconnect(websocket)
            except Exception as e:
                logger.error(f"Heartbeat error: {e}")

    def get_connection_stats(self) -> Dict:
        return {
            "total_connections": len(self.connection_info),
            "active_users": len(self.user_connections),
        }

    async def close_all(self):
        for websocket in list(self.connection_info.keys()):
            try:
                await websocket.close()
            except RuntimeError:
                pass
            self.disconnect(websocket)


connection_manager = ConnectionManager()
