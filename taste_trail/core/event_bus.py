import asyncio
from typing import Any, Callable, Dict, List

from taste_trail.shared.utils import logger
from .config import settings


class EventBus:
    """
    In-process dispatcher for post-commit side effects.

    Handlers are best-effort: a failing or slow handler is logged and
    never propagates back into the request that published the event.
    """

    def __init__(self):
        self.subscriptions: Dict[str, List[Callable]] = {}
        self.log = logger.get_logger("event_bus")

    async def publish(self, event_name: str, event_data: Any):
        handlers = self.subscriptions.get(event_name)
        if not handlers:
            return
        await asyncio.gather(*(self._run_handler(h, event_data) for h in handlers))

    async def _run_handler(self, handler: Callable, event_data: Any):
        try:
            await asyncio.wait_for(
                handler(event_data)
                if asyncio.iscoroutinefunction(handler)
                else asyncio.to_thread(handler, event_data),
                timeout=settings.EVENT_HANDLER_TIMEOUT,
            )
        except asyncio.TimeoutError:
            self.log.error(f"Handler timed out: {handler.__name__}")
        except Exception as e:
            self.log.error(f"Error in event handler {handler.__name__}: {e}")

    def subscribe(self, event_name: str, handler: Callable[[Any], Any]):
        handlers = self.subscriptions.setdefault(event_name, [])
        if handler in handlers:
            return
        handlers.append(handler)
        self.log.debug(f"Subscribed {handler.__name__} to: {event_name}")

    def clear(self):
        self.subscriptions.clear()


event_bus = EventBus()
