"""Registry for valuation change subscribers."""
import inspect
import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

TOPIC_SNAPSHOT = "snapshot"
TOPIC_POSITIONS = "positions"
TOPIC_CURRENCY = "currency"


class SubscriberRegistry:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Any], Any]]] = {}

    def subscribe(self, topic: str, handler: Callable[[Any], Any]) -> Callable[[], None]:
        """Register a handler; returns a callable that unsubscribes it."""
        self._subscribers.setdefault(topic, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._subscribers.get(topic, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    async def publish(self, topic: str, event: Any) -> None:
        for handler in list(self._subscribers.get(topic, [])):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                # Log and continue with the remaining handlers
                logger.exception("Subscriber for '%s' failed", topic)

    def count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, []))
