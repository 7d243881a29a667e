# eversol/core/events.py
import logging
from collections import defaultdict
from typing import Any, Callable

logger = logging.getLogger(__name__)

# State-changed signals (no payload; observers re-read state)
WISHLIST_UPDATED = "wishlist-updated"
ADDRESS_UPDATED = "address-updated"
CART_UPDATED = "cart-updated"

# User-notification signal (payload: Notification)
SHOW_TOAST = "show-toast"

Handler = Callable[[Any], None]


class EventBus:
    """
    Named publish/subscribe channel shared by one shopper's engines.

    - subscribe(name, handler) returns an `unsubscribe()` callable
    - emit(name, payload) calls handlers in subscription order
    - a failing handler is logged and does not stop the others
    """

    def __init__(self):
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, name: str, handler: Handler) -> Callable[[], None]:
        self._handlers[name].append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(name, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def emit(self, name: str, payload: Any = None) -> None:
        # Copy so handlers may unsubscribe while being notified
        for handler in list(self._handlers.get(name, [])):
            try:
                handler(payload)
            except Exception:
                logger.exception("Event handler for '%s' failed", name)

    def handler_count(self, name: str) -> int:
        return len(self._handlers.get(name, []))
