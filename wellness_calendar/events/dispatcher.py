"""In-process notification of activity changes.

Views and integrations subscribe a handler and get called after every
successful activity mutation; they unsubscribe with the callable returned by
`subscribe`.
"""
import logging
import threading
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

ACTIVITY_UPDATED = "activity.updated"

Handler = Callable[[str, Dict[str, Any]], None]


class ActivityEventDispatcher:
    """Explicit observer list for activity change events."""

    def __init__(self):
        self._handlers: List[Handler] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: Handler) -> Callable[[], None]:
        with self._lock:
            self._handlers.append(handler)

        def unsubscribe():
            self.unsubscribe(handler)

        return unsubscribe

    def unsubscribe(self, handler: Handler):
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def notify(self, event_type: str, payload: Dict[str, Any]) -> int:
        """Call every handler; returns how many succeeded."""
        with self._lock:
            handlers = list(self._handlers)
        delivered = 0
        for handler in handlers:
            try:
                handler(event_type, payload)
                delivered += 1
            except Exception:
                logger.exception("Activity event handler %r failed for %s", handler, event_type)
        return delivered

    def activity_updated(self, user_id: str, action: str, activity_ids: List[str], **extra) -> int:
        payload = {"user_id": user_id, "action": action, "activity_ids": activity_ids}
        payload.update(extra)
        return self.notify(ACTIVITY_UPDATED, payload)


# Global instance
activity_events = ActivityEventDispatcher()
