"""
Event Bus - Domain notifications between engine modules.

Engines announce what changed (a client was created, a project moved on the
board, stock went critical); listeners subscribe by event name. A failing
listener is logged and skipped, it never breaks the operation that emitted.
"""

from typing import Any, Callable, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], None]


def _handler_name(handler: Handler) -> str:
    return getattr(handler, '__name__', repr(handler))


class EventBus:
    """Synchronous publish/subscribe keyed by event name."""

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {}

    def on(self, event_name: str, handler: Handler):
        """Subscribe `handler` to `event_name`; it receives the event payload dict."""
        self._handlers.setdefault(event_name, []).append(handler)
        logger.debug(f"Subscribed {_handler_name(handler)} to '{event_name}'")

    def off(self, event_name: str, handler: Handler) -> bool:
        """Unsubscribe. Returns False if the handler was not subscribed."""
        handlers = self._handlers.get(event_name, [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def has_handlers(self, event_name: str) -> bool:
        return bool(self._handlers.get(event_name))

    def emit(self, event_name: str, event_data: Optional[Dict[str, Any]] = None):
        """Deliver the payload to every subscriber, in subscription order."""
        payload = event_data if event_data is not None else {}
        logger.debug(f"Event '{event_name}': {sorted(payload)}")

        # Copy so a handler may unsubscribe itself while being called
        for handler in list(self._handlers.get(event_name, [])):
            try:
                handler(payload)
            except Exception as e:
                logger.error(f"Handler {_handler_name(handler)} failed on '{event_name}': {e}")

    def clear(self):
        """Drop every subscription (test isolation)."""
        self._handlers.clear()


bus = EventBus()


# =============================================================================
# EVENT NAMES
# =============================================================================

# Clients
EVENT_CLIENT_CREATED = 'client_created'
EVENT_CLIENT_DELETED = 'client_deleted'
EVENT_INTERACTION_LOGGED = 'interaction_logged'

# Pipeline
EVENT_PROJECT_CREATED = 'project_created'
EVENT_PROJECT_STATUS_CHANGED = 'project_status_changed'

# Inventory
EVENT_INVENTORY_ITEM_ADDED = 'inventory_item_added'
EVENT_INVENTORY_ITEM_UPDATED = 'inventory_item_updated'
EVENT_INVENTORY_ITEM_DELETED = 'inventory_item_deleted'
EVENT_LOW_STOCK_ALERT = 'low_stock_alert'

# Calendar
EVENT_EVENT_SCHEDULED = 'event_scheduled'
EVENT_EVENT_DELETED = 'event_deleted'

# Proposals and notifications
EVENT_PROPOSAL_READY = 'proposal_ready'
EVENT_NOTIFICATION_SENT = 'notification_sent'
