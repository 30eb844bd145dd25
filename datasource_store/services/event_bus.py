"""
Event Bus - In-process publisher for datasource domain events.
Handlers subscribe per event class; a failing handler does not stop delivery
to the remaining handlers.
"""

import logging
import uuid
from collections import defaultdict
from threading import Lock
from typing import Callable, Dict, List, Optional, Type

from ..models.events import DataSourceEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DataSourceEvent], None]


class EventBus:
    """Synchronous in-process event bus"""

    def __init__(self):
        self._lock = Lock()
        self._handlers: Dict[Optional[Type[DataSourceEvent]], List[tuple]] = defaultdict(list)
        self.events_published = 0
        self.handler_errors = 0

    def subscribe(self, handler: EventHandler, event_type: Optional[Type[DataSourceEvent]] = None) -> str:
        """
        Register a handler.

        Args:
            handler: Callable receiving the event
            event_type: Event class to listen for; None receives every event

        Returns:
            Subscription id for unsubscribe()
        """
        subscription_id = str(uuid.uuid4())
        with self._lock:
            self._handlers[event_type].append((subscription_id, handler))
        return subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        with self._lock:
            for event_type, handlers in self._handlers.items():
                for entry in handlers:
                    if entry[0] == subscription_id:
                        handlers.remove(entry)
                        return True
        return False

    def publish(self, event: DataSourceEvent) -> int:
        """
        Deliver an event to all matching handlers.

        Returns:
            Number of handlers that received the event without error
        """
        with self._lock:
            handlers = list(self._handlers.get(type(event), [])) + list(self._handlers.get(None, []))

        delivered = 0
        for subscription_id, handler in handlers:
            try:
                handler(event)
                delivered += 1
            except Exception as e:
                self.handler_errors += 1
                logger.error(f"Event handler {subscription_id} failed for {event.event_name}: {str(e)}")

        self.events_published += 1
        logger.debug(f"Published {event.event_name} to {delivered} handler(s)")
        return delivered
