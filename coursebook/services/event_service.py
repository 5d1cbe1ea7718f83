"""
Event service: an in-memory event log with publish/subscribe.
"""

import logging
import threading
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set

from ..core.entities import Event
from ..core.enums import EventType
from ..core.interfaces import EventHandler

logger = logging.getLogger(__name__)


@dataclass
class EventSubscription:
    """Event subscription information."""
    subscriber_id: str
    event_types: Set[EventType]
    handler: Callable[[Event], None]
    filter_func: Optional[Callable[[Event], bool]] = None
    created_at: float = field(default_factory=time.time)


class InMemoryEventStore:
    """In-memory event store keyed by stream.

    Unbounded by default. With ``max_events`` set, the oldest events are
    dropped once the store holds more than that many.
    """

    def __init__(self, max_events: Optional[int] = None):
        self._events: Dict[str, List[Event]] = defaultdict(list)
        self._ordered: List[Event] = []
        self._max_events = max_events
        self._lock = threading.RLock()

    def append_event(self, event: Event) -> None:
        """Append an event to the store."""
        with self._lock:
            self._events[event.stream_id].append(event)
            self._ordered.append(event)
            if self._max_events is not None:
                while len(self._ordered) > self._max_events:
                    self._evict_oldest()

    def _evict_oldest(self) -> None:
        oldest = self._ordered.pop(0)
        stream = self._events[oldest.stream_id]
        stream.pop(0)
        if not stream:
            del self._events[oldest.stream_id]

    def get_events(self, stream_id: Optional[str] = None, from_version: int = 0) -> List[Event]:
        """Get events for a stream, or every event when no stream is given."""
        with self._lock:
            if stream_id is None:
                return self._ordered[from_version:]
            return list(self._events.get(stream_id, []))[from_version:]

    def stream_ids(self) -> List[str]:
        with self._lock:
            return list(self._events.keys())

    def __len__(self) -> int:
        return len(self._ordered)


class EventService(EventHandler):
    """Records registry events and fans them out to subscribers.

    The service is itself an ``EventHandler`` so it can be attached directly
    to an ``EnrollmentRegistry``. Subscribers run synchronously in publish
    order; a failing subscriber is logged and does not stop the others.
    """

    def __init__(self, event_types: Optional[Set[EventType]] = None,
                 max_events: Optional[int] = None):
        self._event_types = set(event_types) if event_types else set(EventType)
        self._event_store = InMemoryEventStore(max_events)
        self._subscriptions: Dict[str, EventSubscription] = {}
        self._delivered = 0
        self._failed = 0
        self._lock = threading.RLock()

    def can_handle(self, event_type: str) -> bool:
        return any(et.value == event_type for et in self._event_types)

    def handle_event(self, event: Event) -> None:
        self.publish_event(event)

    def publish_event(self, event: Event) -> None:
        """Store an event and notify subscribers."""
        with self._lock:
            self._event_store.append_event(event)
            self._notify_subscribers(event)

    def subscribe(self, subscriber_id: str, event_types: Set[EventType],
                  handler: Callable[[Event], None],
                  filter_func: Optional[Callable[[Event], bool]] = None) -> None:
        """Subscribe to events."""
        with self._lock:
            self._subscriptions[subscriber_id] = EventSubscription(
                subscriber_id=subscriber_id,
                event_types=set(event_types),
                handler=handler,
                filter_func=filter_func
            )

    def unsubscribe(self, subscriber_id: str) -> None:
        """Unsubscribe from events."""
        with self._lock:
            self._subscriptions.pop(subscriber_id, None)

    def _notify_subscribers(self, event: Event) -> None:
        for subscription in list(self._subscriptions.values()):
            if event.event_type not in subscription.event_types:
                continue
            if subscription.filter_func and not subscription.filter_func(event):
                continue
            try:
                subscription.handler(event)
                self._delivered += 1
            except Exception:
                self._failed += 1
                logger.exception("Error notifying subscriber %s", subscription.subscriber_id)

    def get_events(self, stream_id: Optional[str] = None,
                   event_type: Optional[EventType] = None) -> List[Event]:
        """Get recorded events, optionally narrowed by stream and type."""
        events = self._event_store.get_events(stream_id)
        if event_type is not None:
            events = [event for event in events if event.event_type == event_type]
        return events

    def get_event_streams(self) -> List[str]:
        return self._event_store.stream_ids()

    def get_processing_statistics(self) -> Dict[str, Any]:
        """Get event processing statistics."""
        with self._lock:
            return {
                'total_events': len(self._event_store),
                'streams': len(self._event_store.stream_ids()),
                'delivered': self._delivered,
                'failed': self._failed,
                'active_subscriptions': len(self._subscriptions),
            }
