"""
Event management system for decoupled manager communication.

This module provides a central event bus that allows the combat components to
report what happened (rounds resolved, weapons broken, log lines) without
depending on whoever renders or stores that information.
"""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .events import GameEvent, EventType


class EventPriority(Enum):
    """Event processing priorities (lower value is processed first)."""
    CRITICAL = 0
    HIGH = 1
    NORMAL = 2
    LOW = 3


@dataclass
class QueuedEvent:
    """An event in the processing queue with metadata."""
    event: "GameEvent"
    priority: EventPriority = EventPriority.NORMAL
    timestamp: datetime = field(default_factory=datetime.now)
    sequence: int = 0
    source: Optional[str] = None

    def __lt__(self, other: "QueuedEvent") -> bool:
        if self.priority.value != other.priority.value:
            return self.priority.value < other.priority.value
        # Same priority keeps publish order
        return self.sequence < other.sequence


EventSubscriber = Callable[["GameEvent"], None]


class EventManager:
    """Central event bus for combat system communication.

    Events published with :meth:`publish` are queued until
    :meth:`process_events` runs; :meth:`publish_immediate` dispatches at once.
    Subscriber exceptions are isolated so one failing listener cannot abort
    combat resolution; they are reported through the debug callback.
    """

    def __init__(self, enable_debug_logging: bool = False, history_size: int = 1000):
        self.enable_debug_logging = enable_debug_logging

        self._subscribers: dict["EventType", list[EventSubscriber]] = defaultdict(list)
        self._universal_subscribers: list[EventSubscriber] = []
        self._event_queue: deque[QueuedEvent] = deque()

        self._events_published = 0
        self._events_processed = 0
        self._subscriber_errors = 0
        self._event_history: deque[QueuedEvent] = deque(maxlen=history_size)

        self._debug_callback: Optional[Callable[[str], None]] = None

    def set_debug_callback(self, callback: Optional[Callable[[str], None]]) -> None:
        """Set a callback function for debug logging."""
        self._debug_callback = callback

    def _debug_log(self, message: str) -> None:
        if self.enable_debug_logging and self._debug_callback:
            self._debug_callback(f"[EVENT] {message}")

    def subscribe(
        self,
        event_type: "EventType",
        subscriber: EventSubscriber,
        subscriber_name: Optional[str] = None
    ) -> None:
        """Subscribe to events of a specific type.

        Args:
            event_type: The type of events to subscribe to
            subscriber: Callback function to handle events
            subscriber_name: Optional name for debugging
        """
        self._subscribers[event_type].append(subscriber)
        subscriber_display = subscriber_name or getattr(subscriber, '__name__', 'anonymous')
        self._debug_log(f"Subscribed {subscriber_display} to {event_type.name} events")

    def subscribe_all(self, subscriber: EventSubscriber, subscriber_name: Optional[str] = None) -> None:
        """Subscribe to every event type."""
        self._universal_subscribers.append(subscriber)
        subscriber_display = subscriber_name or getattr(subscriber, '__name__', 'anonymous')
        self._debug_log(f"Subscribed {subscriber_display} to ALL events")

    def unsubscribe(self, event_type: "EventType", subscriber: EventSubscriber) -> bool:
        """Unsubscribe from events of a specific type.

        Returns:
            True if subscriber was found and removed
        """
        try:
            self._subscribers[event_type].remove(subscriber)
        except ValueError:
            return False
        self._debug_log(f"Unsubscribed from {event_type.name} events")
        return True

    def publish(
        self,
        event: "GameEvent",
        priority: EventPriority = EventPriority.NORMAL,
        source: Optional[str] = None
    ) -> None:
        """Queue an event for the next :meth:`process_events` call."""
        self._events_published += 1
        queued_event = QueuedEvent(
            event=event,
            priority=priority,
            sequence=self._events_published,
            source=source or "unknown"
        )
        self._event_queue.append(queued_event)
        self._debug_log(
            f"Published {event.__class__.__name__} (priority: {priority.name}, source: {queued_event.source})"
        )

    def publish_immediate(self, event: "GameEvent", source: Optional[str] = None) -> None:
        """Publish and immediately dispatch an event."""
        self._events_published += 1
        self._process_event(QueuedEvent(
            event=event,
            priority=EventPriority.CRITICAL,
            sequence=self._events_published,
            source=source or "immediate"
        ))

    def process_events(self, max_events: Optional[int] = None) -> int:
        """Dispatch queued events in priority order.

        Args:
            max_events: Maximum number of events to process (None for all)

        Returns:
            Number of events processed
        """
        sorted_events = sorted(self._event_queue)
        self._event_queue.clear()

        processed_count = 0
        for queued_event in sorted_events:
            if max_events is not None and processed_count >= max_events:
                self._event_queue.extendleft(reversed(sorted_events[processed_count:]))
                break
            self._process_event(queued_event)
            processed_count += 1

        return processed_count

    def _process_event(self, queued_event: QueuedEvent) -> None:
        event = queued_event.event
        self._event_history.append(queued_event)
        self._events_processed += 1

        self._debug_log(f"Processing {event.__class__.__name__} from {queued_event.source}")

        subscribers = list(self._subscribers.get(event.event_type, []))
        subscribers.extend(self._universal_subscribers)

        for subscriber in subscribers:
            try:
                subscriber(event)
            except Exception as e:
                self._subscriber_errors += 1
                self._debug_log(
                    f"Error in subscriber {getattr(subscriber, '__name__', 'anonymous')}: {e}"
                )

    def clear_queue(self) -> int:
        """Drop all queued events and return how many were dropped."""
        count = len(self._event_queue)
        self._event_queue.clear()
        return count

    def has_queued_events(self) -> bool:
        return len(self._event_queue) > 0

    def get_statistics(self) -> dict[str, Any]:
        """Get event processing statistics."""
        return {
            'events_published': self._events_published,
            'events_processed': self._events_processed,
            'events_queued': len(self._event_queue),
            'subscriber_errors': self._subscriber_errors,
            'subscribers_count': sum(len(subs) for subs in self._subscribers.values()),
            'universal_subscribers_count': len(self._universal_subscribers),
        }

    def get_recent_events(self, count: int = 10) -> list[dict[str, Any]]:
        """Describe the most recently processed events for debugging."""
        recent = list(self._event_history)[-count:]
        return [
            {
                'event_type': queued.event.__class__.__name__,
                'encounter_id': getattr(queued.event, 'encounter_id', None),
                'priority': queued.priority.name,
                'source': queued.source,
                'timestamp': queued.timestamp.isoformat()
            }
            for queued in recent
        ]

    def shutdown(self) -> None:
        """Clear all subscribers, queued events and history."""
        self._subscribers.clear()
        self._universal_subscribers.clear()
        self._event_queue.clear()
        self._event_history.clear()
