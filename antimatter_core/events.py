"""
Event System Module

Publish/subscribe dispatcher the simulation uses to notify its host about
things worth showing to the player: unlocks, prestige, boosts, offline
progress and the terminal infinity state.
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import RLock
import logging
import uuid


class GameEvent(Enum):
    """Events the simulation can publish"""

    # Dimension events
    DIMENSION_UNLOCKED = "dimension.unlocked"

    # Prestige events
    PRESTIGE_COMPLETED = "prestige.completed"
    MILESTONE_UNLOCKED = "prestige.milestone_unlocked"

    # Offline bank events
    OFFLINE_PROGRESS = "offline.progress"
    BOOST_STARTED = "offline.boost_started"
    BOOST_ENDED = "offline.boost_ended"

    # Lifecycle events
    INFINITY_REACHED = "game.infinity_reached"
    SAVE_IMPORTED = "game.save_imported"


@dataclass
class EventPayload:
    """Payload for game events"""
    event_type: GameEvent
    data: Dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'event_type': self.event_type.value,
            'data': self.data,
            'timestamp': self.timestamp.isoformat(),
            'event_id': self.event_id
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EventPayload':
        """Create from dictionary"""
        return cls(
            event_type=GameEvent(data['event_type']),
            data=data['data'],
            timestamp=datetime.fromisoformat(data['timestamp']) if isinstance(data['timestamp'], str) else data['timestamp'],
            event_id=data['event_id']
        )


class EventDispatcher:
    """Central event dispatcher - publish/subscribe pattern"""

    def __init__(self):
        self._handlers: Dict[GameEvent, List[Callable]] = {}
        self._global_handlers: List[Callable] = []  # catch-all handlers
        self._lock = RLock()
        self.logger = logging.getLogger("antimatter.events")

    def subscribe(self, event_type: GameEvent, handler: Callable) -> None:
        """Subscribe to a specific event type"""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
            self.logger.debug(f"Subscribed handler {_handler_name(handler)} to {event_type.value}")

    def subscribe_all(self, handler: Callable) -> None:
        """Subscribe to ALL events"""
        with self._lock:
            self._global_handlers.append(handler)
            self.logger.debug(f"Subscribed global handler {_handler_name(handler)}")

    def unsubscribe(self, event_type: GameEvent, handler: Callable) -> None:
        """Unsubscribe from a specific event type"""
        with self._lock:
            try:
                self._handlers.get(event_type, []).remove(handler)
                self.logger.debug(f"Unsubscribed handler {_handler_name(handler)} from {event_type.value}")
            except ValueError:
                self.logger.warning(f"Handler {_handler_name(handler)} was not subscribed to {event_type.value}")

    def publish(self, event: EventPayload) -> None:
        """Publish event to all subscribers"""
        with self._lock:
            self.logger.debug(f"Publishing event {event.event_type.value}")
            handlers = list(self._handlers.get(event.event_type, [])) + list(self._global_handlers)

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                # A broken host handler must not interrupt the simulation
                self.logger.error(f"Error in event handler {_handler_name(handler)} for {event.event_type.value}: {e}")

    def emit(self, event_type: GameEvent, **data: Any) -> EventPayload:
        """Build and publish a payload in one call"""
        event = EventPayload(event_type=event_type, data=data)
        self.publish(event)
        return event

    def clear(self) -> None:
        """Clear all handlers"""
        with self._lock:
            self._handlers.clear()
            self._global_handlers.clear()

    def get_handler_count(self, event_type: Optional[GameEvent] = None) -> int:
        """Get count of handlers for a specific event type or all"""
        with self._lock:
            if event_type:
                return len(self._handlers.get(event_type, []))
            total = sum(len(handlers) for handlers in self._handlers.values())
            return total + len(self._global_handlers)


def _handler_name(handler: Callable) -> str:
    return getattr(handler, "__name__", repr(handler))
