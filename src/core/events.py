"""Event bus for hedger notifications."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Notifications observable by external listeners."""

    # Exposure
    EXPOSURE_UPDATED = "exposure.updated"

    # Hedge position
    POSITION_INCREASED = "position.increased"
    POSITION_DECREASED = "position.decreased"

    # Rebalance
    REBALANCE_SKIPPED = "rebalance.skipped"
    REBALANCE_FAILED = "rebalance.failed"

    # Configuration
    THRESHOLD_UPDATED = "config.threshold_updated"
    EXECUTION_FEE_UPDATED = "config.execution_fee_updated"
    SKIP_REBALANCING_UPDATED = "config.skip_rebalancing_updated"

    # Collateral
    COLLATERAL_ADDED = "collateral.added"
    COLLATERAL_WITHDRAWN = "collateral.withdrawn"


@dataclass
class Event:
    """A single published notification."""

    type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    source: str = "hedger"
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "type": self.type.value,
            "data": self.data,
            "source": self.source,
            "timestamp": self.timestamp,
        }


@dataclass
class EventHandler:
    """A registered subscription."""

    callback: Callable
    event_types: Set[EventType]
    priority: int = 0  # Higher = earlier
    once: bool = False

    def matches(self, event: Event) -> bool:
        """Check whether this subscription wants the event."""
        return event.type in self.event_types


@dataclass
class EventBus:
    """In-process publish/subscribe hub.

    Handlers may be plain functions or coroutines. A handler that raises is
    logged and skipped; observers never abort the invocation that published
    the event.
    """

    max_history: int = 200

    _handlers: List[EventHandler] = field(default_factory=list)
    _history: List[Event] = field(default_factory=list)
    _errors: int = 0

    def __post_init__(self):
        """Initialize after dataclass creation."""
        self._handlers = []
        self._history = []
        self._errors = 0

    def subscribe(
        self,
        event_types: EventType | List[EventType],
        callback: Callable,
        priority: int = 0,
        once: bool = False,
    ) -> EventHandler:
        """Subscribe a callback to one or more event types.

        Args:
            event_types: Event type(s) to listen for
            callback: Called with the Event
            priority: Higher priority handlers run first
            once: Drop the handler after its first call

        Returns:
            EventHandler usable with unsubscribe()
        """
        if isinstance(event_types, EventType):
            event_types = [event_types]

        handler = EventHandler(
            callback=callback,
            event_types=set(event_types),
            priority=priority,
            once=once,
        )
        self._handlers.append(handler)
        self._handlers.sort(key=lambda h: h.priority, reverse=True)
        return handler

    def unsubscribe(self, handler: EventHandler) -> bool:
        """Remove a subscription. Returns True if it was registered."""
        if handler in self._handlers:
            self._handlers.remove(handler)
            return True
        return False

    def on(self, event_types: EventType | List[EventType], priority: int = 0):
        """Decorator form of subscribe()."""
        def decorator(func: Callable) -> Callable:
            self.subscribe(event_types, func, priority=priority)
            return func
        return decorator

    async def emit(
        self,
        event_type: EventType,
        data: Optional[Dict[str, Any]] = None,
        source: str = "hedger",
    ) -> Event:
        """Build and publish an event."""
        event = Event(type=event_type, data=data or {}, source=source)
        await self.publish(event)
        return event

    async def publish(self, event: Event) -> None:
        """Publish a pre-built event to every matching handler."""
        self._history.append(event)
        if len(self._history) > self.max_history:
            self._history = self._history[-self.max_history:]

        spent = []
        for handler in [h for h in self._handlers if h.matches(event)]:
            try:
                result = handler.callback(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                self._errors += 1
                logger.error(f"Event handler error for {event.type.value}: {e}")
            if handler.once:
                spent.append(handler)

        for handler in spent:
            self.unsubscribe(handler)

        logger.debug(f"Published {event.type.value}: {event.data}")

    def get_history(
        self,
        event_type: Optional[EventType] = None,
        limit: int = 20,
    ) -> List[Event]:
        """Most recent events, oldest first."""
        history = self._history
        if event_type:
            history = [e for e in history if e.type == event_type]
        return history[-limit:]

    def clear_history(self) -> None:
        """Forget published events."""
        self._history.clear()

    @property
    def handler_errors(self) -> int:
        """Number of handler calls that raised."""
        return self._errors
