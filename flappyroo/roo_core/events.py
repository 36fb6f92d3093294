"""
Event bus for lifecycle notifications to the presentation layer.

Handlers run synchronously inside the emitting call. A failing handler is
logged and never interrupts the simulation.
"""

from __future__ import annotations

import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class GameEventType(Enum):
    """Lifecycle event types."""
    GAME_STARTED = auto()
    LEVEL_UP = auto()
    ITEM_COLLECTED = auto()
    GAME_OVER = auto()
    PAUSED = auto()
    RESUMED = auto()
    STATE_CHANGED = auto()


@dataclass
class GameEvent:
    """
    Event data container.

    Attributes:
        type: Event type
        data: Event payload
        timestamp: Time in ms; the game stamps events with its own clock
    """
    type: GameEventType
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=lambda: time.monotonic() * 1000.0)


Handler = Callable[[GameEvent], None]


class EventBus:
    """Synchronous pub/sub with a bounded history."""

    def __init__(self, history_limit: int = 100) -> None:
        self._handlers: Dict[GameEventType, List[Handler]] = defaultdict(list)
        self._global_handlers: List[Handler] = []
        self._event_history: List[GameEvent] = []
        self._history_limit = history_limit

    def subscribe(self, event_type: GameEventType, handler: Handler) -> Callable[[], None]:
        """
        Subscribe to an event type.

        Args:
            event_type: Type of event to listen for
            handler: Callback function

        Returns:
            Unsubscribe function
        """
        self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)

        return unsubscribe

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Subscribe to every event type. Returns an unsubscribe function."""
        self._global_handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._global_handlers:
                self._global_handlers.remove(handler)

        return unsubscribe

    def emit(self, event: GameEvent) -> None:
        """Record the event and dispatch it to handlers."""
        self._add_to_history(event)
        handlers = self._handlers.get(event.type, []) + self._global_handlers
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.type.name}: {e}")

    def _add_to_history(self, event: GameEvent) -> None:
        self._event_history.append(event)
        if len(self._event_history) > self._history_limit:
            self._event_history.pop(0)

    def get_history(
        self,
        event_type: Optional[GameEventType] = None,
        limit: int = 10
    ) -> List[GameEvent]:
        """Get recent events from history."""
        history = self._event_history
        if event_type is not None:
            history = [e for e in history if e.type == event_type]
        return history[-limit:]

    def clear_history(self) -> None:
        self._event_history.clear()
