"""
Event bus for panel communication.
Decoupled pub/sub pattern for cross-panel events.
"""

import logging
from typing import Callable, Any

logger = logging.getLogger(__name__)


class EventBus:
    """Central event system for panel communication."""

    _subscribers: dict[str, list[Callable]] = {}

    @classmethod
    def subscribe(cls, event: str, callback: Callable):
        """Subscribe to an event."""
        if event not in cls._subscribers:
            cls._subscribers[event] = []
        cls._subscribers[event].append(callback)

    @classmethod
    def publish(cls, event: str, data: Any = None):
        """Publish an event to all subscribers."""
        for cb in cls._subscribers.get(event, []):
            try:
                cb(data)
            except Exception as e:
                logger.error(f"EventBus error on '{event}': {e}")

    @classmethod
    def unsubscribe(cls, event: str, callback: Callable):
        """Unsubscribe from an event."""
        if event in cls._subscribers:
            try:
                cls._subscribers[event].remove(callback)
            except ValueError:
                pass

    @classmethod
    def clear(cls):
        """Clear all subscriptions."""
        cls._subscribers.clear()


# Event constants - use these for type safety
class Events:
    """Event name constants."""
    # Save file events
    SAVE_LOADED = "save.loaded"
    SAVE_MODIFIED = "save.modified"
    SAVE_WRITTEN = "save.written"
    BROWSE_REQUESTED = "save.browse_requested"

    # Selection events
    GAME_SELECTED = "game.selected"
    SLOT_SELECTED = "slot.selected"
    STAGE_SELECTED = "stage.selected"

    # Status
    STATUS_UPDATE = "status.update"
