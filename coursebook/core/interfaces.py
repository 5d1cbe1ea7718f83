"""
Core interfaces and abstract base classes for the Coursebook engine.
"""

from abc import ABC, abstractmethod


class EventHandler(ABC):
    """Abstract base class for event handlers."""

    @abstractmethod
    def handle_event(self, event: 'Event') -> None:
        """Handle an event."""
        pass

    @abstractmethod
    def can_handle(self, event_type: str) -> bool:
        """Check if this handler can handle the event type."""
        pass
