"""EventBus for decoupled publish/subscribe communication."""

from enum import Enum, auto
from typing import Any, Callable
from collections import defaultdict


class EventType(Enum):
    # State changes
    STATE_CHANGED = auto()        # data: state (ParameterState), context (dict)
    INTERACTION_CHANGED = auto()  # data: param (str | list[str] | None)

    # Derived geometry, published after every full recompute
    GEOMETRY_UPDATED = auto()     # data: scene (DerivedScene)

    # Profiles
    PROFILE_ADDED = auto()        # data: index (int), name (str)
    PROFILE_ACTIVATED = auto()    # data: index (int), name (str)
    PROFILE_REMOVED = auto()      # data: index (int), name (str)


class EventBus:
    """Simple publish/subscribe event system."""

    def __init__(self):
        self._handlers: dict[EventType, list[Callable]] = defaultdict(list)

    def subscribe(self, event_type: EventType, handler: Callable) -> Callable[[], None]:
        """Register *handler*; returns a callable that unsubscribes it."""
        self._handlers[event_type].append(handler)
        return lambda: self.unsubscribe(event_type, handler)

    def unsubscribe(self, event_type: EventType, handler: Callable) -> None:
        handlers = self._handlers[event_type]
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event_type: EventType, **data: Any) -> None:
        # Copy so handlers may unsubscribe while being called
        for handler in list(self._handlers[event_type]):
            handler(**data)

    def clear(self) -> None:
        self._handlers.clear()
