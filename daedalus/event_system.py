"""
Event system for dungeon generation.

Generation phases emit events on an EventBus so tools and tests can watch a
pass unfold (draw debug overlays, count rejected rooms, collect timings)
without the generator knowing about them.
"""

import sys
from enum import Enum, auto
from typing import Callable, Any, Dict, List, Optional
from dataclasses import dataclass, field


class Event(Enum):
    """Event types emitted while a dungeon is generated."""

    # Pass lifecycle
    GENERATION_START = auto()  # kwargs: config
    GENERATION_END = auto()  # kwargs: result
    DUNGEON_CLEARED = auto()

    # Room placement
    ROOM_PLACED = auto()  # kwargs: room
    ROOM_REJECTED = auto()  # kwargs: origin, reason

    # Graph construction
    TETRAHEDRALIZATION_DONE = auto()  # kwargs: tetrahedra, edge_map
    DEGENERATE_RETRY = auto()  # kwargs: attempt, error
    MST_DONE = auto()  # kwargs: mst, excluded, extra_edges
    ROOM_MAP_DONE = auto()  # kwargs: room_map

    # Carving
    PATH_CARVED = auto()  # kwargs: start_room, goal_room, path
    PATH_FAILED = auto()  # kwargs: start_room, goal_room, reason

    # Instrumentation
    PHASE_TIMED = auto()  # kwargs: phase, ms


@dataclass
class EventData:
    """What a handler receives: the event and the keyword data it was emitted with."""

    event: Event
    kwargs: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        if not self.kwargs:
            return f"EventData({self.event.name})"
        details = ", ".join(f"{name}={value}" for name, value in self.kwargs.items())
        return f"EventData({self.event.name}, {details})"


# Handlers take the event data and return nothing
EventHandler = Callable[[EventData], None]


class EventBus:
    """
    Synchronous publish / subscribe hub for generation hooks.

    Handlers run in subscription order on the generating thread. A handler
    that raises is reported on stderr and the rest still run; a strict bus
    re-raises instead, which is what tests usually want.
    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict
        self._handlers: Dict[Event, List[EventHandler]] = {}

    def subscribe(self, event: Event, handler: EventHandler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe handler to every event type."""
        for event in Event:
            self.subscribe(event, handler)

    def unsubscribe(self, event: Event, handler: EventHandler) -> None:
        """
        Remove a handler.

        Raises:
            ValueError: If handler was not subscribed to event
        """
        handlers = self._handlers.get(event, [])
        if handler not in handlers:
            raise ValueError(f"Handler not subscribed to event {event.name}")
        handlers.remove(handler)

    def emit(self, event: Event, **kwargs: Any) -> None:
        """Call every handler subscribed to event with the given keyword data."""
        event_data = EventData(event=event, kwargs=kwargs)

        # Copy so a handler may unsubscribe itself while being called
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(event_data)
            except Exception as e:
                if self.strict:
                    raise
                print(f"[EventBus] Handler error for {event.name}: {e}", file=sys.stderr)

    def handler_count(self, event: Optional[Event] = None) -> int:
        """Number of handlers for event, or across all events if None."""
        if event is not None:
            return len(self._handlers.get(event, []))
        return sum(len(handlers) for handlers in self._handlers.values())
