"""Synchronous publish/subscribe for graph mutations.

Graphs own one EventManager each and fire one batched event per mutating
call. Listeners run synchronously, in registration order, and may query
or mutate the graph again from inside the callback.
"""

import time
from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from graphweave.core.exceptions import InvalidEventTypeError
from graphweave.utils.logging import get_logger

logger = get_logger(__name__)


class EventType(str, Enum):
    """Types of events fired by a graph."""

    ADD_NODES = "add_nodes"
    ADD_EDGES = "add_edges"
    REMOVE_NODES = "remove_nodes"
    REMOVE_EDGES = "remove_edges"

    # Fired around update_nodes/update_edges so derived indices can re-key
    BEFORE_UPDATE_NODES = "before_update_nodes"
    AFTER_UPDATE_NODES = "after_update_nodes"
    BEFORE_UPDATE_EDGES = "before_update_edges"
    AFTER_UPDATE_EDGES = "after_update_edges"

    @classmethod
    def _missing_(cls, value: object) -> "EventType | None":
        # camelCase names, e.g. "addNodes" or "beforeUpdateEdges"
        for member in cls:
            head, *rest = member.value.split("_")
            if value == head + "".join(word.capitalize() for word in rest):
                return member
        return None

    @classmethod
    def parse(cls, value: "EventType | str") -> "EventType":
        """Convert a string to an EventType.

        Both snake_case values and their camelCase spellings are accepted.

        Raises:
            InvalidEventTypeError: If the value is not a known event type.
        """
        try:
            return cls(value)
        except ValueError:
            raise InvalidEventTypeError(value) from None


@dataclass(frozen=True)
class GraphEvent:
    """An event fired by a graph.

    Attributes:
        source: The graph that fired the event.
        type: What happened.
        data: The affected nodes or edges, in the order they were processed.
        timestamp: Unix timestamp when the event was created.
    """

    source: Any
    type: EventType
    data: list[Any]
    timestamp: float = field(default_factory=time.time)


Listener = Callable[[GraphEvent], Any]


def _as_event_types(event_types: EventType | str | Iterable[EventType | str]) -> list[EventType]:
    if isinstance(event_types, str):
        return [EventType.parse(event_types)]
    return [EventType.parse(t) for t in event_types]


class EventManager:
    """Keeps listeners per event type and dispatches events to them.

    Not thread-safe. Use external locking if needed for concurrent access.
    """

    def __init__(self) -> None:
        self._listeners: dict[EventType, list[Listener]] = defaultdict(list)

    @staticmethod
    def make_event(source: Any, type: EventType | str, data: Iterable[Any]) -> GraphEvent:
        """Create an event.

        Args:
            source: The object firing the event.
            type: The event type or its string value.
            data: The affected items.

        Returns:
            A new GraphEvent.
        """
        return GraphEvent(source=source, type=EventType.parse(type), data=list(data))

    def add_listener(
        self,
        event_types: EventType | str | Iterable[EventType | str],
        listener: Listener,
    ) -> "EventManager":
        """Subscribe ``listener`` to one or more event types.

        Adding the same listener twice for a type has no effect.

        Returns:
            This manager, for chaining.
        """
        for event_type in _as_event_types(event_types):
            if listener not in self._listeners[event_type]:
                self._listeners[event_type].append(listener)
                logger.debug("Subscribed listener", event_type=event_type.value)
        return self

    def remove_listener(
        self,
        event_types: EventType | str | Iterable[EventType | str],
        listener: Listener,
    ) -> "EventManager":
        """Unsubscribe ``listener``; unknown listeners are ignored.

        Returns:
            This manager, for chaining.
        """
        for event_type in _as_event_types(event_types):
            if listener in self._listeners[event_type]:
                self._listeners[event_type].remove(listener)
                logger.debug("Unsubscribed listener", event_type=event_type.value)
        return self

    def fire(self, event: GraphEvent) -> None:
        """Call every listener of the event's type.

        Exceptions raised by a listener propagate to the caller.
        """
        # Snapshot so listeners may (un)subscribe while being dispatched
        listeners = list(self._listeners.get(event.type, ()))
        logger.debug(
            "Firing event",
            event_type=event.type.value,
            items=len(event.data),
            listeners=len(listeners),
        )
        for listener in listeners:
            listener(event)

    def listener_count(self, event_type: EventType | str | None = None) -> int:
        """Count listeners of one event type, or of all types."""
        if event_type is None:
            return sum(len(listeners) for listeners in self._listeners.values())
        return len(self._listeners.get(EventType.parse(event_type), ()))
