"""
Typed event bus for decoupled communication.

Uses Enums for event types so subscribers and publishers agree on
names without magic strings.

Usage:
    # Subscribe
    event_bus.subscribe(NovelEvent.LINE_STARTED, on_line_started)

    # Publish
    event_bus.publish(NovelEvent.LINE_STARTED, text="Hello.")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable
from weakref import WeakMethod, ref


logger = logging.getLogger(__name__)


class EngineEvent(Enum):
    """Built-in engine events."""
    # Lifecycle
    GAME_START = auto()
    GAME_QUIT = auto()

    # Scene
    SCENE_PUSHED = auto()
    SCENE_POPPED = auto()
    SCENE_SWITCHED = auto()
    SCENE_RELOADED = auto()


class AudioEvent(Enum):
    """Audio sink events."""
    SOUND_PLAYED = auto()
    SOUND_STOPPED = auto()
    THEME_SWITCHED = auto()


class NovelEvent(Enum):
    """Dialogue flow events."""
    DIALOGUE_STARTED = auto()
    LINE_STARTED = auto()       # New line fetched from the story
    LINE_REVEALED = auto()      # Reveal finished (naturally or skipped)
    CHOICES_SHOWN = auto()
    CHOICE_MADE = auto()
    DIALOGUE_ENDED = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Dictionary of event-specific data
        consumed: Whether the event has been handled
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        """Mark event as consumed (stops propagation)."""
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        """Get event data by key."""
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


class EventBus:
    """
    Central event bus for publish/subscribe messaging.

    Features:
    - Typed events (Enum-based)
    - Priority ordering
    - Weak references (auto-cleanup when handlers are deleted)
    - One-shot handlers
    - Event consumption (stops propagation)
    """

    def __init__(self):
        # event type -> list of (priority, handler, one_shot), highest priority first
        self._handlers: dict[Enum, list[tuple[int, Any, bool]]] = {}
        # Events published while a dispatch is running
        self._event_queue: list[Event] = []
        self._is_publishing = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
        weak: bool = True,
    ) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            priority: Higher priority handlers are called first (default 0)
            one_shot: If True, handler is removed after first call
            weak: If True, use weak reference (handler auto-removed if deleted)
        """
        handlers = self._handlers.setdefault(event_type, [])

        if weak:
            if hasattr(handler, '__self__'):
                handler_ref = WeakMethod(handler)
            else:
                handler_ref = ref(handler)
        else:
            handler_ref = handler

        # Equal priorities keep subscription order
        insert_idx = len(handlers)
        for i, (p, _, _) in enumerate(handlers):
            if priority > p:
                insert_idx = i
                break

        handlers.insert(insert_idx, (priority, handler_ref, one_shot))

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        """Remove a handler. Unknown handlers are ignored."""
        if event_type not in self._handlers:
            return

        self._handlers[event_type] = [
            (p, h, o) for p, h, o in self._handlers[event_type]
            if self._get_handler(h) != handler
        ]

    def is_subscribed(self, event_type: Enum, handler: EventHandler) -> bool:
        """Check whether a handler is currently registered."""
        return any(
            self._get_handler(h) == handler
            for _, h, _ in self._handlers.get(event_type, [])
        )

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Args:
            event_type: The event type
            **data: Event data as keyword arguments

        Returns:
            The Event object (check .consumed to see if it was handled)
        """
        event = Event(type=event_type, data=data)

        if self._is_publishing:
            self._event_queue.append(event)
        else:
            self._dispatch(event)

        return event

    def clear(self, event_type: Enum | None = None) -> None:
        """Clear handlers for one event type, or all of them."""
        if event_type is None:
            self._handlers.clear()
        elif event_type in self._handlers:
            del self._handlers[event_type]

    def _dispatch(self, event: Event) -> None:
        if event.type not in self._handlers:
            self._drain_queue()
            return

        self._is_publishing = True
        # Handlers may unsubscribe themselves while running
        handlers = list(self._handlers[event.type])
        to_remove = []

        try:
            for entry in handlers:
                _, handler_ref, one_shot = entry
                handler = self._get_handler(handler_ref)

                if handler is None:
                    to_remove.append(entry)
                    continue

                try:
                    handler(event)
                except Exception:
                    logger.exception("Error in event handler for %s", event.type)

                if one_shot:
                    to_remove.append(entry)

                if event.consumed:
                    break
        finally:
            self._is_publishing = False

        if to_remove:
            current = self._handlers.get(event.type, [])
            self._handlers[event.type] = [e for e in current if e not in to_remove]

        self._drain_queue()

    def _drain_queue(self) -> None:
        while self._event_queue and not self._is_publishing:
            self._dispatch(self._event_queue.pop(0))

    def _get_handler(self, handler_ref: Any) -> EventHandler | None:
        if isinstance(handler_ref, (ref, WeakMethod)):
            return handler_ref()
        return handler_ref
