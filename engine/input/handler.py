"""
Input handler with action-based abstraction.

Handles keyboard and gamepad input, translating raw input into
semantic Actions. Edge-triggered presses are published on the event
bus as ``InputEvent.ACTION_PRESSED`` so screens can react to a single
submit signal without polling.

Usage:
    if input.is_action_just_pressed(Action.CONFIRM):
        ...

    event_bus.subscribe(InputEvent.ACTION_PRESSED, on_action)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import pygame

from engine.core.actions import (
    Action,
    DEFAULT_KEY_BINDINGS,
    DEFAULT_GAMEPAD_BINDINGS,
    DEFAULT_GAMEPAD_HAT_BINDINGS,
)
from engine.core.events import EventBus


class InputEvent(Enum):
    """Input-specific events."""
    ACTION_PRESSED = "input.action_pressed"
    ACTION_RELEASED = "input.action_released"
    GAMEPAD_CONNECTED = "input.gamepad_connected"


@dataclass
class InputState:
    """Complete input state for current frame."""
    actions_pressed: set[Action] = field(default_factory=set)
    actions_just_pressed: set[Action] = field(default_factory=set)
    actions_just_released: set[Action] = field(default_factory=set)

    keys_pressed: set[int] = field(default_factory=set)


class InputHandler:
    """
    Translates raw pygame events into semantic Actions.
    """

    def __init__(self, event_bus: EventBus | None = None):
        self.event_bus = event_bus

        self._state = InputState()
        self._prev_actions: set[Action] = set()

        # Key bindings (action -> list of keys)
        self._key_bindings = {action: list(keys) for action, keys in DEFAULT_KEY_BINDINGS.items()}
        self._reverse_key_bindings: dict[int, list[Action]] = {}
        self._rebuild_reverse_bindings()

        self._gamepads: dict[int, pygame.joystick.JoystickType] = {}
        self._gamepad_bindings = DEFAULT_GAMEPAD_BINDINGS.copy()
        self._gamepad_hat_bindings = DEFAULT_GAMEPAD_HAT_BINDINGS.copy()

        pygame.joystick.init()
        self._refresh_gamepads()

    def _rebuild_reverse_bindings(self) -> None:
        """Build reverse lookup: key -> actions."""
        self._reverse_key_bindings.clear()
        for action, keys in self._key_bindings.items():
            for key in keys:
                self._reverse_key_bindings.setdefault(key, []).append(action)

    def _refresh_gamepads(self) -> None:
        self._gamepads.clear()
        for i in range(pygame.joystick.get_count()):
            joy = pygame.joystick.Joystick(i)
            joy.init()
            self._gamepads[joy.get_instance_id()] = joy

    # Public API

    def is_action_pressed(self, action: Action) -> bool:
        """Check if an action is currently held down."""
        return action in self._state.actions_pressed

    def is_action_just_pressed(self, action: Action) -> bool:
        """Check if an action was just pressed this frame."""
        return action in self._state.actions_just_pressed

    def is_action_just_released(self, action: Action) -> bool:
        return action in self._state.actions_just_released

    def get_menu_direction(self) -> int:
        """Vertical menu step for this frame: -1 (up), 1 (down) or 0."""
        if self.is_action_just_pressed(Action.MENU_UP):
            return -1
        if self.is_action_just_pressed(Action.MENU_DOWN):
            return 1
        return 0

    # Key binding management

    def bind_key(self, action: Action, key: int) -> None:
        """Add a key binding for an action."""
        keys = self._key_bindings.setdefault(action, [])
        if key not in keys:
            keys.append(key)
        self._rebuild_reverse_bindings()

    def unbind_key(self, action: Action, key: int) -> None:
        """Remove a key binding for an action."""
        if key in self._key_bindings.get(action, []):
            self._key_bindings[action].remove(key)
        self._rebuild_reverse_bindings()

    def get_bindings(self, action: Action) -> list[int]:
        return self._key_bindings.get(action, []).copy()

    # Frame update

    def process_event(self, event: pygame.event.Event) -> None:
        """Process a pygame event."""
        if event.type == pygame.KEYDOWN:
            self._on_key_down(event.key)

        elif event.type == pygame.KEYUP:
            self._on_key_up(event.key)

        elif event.type in (pygame.JOYDEVICEADDED, pygame.JOYDEVICEREMOVED):
            self._refresh_gamepads()
            if event.type == pygame.JOYDEVICEADDED and self.event_bus:
                self.event_bus.publish(InputEvent.GAMEPAD_CONNECTED)

        elif event.type == pygame.JOYBUTTONDOWN:
            self._on_gamepad_button_down(event.button)

        elif event.type == pygame.JOYBUTTONUP:
            self._on_gamepad_button_up(event.button)

        elif event.type == pygame.JOYHATMOTION:
            self._on_hat_motion(event.value)

    def update(self) -> None:
        """
        Update input state for new frame.

        Call this at the start of each fixed update.
        """
        self._state.actions_just_pressed = self._state.actions_pressed - self._prev_actions
        self._state.actions_just_released = self._prev_actions - self._state.actions_pressed

        if self.event_bus:
            # Enum order keeps publication deterministic
            for action in sorted(self._state.actions_just_pressed, key=lambda a: a.value):
                self.event_bus.publish(InputEvent.ACTION_PRESSED, action=action)
            for action in sorted(self._state.actions_just_released, key=lambda a: a.value):
                self.event_bus.publish(InputEvent.ACTION_RELEASED, action=action)

        self._prev_actions = self._state.actions_pressed.copy()

    def _on_key_down(self, key: int) -> None:
        self._state.keys_pressed.add(key)
        for action in self._reverse_key_bindings.get(key, []):
            self._state.actions_pressed.add(action)

    def _on_key_up(self, key: int) -> None:
        self._state.keys_pressed.discard(key)

        # Keep the action held while another bound key is still down
        for action in self._reverse_key_bindings.get(key, []):
            still_pressed = any(
                other != key and other in self._state.keys_pressed
                for other in self._key_bindings.get(action, [])
            )
            if not still_pressed:
                self._state.actions_pressed.discard(action)

    def _on_gamepad_button_down(self, button: int) -> None:
        for action, buttons in self._gamepad_bindings.items():
            if button in buttons:
                self._state.actions_pressed.add(action)

    def _on_gamepad_button_up(self, button: int) -> None:
        for action, buttons in self._gamepad_bindings.items():
            if button in buttons:
                self._state.actions_pressed.discard(action)

    def _on_hat_motion(self, value: tuple[int, int]) -> None:
        for action in self._gamepad_hat_bindings.values():
            self._state.actions_pressed.discard(action)

        if value in self._gamepad_hat_bindings:
            self._state.actions_pressed.add(self._gamepad_hat_bindings[value])
