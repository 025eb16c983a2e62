"""
Input action definitions.

Actions abstract raw input (keys, buttons) into semantic actions.
Game logic should use Actions, not raw keys. This enables:
- Key rebinding
- Multiple input methods (keyboard, gamepad)

Usage:
    if input.is_action_just_pressed(Action.CONFIRM):
        driver.on_advance_signal()
"""

from enum import Enum, auto

import pygame


class Action(Enum):
    """Semantic input actions."""

    # Menu navigation
    MENU_UP = auto()
    MENU_DOWN = auto()

    # Advance / submit
    CONFIRM = auto()

    # System
    QUIT = auto()


DEFAULT_KEY_BINDINGS: dict[Action, list[int]] = {
    Action.MENU_UP: [pygame.K_UP, pygame.K_w],
    Action.MENU_DOWN: [pygame.K_DOWN, pygame.K_s],
    Action.CONFIRM: [pygame.K_RETURN, pygame.K_SPACE, pygame.K_z],
    Action.QUIT: [pygame.K_ESCAPE],
}

# Gamepad button bindings (SDL controller layout)
DEFAULT_GAMEPAD_BINDINGS: dict[Action, list[int]] = {
    Action.CONFIRM: [0],  # A button
    Action.QUIT: [7],     # Start
}

# D-pad bindings (hat)
DEFAULT_GAMEPAD_HAT_BINDINGS: dict[tuple[int, int], Action] = {
    (0, 1): Action.MENU_UP,
    (0, -1): Action.MENU_DOWN,
}
