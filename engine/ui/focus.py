"""
Focus management for keyboard/gamepad UI navigation.

Focus targets are plain hashable handles (a button id, a slot index).
Moving focus to a new target is done in two steps: focus is cleared,
the UI gets one scheduler tick with nothing focused, and only then is
the new target selected.
"""

from __future__ import annotations

from typing import Any, Callable, Hashable, Iterator, Optional


FocusListener = Callable[[Optional[Hashable], Optional[Hashable]], None]


class FocusManager:
    """
    Tracks the single focused target.

    Provides:
    - Focus set/clear with change notification
    - Ordered focus groups for up/down navigation
    """

    def __init__(self):
        self._focused: Optional[Hashable] = None
        self._order: list[Hashable] = []

        # Called with (old, new) whenever focus changes
        self.on_focus_changed: Optional[FocusListener] = None

    @property
    def focused(self) -> Optional[Hashable]:
        """Get currently focused target."""
        return self._focused

    def set_order(self, targets: list[Hashable]) -> None:
        """Set the navigation order used by ``navigate``."""
        self._order = list(targets)

    def set_focus(self, target: Optional[Hashable]) -> bool:
        """
        Set focus to a target.

        Args:
            target: Target to focus, or None to clear focus

        Returns:
            True if focus changed
        """
        if target == self._focused:
            return False

        old_focus = self._focused
        self._focused = target

        if self.on_focus_changed:
            self.on_focus_changed(old_focus, target)

        return True

    def clear_focus(self) -> None:
        self.set_focus(None)

    def navigate(self, delta: int) -> bool:
        """
        Move focus ``delta`` steps through the navigation order, wrapping.

        Returns:
            True if focus moved
        """
        if not self._order:
            return False

        if self._focused not in self._order:
            return self.set_focus(self._order[0])

        index = self._order.index(self._focused)
        return self.set_focus(self._order[(index + delta) % len(self._order)])


def transfer_focus(focus: FocusManager, target: Hashable) -> Iterator[Any]:
    """
    Scheduler task: clear focus, wait one tick, then focus ``target``.

    Usage:
        scheduler.start(transfer_focus(view.focus, "start"))
    """
    focus.clear_focus()
    yield None
    focus.set_focus(target)
