"""
Scene management system.

Scenes represent different screens (title panel, story, credits...).
The SceneManager handles a stack of scenes, allowing for:
- Push: Add a new scene on top
- Pop: Remove the top scene
- Switch: Replace the current scene entirely
- Reload: Replace the current scene with a fresh copy of itself
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import pygame

from engine.core.events import EngineEvent

if TYPE_CHECKING:
    from engine.core.game import Game


class Scene(ABC):
    """
    Abstract base class for game scenes.

    Lifecycle:
        1. __init__: Called when scene is created
        2. on_enter: Called when scene becomes active
        3. update/render: Called each frame while active
        4. on_exit: Called when scene is removed or covered
        5. on_destroy: Called when scene is permanently removed
    """

    def __init__(self, game: Game):
        self.game = game
        self._is_active = False
        self._is_transparent = False  # If True, scene below is also rendered
        self._blocks_update = True    # If True, scene below doesn't update

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @property
    def is_active(self) -> bool:
        """Whether this scene is currently the top scene."""
        return self._is_active

    @property
    def is_transparent(self) -> bool:
        return self._is_transparent

    @property
    def blocks_update(self) -> bool:
        return self._blocks_update

    def on_enter(self) -> None:
        """Called when scene becomes active (pushed or uncovered)."""
        self._is_active = True

    def on_exit(self) -> None:
        """Called when scene is deactivated (popped or covered)."""
        self._is_active = False

    def on_destroy(self) -> None:
        """Called when scene is permanently removed from the stack."""
        pass

    def on_resize(self, width: int, height: int) -> None:
        pass

    def recreate(self) -> Scene:
        """
        Build a fresh instance of this scene for ``SceneManager.reload``.

        Override when the constructor takes more than the game.
        """
        return type(self)(self.game)

    @abstractmethod
    def update(self, dt: float) -> None:
        """
        Update scene logic.

        Args:
            dt: Delta time in seconds (fixed timestep)
        """

    @abstractmethod
    def render(self, alpha: float) -> None:
        """
        Render the scene.

        Args:
            alpha: Interpolation factor (0-1) for smooth rendering
        """

    def handle_event(self, event: pygame.event.Event) -> bool:
        """
        Handle a raw pygame event.

        Returns:
            True if the event was consumed (don't propagate)
        """
        return False


class SceneManager:
    """
    Manages a stack of scenes.

    Operations are queued and applied at the start of the next update so
    a scene can request its own replacement from inside its callbacks.
    """

    def __init__(self, game: Game):
        self.game = game
        self._stack: list[Scene] = []
        self._pending_operations: list[tuple[str, Any]] = []

    @property
    def current(self) -> Scene | None:
        return self._stack[-1] if self._stack else None

    @property
    def is_empty(self) -> bool:
        return len(self._stack) == 0

    def push(self, scene: Scene) -> None:
        self._pending_operations.append(("push", scene))

    def pop(self) -> None:
        self._pending_operations.append(("pop", None))

    def switch(self, scene: Scene) -> None:
        self._pending_operations.append(("switch", scene))

    def reload(self) -> None:
        """Restart the current scene from scratch."""
        self._pending_operations.append(("reload", None))

    def clear(self) -> None:
        self._pending_operations.append(("clear", None))

    def update(self, dt: float) -> None:
        """Apply pending operations, then update active scenes."""
        self._process_pending()

        for scene in self._get_update_list():
            scene.update(dt)

    def render(self, alpha: float) -> None:
        for scene in self._get_render_list():
            scene.render(alpha)

    def handle_event(self, event: pygame.event.Event) -> None:
        if self.current:
            self.current.handle_event(event)

    def on_resize(self, width: int, height: int) -> None:
        for scene in self._stack:
            scene.on_resize(width, height)

    def _process_pending(self) -> None:
        while self._pending_operations:
            op, arg = self._pending_operations.pop(0)

            if op == "push":
                self._do_push(arg)
            elif op == "pop":
                self._do_pop()
            elif op == "switch":
                self._do_switch(arg)
            elif op == "reload":
                self._do_reload()
            elif op == "clear":
                self._do_clear()

    def _publish(self, event_type: EngineEvent, scene: Scene) -> None:
        bus = getattr(self.game, "event_bus", None)
        if bus is not None:
            bus.publish(event_type, scene_name=scene.name)

    def _do_push(self, scene: Scene) -> None:
        if self._stack:
            self._stack[-1].on_exit()
        self._stack.append(scene)
        scene.on_enter()
        self._publish(EngineEvent.SCENE_PUSHED, scene)

    def _do_pop(self) -> None:
        if not self._stack:
            return

        scene = self._stack.pop()
        scene.on_exit()
        scene.on_destroy()
        self._publish(EngineEvent.SCENE_POPPED, scene)

        if self._stack:
            self._stack[-1].on_enter()

    def _do_switch(self, scene: Scene) -> None:
        if self._stack:
            old_scene = self._stack.pop()
            old_scene.on_exit()
            old_scene.on_destroy()

        self._stack.append(scene)
        scene.on_enter()
        self._publish(EngineEvent.SCENE_SWITCHED, scene)

    def _do_reload(self) -> None:
        if not self._stack:
            return

        old_scene = self._stack.pop()
        old_scene.on_exit()
        old_scene.on_destroy()

        scene = old_scene.recreate()
        self._stack.append(scene)
        scene.on_enter()
        self._publish(EngineEvent.SCENE_RELOADED, scene)

    def _do_clear(self) -> None:
        while self._stack:
            scene = self._stack.pop()
            scene.on_exit()
            scene.on_destroy()

    def _get_render_list(self) -> list[Scene]:
        """Scenes to render, bottom to top, stopping at the first opaque one."""
        result = []
        for scene in reversed(self._stack):
            result.insert(0, scene)
            if not scene.is_transparent:
                break
        return result

    def _get_update_list(self) -> list[Scene]:
        """Scenes to update, bottom to top, stopping at the first blocking one."""
        result = []
        for scene in reversed(self._stack):
            result.insert(0, scene)
            if scene.blocks_update:
                break
        return result
