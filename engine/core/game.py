"""
Core Game class with fixed timestep game loop.

The Game class is the main entry point for the engine. It handles:
- Window creation (Pygame display surface)
- Fixed timestep update loop (deterministic text pacing)
- Variable render loop
- Scene management delegation
- Shared services (audio, images) for the scenes
"""

from __future__ import annotations

import logging
import time

import pygame

from engine.core.actions import Action
from engine.core.events import EventBus, EngineEvent, Event
from engine.core.scene import SceneManager
from engine.core.services import ServiceRegistry
from engine.input.handler import InputHandler, InputEvent


logger = logging.getLogger(__name__)


class GameConfig:
    """Configuration for the game engine."""

    def __init__(
        self,
        title: str = "Visual Novel",
        width: int = 1280,
        height: int = 720,
        target_fps: int = 60,
        fixed_timestep: float = 1 / 60,
        max_frame_skip: int = 5,
        fullscreen: bool = False,
        resizable: bool = False,
    ):
        self.title = title
        self.width = width
        self.height = height
        self.target_fps = target_fps
        self.fixed_timestep = fixed_timestep
        self.max_frame_skip = max_frame_skip
        self.fullscreen = fullscreen
        self.resizable = resizable


class Game:
    """
    Main game engine class.

    Implements a fixed timestep game loop with variable rendering so
    timed text reveal runs at the same pace on every machine.

    Usage:
        config = GameConfig(title="My Novel", width=1280, height=720)
        game = Game(config)
        game.scene_manager.push(MyStartScene(game))
        game.run()
    """

    def __init__(self, config: GameConfig | None = None):
        self.config = config or GameConfig()
        self._running = False

        pygame.init()

        flags = 0
        if self.config.fullscreen:
            flags |= pygame.FULLSCREEN
        if self.config.resizable:
            flags |= pygame.RESIZABLE

        self.screen = pygame.display.set_mode(
            (self.config.width, self.config.height),
            flags
        )
        pygame.display.set_caption(self.config.title)

        # Core systems
        self.event_bus = EventBus()
        self.input = InputHandler(self.event_bus)
        self.scene_manager = SceneManager(self)
        self.services = ServiceRegistry()

        self.event_bus.subscribe(InputEvent.ACTION_PRESSED, self._on_action, weak=False)

        # Timing
        self._clock = pygame.time.Clock()
        self._accumulator = 0.0
        self._current_time = time.perf_counter()

    @property
    def width(self) -> int:
        return self.screen.get_width()

    @property
    def height(self) -> int:
        return self.screen.get_height()

    def run(self) -> None:
        """Start the main game loop. Returns after quit()."""
        self._running = True
        self._current_time = time.perf_counter()
        self.event_bus.publish(EngineEvent.GAME_START)

        while self._running:
            new_time = time.perf_counter()
            frame_time = new_time - self._current_time
            self._current_time = new_time

            # Prevent spiral of death
            if frame_time > 0.25:
                frame_time = 0.25

            self._accumulator += frame_time

            self._process_events()

            updates = 0
            while self._accumulator >= self.config.fixed_timestep:
                self._fixed_update(self.config.fixed_timestep)
                self._accumulator -= self.config.fixed_timestep
                updates += 1

                if updates >= self.config.max_frame_skip:
                    self._accumulator = 0
                    break

            alpha = self._accumulator / self.config.fixed_timestep
            self._render(alpha)

            self._clock.tick(self.config.target_fps)

        self._shutdown()

    def quit(self) -> None:
        """Request game shutdown."""
        self._running = False

    def _on_action(self, event: Event) -> None:
        if event.get("action") == Action.QUIT:
            self.quit()

    def _process_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.quit()
            elif event.type == pygame.VIDEORESIZE:
                self.scene_manager.on_resize(event.w, event.h)
            else:
                self.input.process_event(event)
                self.scene_manager.handle_event(event)

    def _fixed_update(self, dt: float) -> None:
        self.input.update()
        self.scene_manager.update(dt)

    def _render(self, alpha: float) -> None:
        self.screen.fill((0, 0, 0))
        self.scene_manager.render(alpha)
        pygame.display.flip()

    def _shutdown(self) -> None:
        logger.info("Shutting down")
        self.event_bus.publish(EngineEvent.GAME_QUIT)
        self.scene_manager.clear()
        self.scene_manager.update(0.0)
        pygame.quit()
