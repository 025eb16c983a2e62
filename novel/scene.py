"""
Novel scene - wires the dialogue driver to the game.

Shows a start panel with the title theme playing. Confirming Start
loads the story script; when the story ends the scene reloads itself
back to the start panel.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from engine.audio.manager import AudioManager
from engine.core.actions import Action
from engine.core.events import Event
from engine.core.scene import Scene
from engine.core.scheduler import Scheduler
from engine.input.handler import InputEvent
from engine.ui.focus import transfer_focus
from engine.ui.renderer import UIRenderer
from novel.config import NovelConfig
from novel.driver import DialogueDriver
from novel.images import ImageManager
from novel.presentation import START_BUTTON, NovelView
from novel.story import ScriptSyntaxError, StoryFormatError, load_script

if TYPE_CHECKING:
    from engine.core.game import Game


logger = logging.getLogger(__name__)


class NovelScene(Scene):
    """The whole visual novel: start panel, dialogue and choices."""

    def __init__(self, game: Game, config: Optional[NovelConfig] = None):
        super().__init__(game)
        self.config = config or NovelConfig()

        self.scheduler = Scheduler()
        self.renderer: Optional[UIRenderer] = None
        self.view: Optional[NovelView] = None
        self.audio: Optional[AudioManager] = None
        self.images: Optional[ImageManager] = None
        self.driver: Optional[DialogueDriver] = None

        self._ended = False

    def recreate(self) -> NovelScene:
        return type(self)(self.game, self.config)

    # Lifecycle

    def on_enter(self) -> None:
        super().on_enter()
        if self.driver is not None:
            return

        config = self.config
        services = self.game.services

        self.audio = services.get(AudioManager)
        if self.audio is None:
            self.audio = services.provide(AudioManager, self._create_audio())

        self.images = ImageManager(config.portraits_path, config.splashes_path)
        self.renderer = UIRenderer(self.game.screen)
        self.view = NovelView(
            self.game.width, self.game.height,
            choice_slots=config.choice_slots,
            title=config.title,
        )

        self.driver = DialogueDriver(
            self.scheduler,
            self.game.event_bus,
            self.audio,
            self.images,
            self.view,
            on_end=self._on_dialogue_end,
            char_interval=config.char_interval,
            text_scroll_cue=config.text_scroll_cue,
        )
        services.provide(DialogueDriver, self.driver)

        self.game.event_bus.subscribe(InputEvent.ACTION_PRESSED, self._on_action, weak=False)

        self.view.show_start_panel()
        self.scheduler.start(transfer_focus(self.view.focus, START_BUTTON), name="focus_start")
        self.audio.switch_theme(config.title_theme)

    def on_destroy(self) -> None:
        self.game.event_bus.unsubscribe(InputEvent.ACTION_PRESSED, self._on_action)

        if self.driver is not None:
            self.driver.shutdown()
            if self.game.services.get(DialogueDriver) is self.driver:
                self.game.services.remove(DialogueDriver)

        self.scheduler.cancel_all()

    def _create_audio(self) -> AudioManager:
        audio = AudioManager(self.game.event_bus)
        audio.init()

        sounds = Path(self.config.sounds)
        if sounds.exists():
            audio.load_cues(sounds)
        else:
            logger.warning("Sound list not found: %s", sounds)

        return audio

    # Input

    def _on_action(self, event: Event) -> None:
        action = event.get("action")

        if action == Action.CONFIRM:
            if self.view.start_focused:
                self.start_story()
            elif self.driver.active and self.view.focused_choice is not None:
                self.driver.make_choice(self.view.focused_choice)
        elif action == Action.MENU_UP:
            self.view.move_focus(-1)
        elif action == Action.MENU_DOWN:
            self.view.move_focus(1)

    def start_story(self) -> None:
        """Load the configured script and start the dialogue."""
        try:
            script = load_script(self.config.script)
        except (OSError, ScriptSyntaxError) as e:
            logger.error("Could not load story %s: %s", self.config.script, e)
            return

        self.view.show_dialogue_panel()
        try:
            self.driver.start_dialogue(script)
        except StoryFormatError as e:
            logger.error("Invalid story %s: %s", self.config.script, e)
            self.view.show_start_panel()
            self.scheduler.start(transfer_focus(self.view.focus, START_BUTTON), name="focus_start")

    def _on_dialogue_end(self) -> None:
        if self._ended:
            return
        self._ended = True
        self.game.scene_manager.reload()

    # Frame

    def update(self, dt: float) -> None:
        self.scheduler.update(dt)

    def render(self, alpha: float) -> None:
        self.images.render(self.game.screen)
        self.view.render(self.renderer)
