"""
Dialogue driver - runs a story line by line.

Coordinates the story source, tag interpreter, line revealer and
choice resolution. States:

    IDLE -> REVEALING -> AWAITING_ADVANCE -> REVEALING -> ...
                      -> AWAITING_CHOICE  -> REVEALING -> ...
                      -> ENDED

The CONFIRM action is the single advance signal. While a line is
revealing it requests a skip; once the line is shown it continues the
story, unless choices are waiting for a selection.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from engine.audio.manager import AudioSink
from engine.core.actions import Action
from engine.core.events import Event, EventBus, NovelEvent
from engine.core.scheduler import Scheduler, Task
from engine.input.handler import InputEvent
from novel.images import ImageSink
from novel.presentation import Presentation
from novel.reveal import CHAR_INTERVAL, TEXT_SCROLL_CUE, LineRevealer
from novel.session import ChoiceOption, DialogueSession, DialogueState
from novel.story import JsonStory, StorySource
from novel.tags import TagInterpreter


logger = logging.getLogger(__name__)

# Theme name that switches background music off
THEME_OFF = ""

# Runs before the choice view so a CONFIRM that selects a choice is not
# also taken as a skip of the line that choice starts
ADVANCE_PRIORITY = 10

StoryFactory = Callable[[Any], StorySource]


class DialogueDriver:
    """
    State machine over a story source.

    Usage:
        driver = DialogueDriver(scheduler, event_bus, audio, images, view,
                                on_end=scene_manager.reload)
        driver.start_dialogue(script_json)

        # each fixed update
        scheduler.update(dt)
    """

    def __init__(
        self,
        scheduler: Scheduler,
        event_bus: EventBus,
        audio: AudioSink,
        images: ImageSink,
        presentation: Presentation,
        on_end: Optional[Callable[[], None]] = None,
        story_factory: StoryFactory = JsonStory,
        char_interval: float = CHAR_INTERVAL,
        text_scroll_cue: str = TEXT_SCROLL_CUE,
    ):
        self.scheduler = scheduler
        self.event_bus = event_bus
        self.audio = audio
        self.presentation = presentation
        self.on_end = on_end
        self.story_factory = story_factory

        self.session = DialogueSession()
        self.story: Optional[StorySource] = None
        self.interpreter = TagInterpreter(audio, images, presentation)
        self.revealer = LineRevealer(
            scheduler, self.session, audio, presentation,
            interval=char_interval, cue_name=text_scroll_cue,
        )

        self._focus_task: Optional[Task] = None

    @property
    def active(self) -> bool:
        return self.session.active

    @property
    def state(self) -> DialogueState:
        return self.session.state

    # Commands

    def start_dialogue(self, script: Any) -> None:
        """
        Load a story and show its first line.

        Args:
            script: Story content passed to the story factory

        Raises:
            StoryFormatError: if the default factory rejects the content
        """
        if self.session.active:
            logger.error("Dialogue already running; start_dialogue ignored")
            return

        self.story = self.story_factory(script)

        self.session.active = True
        self.session.state = DialogueState.IDLE
        self.audio.switch_theme(THEME_OFF)

        self.event_bus.subscribe(
            InputEvent.ACTION_PRESSED, self._on_action,
            priority=ADVANCE_PRIORITY, weak=False,
        )
        self.event_bus.publish(NovelEvent.DIALOGUE_STARTED)
        logger.info("Dialogue started")

        self.continue_story()

    def continue_story(self) -> None:
        """
        Fetch the next line and start revealing it.

        Does nothing while a line is revealing; the reveal must finish or
        be skipped first. When the story has no more content it either
        presents the choices it stopped at or ends the dialogue.
        """
        session = self.session
        if not session.active or self.story is None:
            return

        if session.is_revealing:
            return

        if not self.story.can_continue:
            if not self.story.current_choices:
                self._end()
            elif not session.pending_choices:
                # Reached choices without a line in between
                self._cancel_focus_task()
                self._present_choices()
            return

        self.revealer.cancel()
        self._cancel_focus_task()
        self.presentation.hide_choices()

        text = self.story.continue_()
        tags = self.story.current_tags
        session.begin_line(text)
        self.event_bus.publish(NovelEvent.LINE_STARTED, text=text, tags=tags)

        self.interpreter.handle_tags(tags)
        self.revealer.start(text, on_complete=self._on_line_revealed)

    def on_advance_signal(self) -> None:
        """Advance/submit input: skip the reveal or continue the story."""
        session = self.session
        if not session.active:
            return

        if session.is_revealing:
            session.skip_requested = True
        elif not session.pending_choices:
            self.continue_story()

    def make_choice(self, index: int) -> None:
        """Select one of the pending choices and continue."""
        session = self.session
        if not session.active or self.story is None:
            return

        if session.is_revealing:
            logger.debug("Choice %d ignored while a line is revealing", index)
            return

        if not 0 <= index < len(session.pending_choices):
            logger.error(
                "Choice index %d out of range (%d choices pending)",
                index, len(session.pending_choices),
            )
            return

        choice = session.pending_choices[index]
        self.story.choose_choice_index(choice.index)
        session.pending_choices = []
        self.event_bus.publish(NovelEvent.CHOICE_MADE, index=choice.index, text=choice.display_text)

        self.continue_story()

    def shutdown(self) -> None:
        """Detach from input and stop tasks without signalling the end."""
        self.event_bus.unsubscribe(InputEvent.ACTION_PRESSED, self._on_action)
        self.revealer.cancel()
        self._cancel_focus_task()
        self.session.active = False
        self.session.is_revealing = False
        self.session.skip_requested = False
        self.session.pending_choices = []
        self.session.state = DialogueState.IDLE

    # Internals

    def _on_action(self, event: Event) -> None:
        if event.get("action") == Action.CONFIRM:
            self.on_advance_signal()

    def _on_line_revealed(self) -> None:
        self.event_bus.publish(NovelEvent.LINE_REVEALED, text=self.session.current_line)
        self._present_choices()

    def _present_choices(self) -> None:
        """Offer the story's current choices, or wait for an advance if none."""
        session = self.session
        choices = self.story.current_choices
        slots = self.presentation.choice_slots
        if len(choices) > slots:
            logger.error(
                "Story offers %d choices but only %d slots are available; extra choices dropped",
                len(choices), slots,
            )
            choices = choices[:slots]

        session.pending_choices = [
            ChoiceOption(display_text=choice.text, index=choice.index)
            for choice in choices
        ]

        if not session.pending_choices:
            session.state = DialogueState.AWAITING_ADVANCE
            return

        session.state = DialogueState.AWAITING_CHOICE
        self.presentation.show_choices(session.pending_choices)
        self.event_bus.publish(NovelEvent.CHOICES_SHOWN, choices=list(session.pending_choices))
        self._focus_task = self.scheduler.start(self._focus_first_choice(), name="focus_choice")

    def _focus_first_choice(self):
        self.presentation.clear_focus()
        yield None
        self.presentation.focus_choice(0)

    def _cancel_focus_task(self) -> None:
        if self._focus_task is not None:
            self._focus_task.cancel()
            self._focus_task = None

    def _end(self) -> None:
        if not self.session.active:
            return

        self.event_bus.unsubscribe(InputEvent.ACTION_PRESSED, self._on_action)
        self.revealer.cancel()
        self._cancel_focus_task()
        self.presentation.hide_choices()
        self.session.end()

        self.event_bus.publish(NovelEvent.DIALOGUE_ENDED)
        logger.info("Dialogue ended")

        if self.on_end:
            self.on_end()
