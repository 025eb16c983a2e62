"""
Line revealer - shows a line one character at a time.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional

from engine.core.scheduler import Scheduler, Task, Wait
from novel.session import DialogueSession

if TYPE_CHECKING:
    from engine.audio.manager import AudioSink
    from novel.presentation import Presentation


logger = logging.getLogger(__name__)

# Seconds between characters
CHAR_INTERVAL = 0.03
TEXT_SCROLL_CUE = "Text_Scroll"


class LineRevealer:
    """
    Reveals the session's current line as a scheduler task.

    Each revealed character plays the scroll cue. Setting
    ``session.skip_requested`` makes the next step jump to the full
    line without further cues.

    Usage:
        revealer = LineRevealer(scheduler, session, audio, view)
        revealer.start("Hello.", on_complete=driver.on_line_revealed)
    """

    def __init__(
        self,
        scheduler: Scheduler,
        session: DialogueSession,
        audio: AudioSink,
        presentation: Presentation,
        interval: float = CHAR_INTERVAL,
        cue_name: str = TEXT_SCROLL_CUE,
    ):
        self.scheduler = scheduler
        self.session = session
        self.audio = audio
        self.presentation = presentation
        self.interval = interval
        self.cue_name = cue_name

        self._task: Optional[Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done

    def start(self, text: str, on_complete: Optional[Callable[[], None]] = None) -> Task:
        """
        Start revealing ``text``, stopping any reveal still in flight.

        The session must already hold ``text`` as its current line.
        """
        self.cancel()
        self.session.is_revealing = True
        self.session.revealed_count = 0
        self.presentation.set_line(text)
        self.presentation.set_visible_characters(0)

        self._task = self.scheduler.start(self._reveal(text, on_complete), name="reveal_line")
        return self._task

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _reveal(self, text: str, on_complete: Optional[Callable[[], None]]):
        session = self.session
        total = len(text)

        while session.revealed_count < total:
            if session.skip_requested:
                session.revealed_count = total
                session.skip_requested = False
                self.presentation.set_visible_characters(total)
                break

            session.revealed_count += 1
            self.presentation.set_visible_characters(session.revealed_count)
            self.audio.play(self.cue_name)
            yield Wait(self.interval)

        session.skip_requested = False
        session.is_revealing = False
        logger.debug("Revealed line (%d chars)", total)

        # Finished; a reveal started from on_complete must not close this generator
        self._task = None
        if on_complete:
            on_complete()
