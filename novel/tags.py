"""
Line tags - parsing ``key: value`` metadata into directives and applying them.

Tags ride along with each story line and drive everything that is not
the text itself: who is speaking, portraits, backgrounds, sounds and
the background theme.

Usage:
    interpreter = TagInterpreter(audio, images, presentation)
    interpreter.handle_tags(["speaker: Aria", "expression: Aria_happy"])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Union

if TYPE_CHECKING:
    from engine.audio.manager import AudioSink
    from novel.images import ImageSink
    from novel.presentation import Presentation


logger = logging.getLogger(__name__)

# Speaker value that blanks the name field
NO_SPEAKER = "NONE"
BLANK_NAME = " "


class MalformedTagError(ValueError):
    """A tag did not split into exactly one key and one value."""

    def __init__(self, raw: str):
        super().__init__(f"Tag could not be parsed: {raw!r}")
        self.raw = raw


@dataclass(frozen=True)
class Speaker:
    name: str


@dataclass(frozen=True)
class Expression:
    character: str
    expression_id: str


@dataclass(frozen=True)
class Splash:
    splash_id: str


@dataclass(frozen=True)
class PlaySound:
    name: str


@dataclass(frozen=True)
class StopSound:
    name: str


@dataclass(frozen=True)
class SwitchTheme:
    name: str


@dataclass(frozen=True)
class Unknown:
    key: str
    value: str


Directive = Union[Speaker, Expression, Splash, PlaySound, StopSound, SwitchTheme, Unknown]


def _expression(value: str) -> Expression:
    character = value.split('_')[0]
    return Expression(character=character, expression_id=value)


_BUILDERS: dict[str, Callable[[str], Directive]] = {
    "speaker": Speaker,
    "expression": _expression,
    "splash": Splash,
    "playSound": PlaySound,
    "stopSound": StopSound,
    "switchTheme": SwitchTheme,
}


def parse_tag(raw: str) -> Directive:
    """
    Parse one raw tag.

    The tag must split on ':' into exactly two parts, both non-empty
    after trimming. Unrecognised keys become ``Unknown``.

    Raises:
        MalformedTagError: if the tag is not ``key: value``
    """
    parts = raw.split(':')
    if len(parts) != 2:
        raise MalformedTagError(raw)

    key, value = parts[0].strip(), parts[1].strip()
    if not key or not value:
        raise MalformedTagError(raw)

    builder = _BUILDERS.get(key)
    if builder is None:
        return Unknown(key=key, value=value)
    return builder(value)


class TagInterpreter:
    """
    Applies directives to the audio sink, image sink and presentation.
    """

    def __init__(
        self,
        audio: AudioSink,
        images: ImageSink,
        presentation: Presentation,
    ):
        self.audio = audio
        self.images = images
        self.presentation = presentation

        self._handlers: dict[type, Callable] = {
            Speaker: self._apply_speaker,
            Expression: self._apply_expression,
            Splash: self._apply_splash,
            PlaySound: self._apply_play_sound,
            StopSound: self._apply_stop_sound,
            SwitchTheme: self._apply_switch_theme,
            Unknown: self._apply_unknown,
        }

    def handle_tags(self, raw_tags: list[str]) -> list[Directive]:
        """
        Parse and dispatch every tag of a line, in order.

        Malformed tags are logged and skipped; the rest still apply.

        Returns:
            The directives that were dispatched
        """
        applied = []
        for raw in raw_tags:
            try:
                directive = parse_tag(raw)
            except MalformedTagError as e:
                logger.warning("%s", e)
                continue

            self.dispatch(directive)
            applied.append(directive)
        return applied

    def dispatch(self, directive: Directive) -> None:
        handler = self._handlers.get(type(directive))
        if handler is None:
            raise TypeError(f"Not a directive: {directive!r}")
        handler(directive)

    def _apply_speaker(self, directive: Speaker) -> None:
        if directive.name == NO_SPEAKER:
            self.presentation.set_speaker_name(BLANK_NAME)
        else:
            self.presentation.set_speaker_name(directive.name + ':')

    def _apply_expression(self, directive: Expression) -> None:
        self.images.set_expression(directive.character, directive.expression_id)

    def _apply_splash(self, directive: Splash) -> None:
        self.images.set_splash(directive.splash_id)

    def _apply_play_sound(self, directive: PlaySound) -> None:
        self.audio.play(directive.name)

    def _apply_stop_sound(self, directive: StopSound) -> None:
        self.audio.stop(directive.name)

    def _apply_switch_theme(self, directive: SwitchTheme) -> None:
        self.audio.switch_theme(directive.name)

    def _apply_unknown(self, directive: Unknown) -> None:
        logger.info("Tag was parsed but cannot be interpreted. Tag key: %s", directive.key)
