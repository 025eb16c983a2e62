import os
import sys
import pytest
from unittest.mock import MagicMock, patch

# Ensure engine modules can be imported
sys.path.append(os.getcwd())

from engine.audio.manager import AudioSink
from novel.images import ImageSink
from novel.presentation import Presentation
from novel.story.source import Choice, StorySource


class FakeChannel:
    """Stands in for pygame.mixer.Channel: play makes it busy, stop clears it."""

    def __init__(self, index):
        self.index = index
        self.busy = False
        self.plays = []

    def play(self, sound, loops=0):
        self.busy = True
        self.plays.append((sound, loops))

    def stop(self):
        self.busy = False

    def get_busy(self):
        return self.busy


@pytest.fixture(autouse=True)
def mock_pygame():
    """
    Global mock for pygame to allow headless testing.
    Autoused for all tests to prevent accidental window creation.
    """
    with patch('pygame.init'), \
         patch('pygame.quit'), \
         patch('pygame.display'), \
         patch('pygame.event'), \
         patch('pygame.time'), \
         patch('pygame.mixer'), \
         patch('pygame.sndarray'), \
         patch('pygame.image'), \
         patch('pygame.joystick'), \
         patch('pygame.key'), \
         patch('pygame.font'), \
         patch('pygame.Surface'):

        import pygame
        pygame.time.get_ticks = MagicMock(return_value=0)
        pygame.joystick.get_count.return_value = 0
        pygame.mixer.get_num_channels.return_value = 8
        pygame.mixer.Channel.side_effect = FakeChannel
        pygame.display.get_surface.return_value = None

        yield


class FakeStory(StorySource):
    """
    Scripted story: a list of (text, tags) lines, then optional choices.

    Choosing index i appends ``branches[i]`` to the remaining lines.
    """

    def __init__(self, lines, choices=(), branches=None):
        self._lines = list(lines)
        self._choices = list(choices)
        self._branches = branches or {}
        self._pos = 0
        self._tags = []
        self.continue_calls = 0
        self.chosen = []

    @property
    def position(self):
        return (self._pos, len(self.chosen))

    @property
    def can_continue(self):
        return self._pos < len(self._lines)

    def continue_(self):
        text, tags = self._lines[self._pos]
        self._pos += 1
        self._tags = list(tags)
        self.continue_calls += 1
        return text

    @property
    def current_tags(self):
        return list(self._tags)

    @property
    def current_choices(self):
        if self.can_continue:
            return []
        return [Choice(text=text, index=i) for i, text in enumerate(self._choices)]

    def choose_choice_index(self, index):
        if not 0 <= index < len(self._choices):
            raise IndexError(index)
        self.chosen.append(index)
        self._lines.extend(self._branches.get(index, []))
        self._choices = []


class FakeAudio(AudioSink):
    def __init__(self):
        self.calls = []

    def play(self, name):
        self.calls.append(("play", name))

    def stop(self, name):
        self.calls.append(("stop", name))

    def switch_theme(self, name):
        self.calls.append(("switch_theme", name))

    def count(self, op, name):
        return self.calls.count((op, name))


class FakeImages(ImageSink):
    def __init__(self):
        self.calls = []

    def set_expression(self, character, expression_id):
        self.calls.append(("expression", character, expression_id))

    def set_splash(self, splash_id):
        self.calls.append(("splash", splash_id))


class FakePresentation(Presentation):
    def __init__(self, slots=3):
        self.slots = slots
        self.speaker_name = ""
        self.line = ""
        self.visible = 0
        self.choices = []
        self.focused = None
        self.focus_history = []

    @property
    def choice_slots(self):
        return self.slots

    def set_speaker_name(self, name):
        self.speaker_name = name

    def set_line(self, text):
        self.line = text

    def set_visible_characters(self, count):
        self.visible = count

    def show_choices(self, choices):
        self.choices = list(choices)

    def hide_choices(self):
        self.choices = []

    def clear_focus(self):
        self.focused = None
        self.focus_history.append(None)

    def focus_choice(self, index):
        self.focused = index
        self.focus_history.append(index)


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from engine.core.events import EventBus
    return EventBus()


@pytest.fixture
def scheduler():
    from engine.core.scheduler import Scheduler
    return Scheduler()


@pytest.fixture
def audio():
    return FakeAudio()


@pytest.fixture
def images():
    return FakeImages()


@pytest.fixture
def presentation():
    return FakePresentation()
