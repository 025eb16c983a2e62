"""
Visual novel layer built on the engine.

Provides:
- DialogueDriver: runs a story line by line with timed text reveal
- TagInterpreter: applies ``key: value`` line tags
- NovelView: the pygame dialogue screen
- NovelScene: start panel, story and restart-on-end
"""

from novel.session import DialogueSession, DialogueState, ChoiceOption
from novel.tags import (
    TagInterpreter,
    MalformedTagError,
    parse_tag,
    Directive,
    Speaker,
    Expression,
    Splash,
    PlaySound,
    StopSound,
    SwitchTheme,
    Unknown,
)
from novel.reveal import LineRevealer
from novel.images import ImageSink, ImageManager
from novel.presentation import Presentation, NovelView
from novel.driver import DialogueDriver
from novel.config import NovelConfig
from novel.scene import NovelScene

__all__ = [
    # Session
    "DialogueSession",
    "DialogueState",
    "ChoiceOption",
    # Tags
    "TagInterpreter",
    "MalformedTagError",
    "parse_tag",
    "Directive",
    "Speaker",
    "Expression",
    "Splash",
    "PlaySound",
    "StopSound",
    "SwitchTheme",
    "Unknown",
    # Runtime
    "LineRevealer",
    "DialogueDriver",
    # Sinks and view
    "ImageSink",
    "ImageManager",
    "Presentation",
    "NovelView",
    # Screen
    "NovelConfig",
    "NovelScene",
]
