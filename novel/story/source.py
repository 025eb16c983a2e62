"""
Story Source contract.

The dialogue driver only ever talks to a story through this interface.
The story owns its position; callers get snapshots of the current line,
tags and choices.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Choice:
    """A choice offered by the story at its current position."""
    text: str
    index: int


class StorySource(ABC):
    """
    Branching-narrative runtime.

    Usage:
        while story.can_continue:
            line = story.continue_()
            tags = story.current_tags
        for choice in story.current_choices:
            ...
        story.choose_choice_index(0)
    """

    @property
    @abstractmethod
    def can_continue(self) -> bool:
        """True while there is another line before the next choice point or the end."""

    @abstractmethod
    def continue_(self) -> str:
        """Advance one line and return its text."""

    @property
    @abstractmethod
    def current_tags(self) -> list[str]:
        """Raw tags of the line returned by the last ``continue_``."""

    @property
    @abstractmethod
    def current_choices(self) -> list[Choice]:
        """Choices available at the current position, in display order."""

    @abstractmethod
    def choose_choice_index(self, index: int) -> None:
        """Follow the choice at ``index``."""
