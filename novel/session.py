"""
Dialogue session state - owned by the DialogueDriver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class DialogueState(Enum):
    """State of the dialogue driver."""
    IDLE = auto()
    REVEALING = auto()
    AWAITING_CHOICE = auto()
    AWAITING_ADVANCE = auto()
    ENDED = auto()


@dataclass(frozen=True)
class ChoiceOption:
    """A choice as shown to the player. Stale once the next line starts."""
    display_text: str
    index: int


@dataclass
class DialogueSession:
    """
    Runtime dialogue state for one screen.

    Attributes:
        state: Current driver state
        active: Whether a dialogue is running
        current_line: Full text of the line being shown
        revealed_count: Number of characters of current_line visible
        is_revealing: True while the line revealer is running
        skip_requested: Set by the advance signal, consumed by the revealer
        pending_choices: Choices offered after the current line
    """
    state: DialogueState = DialogueState.IDLE
    active: bool = False
    current_line: str = ""
    revealed_count: int = 0
    is_revealing: bool = False
    skip_requested: bool = False
    pending_choices: list[ChoiceOption] = field(default_factory=list)

    @property
    def is_line_complete(self) -> bool:
        return self.revealed_count >= len(self.current_line)

    def begin_line(self, text: str) -> None:
        """Reset per-line state for a freshly fetched line."""
        self.current_line = text
        self.revealed_count = 0
        self.pending_choices = []
        self.state = DialogueState.REVEALING

    def end(self) -> None:
        self.active = False
        self.is_revealing = False
        self.skip_requested = False
        self.pending_choices = []
        self.state = DialogueState.ENDED
