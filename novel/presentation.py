"""
Presentation layer - the dialogue panel, name field and choice buttons.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Hashable, Optional

from engine.ui.focus import FocusManager
from engine.ui.renderer import FontConfig, UIRenderer
from novel.session import ChoiceOption


# Focus target of the start panel button
START_BUTTON = "start"

# Colors
PANEL_BG = (20, 24, 36, 225)
PANEL_BORDER = (110, 120, 150)
TEXT_COLOR = (235, 235, 245)
NAME_COLOR = (170, 200, 255)
BUTTON_BG = (45, 52, 75, 235)
BUTTON_FOCUSED_BG = (85, 100, 150, 245)
BUTTON_BORDER = (140, 150, 185)
BUTTON_FOCUSED_BORDER = (255, 235, 160)


class Presentation(ABC):
    """What the dialogue driver needs from the view."""

    @property
    @abstractmethod
    def choice_slots(self) -> int:
        """Number of choice buttons available."""

    @abstractmethod
    def set_speaker_name(self, name: str) -> None:
        ...

    @abstractmethod
    def set_line(self, text: str) -> None:
        """Set the full text of the line being revealed."""

    @abstractmethod
    def set_visible_characters(self, count: int) -> None:
        ...

    @abstractmethod
    def show_choices(self, choices: list[ChoiceOption]) -> None:
        ...

    @abstractmethod
    def hide_choices(self) -> None:
        ...

    @abstractmethod
    def clear_focus(self) -> None:
        ...

    @abstractmethod
    def focus_choice(self, index: int) -> None:
        ...


class NovelView(Presentation):
    """
    Pygame implementation of the dialogue screen.

    Features:
    - Start panel with a single Start button
    - Dialogue panel with speaker name and partially revealed text
    - Fixed choice slots with focus highlight

    Focus targets are ``START_BUTTON`` and the choice slot indices.
    """

    def __init__(
        self,
        width: int,
        height: int,
        choice_slots: int = 3,
        title: str = "",
    ):
        self.width = width
        self.height = height
        self.title = title
        self._choice_slots = choice_slots

        self.focus = FocusManager()

        self.start_panel_visible = False
        self.dialogue_visible = False
        self.speaker_name = ""
        self.line = ""
        self.visible_characters = 0
        self.choices: list[ChoiceOption] = []

        self.text_font = FontConfig(size=30)
        self.name_font = FontConfig(size=30, bold=True)
        self.title_font = FontConfig(size=64, bold=True)

    # Presentation

    @property
    def choice_slots(self) -> int:
        return self._choice_slots

    def set_speaker_name(self, name: str) -> None:
        self.speaker_name = name

    def set_line(self, text: str) -> None:
        self.line = text
        self.visible_characters = 0

    def set_visible_characters(self, count: int) -> None:
        self.visible_characters = max(0, min(count, len(self.line)))

    def show_choices(self, choices: list[ChoiceOption]) -> None:
        self.choices = list(choices[:self._choice_slots])
        self.focus.set_order(list(range(len(self.choices))))

    def hide_choices(self) -> None:
        self.choices = []
        self.focus.set_order([])
        if self.focus.focused != START_BUTTON:
            self.focus.clear_focus()

    def clear_focus(self) -> None:
        self.focus.clear_focus()

    def focus_choice(self, index: int) -> None:
        if 0 <= index < len(self.choices):
            self.focus.set_focus(index)

    # Panels

    def show_start_panel(self) -> None:
        self.start_panel_visible = True
        self.dialogue_visible = False

    def show_dialogue_panel(self) -> None:
        self.start_panel_visible = False
        self.dialogue_visible = True
        if self.focus.focused == START_BUTTON:
            self.focus.clear_focus()

    @property
    def start_focused(self) -> bool:
        return self.start_panel_visible and self.focus.focused == START_BUTTON

    @property
    def focused_choice(self) -> Optional[int]:
        """Index of the focused choice slot, or None."""
        focused: Optional[Hashable] = self.focus.focused
        if isinstance(focused, int) and 0 <= focused < len(self.choices):
            return focused
        return None

    def move_focus(self, delta: int) -> bool:
        """Move focus between visible choices, wrapping."""
        if not self.choices:
            return False
        return self.focus.navigate(delta)

    @property
    def visible_text(self) -> str:
        return self.line[:self.visible_characters]

    # Rendering

    def render(self, renderer: UIRenderer) -> None:
        if self.start_panel_visible:
            self._render_start_panel(renderer)
        if self.dialogue_visible:
            self._render_dialogue_panel(renderer)
            self._render_choices(renderer)

    def _render_start_panel(self, renderer: UIRenderer) -> None:
        renderer.draw_text(
            self.title, self.width / 2, self.height * 0.3,
            color=TEXT_COLOR, font_config=self.title_font, align="center",
        )

        bw, bh = 240, 64
        bx = (self.width - bw) / 2
        by = self.height * 0.6
        focused = self.focus.focused == START_BUTTON
        self._render_button(renderer, "Start", bx, by, bw, bh, focused)

    def _render_dialogue_panel(self, renderer: UIRenderer) -> None:
        margin = 24
        panel_h = self.height * 0.28
        px = margin
        py = self.height - panel_h - margin
        pw = self.width - margin * 2

        renderer.draw_rect(px, py, pw, panel_h, PANEL_BG)
        renderer.draw_rect_outline(px, py, pw, panel_h, PANEL_BORDER, thickness=2)

        if self.speaker_name.strip():
            renderer.draw_text(
                self.speaker_name, px + 20, py + 14,
                color=NAME_COLOR, font_config=self.name_font,
            )

        # Layout uses the full line; only the revealed prefix is drawn
        font = renderer.get_font(self.text_font)
        max_width = pw - 40
        line_height = font.get_height()
        visible = self.visible_characters
        cursor = 0
        y = py + 24 + line_height

        for wrapped in renderer.wrap_text(self.line, font, max_width):
            # Offset of this wrapped row within the full line
            start = self.line.find(wrapped, cursor)
            if start < 0:
                start = cursor
            if visible <= start:
                break
            shown = wrapped[:visible - start]
            renderer.draw_text(shown, px + 20, y, color=TEXT_COLOR, font_config=self.text_font)
            cursor = start + len(wrapped)
            y += line_height

    def _render_choices(self, renderer: UIRenderer) -> None:
        if not self.choices:
            return

        bw = self.width * 0.5
        bh = 56
        gap = 16
        total_h = len(self.choices) * bh + (len(self.choices) - 1) * gap
        bx = (self.width - bw) / 2
        by = (self.height * 0.6 - total_h) / 2

        for slot, choice in enumerate(self.choices):
            y = by + slot * (bh + gap)
            self._render_button(renderer, choice.display_text, bx, y, bw, bh, self.focus.focused == slot)

    def _render_button(
        self,
        renderer: UIRenderer,
        label: str,
        x: float,
        y: float,
        width: float,
        height: float,
        focused: bool,
    ) -> None:
        renderer.draw_rect(x, y, width, height, BUTTON_FOCUSED_BG if focused else BUTTON_BG)
        renderer.draw_rect_outline(
            x, y, width, height,
            BUTTON_FOCUSED_BORDER if focused else BUTTON_BORDER,
            thickness=3 if focused else 1,
        )

        _, text_h = renderer.measure_text(label, self.text_font)
        renderer.draw_text(
            label, x + width / 2, y + (height - text_h) / 2,
            color=TEXT_COLOR, font_config=self.text_font, align="center",
        )
