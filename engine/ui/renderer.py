"""
UI Renderer for drawing primitives and text on a pygame surface.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Optional

import pygame


@dataclass(frozen=True)
class FontConfig:
    """Font configuration."""
    name: Optional[str] = None  # None = pygame default
    size: int = 28
    bold: bool = False
    italic: bool = False


class UIRenderer:
    """
    Renderer for UI elements.

    Usage:
        renderer = UIRenderer(screen_surface)
        renderer.draw_rect(10, 10, 100, 50, (50, 50, 70))
        renderer.draw_text("Hello", 60, 35, color=(255, 255, 255), align="center")
    """

    def __init__(self, surface: pygame.Surface):
        self.surface = surface
        self._fonts: dict[FontConfig, pygame.font.Font] = {}
        self._default_font = FontConfig()

    def set_surface(self, surface: pygame.Surface) -> None:
        self.surface = surface

    def get_font(self, config: Optional[FontConfig] = None) -> pygame.font.Font:
        """Get or create a font from config."""
        config = config or self._default_font

        if config not in self._fonts:
            if not pygame.font.get_init():
                pygame.font.init()
            if config.name:
                font = pygame.font.Font(config.name, config.size)
            else:
                font = pygame.font.SysFont(None, config.size)
            font.set_bold(config.bold)
            font.set_italic(config.italic)
            self._fonts[config] = font

        return self._fonts[config]

    def draw_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        color: Tuple[int, ...],
    ) -> None:
        """Draw a filled rectangle. RGBA colors are alpha blended."""
        if len(color) == 4 and color[3] < 255:
            temp = pygame.Surface((int(width), int(height)), pygame.SRCALPHA)
            temp.fill(color)
            self.surface.blit(temp, (int(x), int(y)))
        else:
            rect = pygame.Rect(int(x), int(y), int(width), int(height))
            pygame.draw.rect(self.surface, color[:3], rect)

    def draw_rect_outline(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        color: Tuple[int, ...],
        thickness: int = 1,
    ) -> None:
        rect = pygame.Rect(int(x), int(y), int(width), int(height))
        pygame.draw.rect(self.surface, color[:3], rect, thickness)

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        color: Tuple[int, ...] = (255, 255, 255),
        font_config: Optional[FontConfig] = None,
        align: str = "left",
        max_width: Optional[float] = None,
    ) -> pygame.Rect:
        """
        Draw text.

        Args:
            text: Text to render
            x, y: Position
            color: Text color (RGB or RGBA)
            font_config: Font settings
            align: "left", "center", or "right"
            max_width: Maximum width for word wrapping

        Returns:
            Bounding rect of rendered text
        """
        font = self.get_font(font_config)
        lines = self.wrap_text(text, font, max_width) if max_width else [text]

        total_rect = pygame.Rect(int(x), int(y), 0, 0)
        line_height = font.get_height()

        for i, line in enumerate(lines):
            if not line:
                continue

            text_surface = font.render(line, True, color[:3])
            text_rect = text_surface.get_rect()

            if align == "center":
                text_rect.centerx = int(x)
            elif align == "right":
                text_rect.right = int(x)
            else:
                text_rect.left = int(x)

            text_rect.top = int(y) + i * line_height

            if len(color) == 4 and color[3] < 255:
                text_surface.set_alpha(color[3])

            self.surface.blit(text_surface, text_rect)
            total_rect = total_rect.union(text_rect)

        return total_rect

    def draw_surface(
        self,
        source: pygame.Surface,
        x: float,
        y: float,
        width: Optional[float] = None,
        height: Optional[float] = None,
    ) -> None:
        """Draw a pygame surface, optionally scaled."""
        if width and height:
            source = pygame.transform.smoothscale(source, (int(width), int(height)))
        self.surface.blit(source, (int(x), int(y)))

    def measure_text(self, text: str, font_config: Optional[FontConfig] = None) -> Tuple[int, int]:
        return self.get_font(font_config).size(text)

    @staticmethod
    def wrap_text(text: str, font: pygame.font.Font, max_width: float) -> list[str]:
        """Wrap text to fit within max_width, keeping explicit newlines."""
        lines = []
        for paragraph in text.split('\n'):
            current_line = ""
            for word in paragraph.split(' '):
                test_line = current_line + (" " if current_line else "") + word

                if font.size(test_line)[0] <= max_width:
                    current_line = test_line
                else:
                    if current_line:
                        lines.append(current_line)
                    current_line = word

            lines.append(current_line)

        return lines if lines else [""]
