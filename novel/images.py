"""
Character portraits and splash backgrounds.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import pygame


logger = logging.getLogger(__name__)


class ImageSink(ABC):
    """Receives expression and splash changes from line tags."""

    @abstractmethod
    def set_expression(self, character: str, expression_id: str) -> None:
        ...

    @abstractmethod
    def set_splash(self, splash_id: str) -> None:
        ...


class ImageManager(ImageSink):
    """
    Loads and draws portraits and splash backgrounds.

    Portraits are read from ``<portraits_path>/<expression_id>.png`` and
    splashes from ``<splashes_path>/<splash_id>.png``. Images load on
    first use and stay cached.

    Usage:
        images = ImageManager("assets/portraits", "assets/splashes")
        images.set_splash("snowfield")
        images.set_expression("Aria", "Aria_happy")
        images.render(screen)
    """

    IMAGE_EXTENSION = ".png"

    def __init__(self, portraits_path: str | Path, splashes_path: str | Path):
        self.portraits_path = Path(portraits_path)
        self.splashes_path = Path(splashes_path)

        self._cache: dict[Path, pygame.Surface] = {}
        # character -> current expression id, in first-appearance order
        self._expressions: dict[str, str] = {}
        self._splash: Optional[str] = None

    @property
    def splash(self) -> Optional[str]:
        return self._splash

    @property
    def characters(self) -> list[str]:
        return list(self._expressions)

    def expression_of(self, character: str) -> Optional[str]:
        return self._expressions.get(character)

    def set_expression(self, character: str, expression_id: str) -> None:
        path = self.portraits_path / f"{expression_id}{self.IMAGE_EXTENSION}"
        if self._load(path) is None:
            return
        self._expressions[character] = expression_id

    def set_splash(self, splash_id: str) -> None:
        path = self.splashes_path / f"{splash_id}{self.IMAGE_EXTENSION}"
        if self._load(path) is None:
            return
        self._splash = splash_id

    def clear(self) -> None:
        """Drop current images. The cache is kept."""
        self._expressions.clear()
        self._splash = None

    def _load(self, path: Path) -> Optional[pygame.Surface]:
        if path in self._cache:
            return self._cache[path]

        if not path.exists():
            logger.warning("Image not found: %s", path)
            return None

        try:
            surface = pygame.image.load(str(path))
        except pygame.error as e:
            logger.warning("Could not load image %s: %s", path, e)
            return None

        if pygame.display.get_surface() is not None:
            surface = surface.convert_alpha()

        self._cache[path] = surface
        return surface

    def render(self, surface: pygame.Surface) -> None:
        """Draw the splash filling the surface, then portraits along the bottom."""
        width, height = surface.get_size()

        if self._splash is not None:
            splash = self._cache[self.splashes_path / f"{self._splash}{self.IMAGE_EXTENSION}"]
            surface.blit(pygame.transform.smoothscale(splash, (width, height)), (0, 0))

        if not self._expressions:
            return

        slot_width = width / len(self._expressions)
        for i, expression_id in enumerate(self._expressions.values()):
            portrait = self._cache[self.portraits_path / f"{expression_id}{self.IMAGE_EXTENSION}"]
            x = int(slot_width * i + (slot_width - portrait.get_width()) / 2)
            y = height - portrait.get_height()
            surface.blit(portrait, (x, y))
