"""
Novel configuration loaded from JSON.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path

from engine.core.game import GameConfig


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"


@dataclass
class NovelConfig:
    """
    Settings for the novel screen.

    Relative paths in a loaded file are resolved against the file's folder.
    """
    title: str = "Visual Novel"
    width: int = 1280
    height: int = 720
    fps: int = 60

    char_interval: float = 0.03
    text_scroll_cue: str = "Text_Scroll"
    title_theme: str = "Frigid"
    choice_slots: int = 3

    script: str = str(DATA_DIR / "story.ink")
    sounds: str = str(DATA_DIR / "sounds.json")
    portraits_path: str = str(DATA_DIR / "portraits")
    splashes_path: str = str(DATA_DIR / "splashes")

    _PATH_FIELDS = ("script", "sounds", "portraits_path", "splashes_path")

    @classmethod
    def load(cls, path: str | Path) -> NovelConfig:
        """
        Load config from a JSON object of field overrides.

        A missing or unreadable file gives the defaults.
        """
        path = Path(path)
        if not path.exists():
            logger.warning("Config file not found: %s; using defaults", path)
            return cls()

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error("Invalid config file %s: %s; using defaults", path, e)
            return cls()

        if not isinstance(data, dict):
            logger.error("Config file %s must contain an object; using defaults", path)
            return cls()

        known = {f.name for f in fields(cls)}
        overrides = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Unknown config key '%s' in %s", key, path)
                continue
            if key in cls._PATH_FIELDS:
                value = str(path.parent / value)
            overrides[key] = value

        return cls(**overrides)

    def game_config(self) -> GameConfig:
        return GameConfig(
            title=self.title,
            width=self.width,
            height=self.height,
            target_fps=self.fps,
        )
