from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


class SoundCue(BaseModel):
    """
    A named sound registered with the AudioManager.

    Attributes:
        name: Lookup name used by play/stop/switch_theme
        clip: Path to the audio file
        volume: Playback volume (0.0 to 1.0)
        pitch: Playback speed multiplier (1.0 = unchanged)
        loop: Whether the cue loops until stopped (themes)
    """

    model_config = ConfigDict(validate_assignment=True, extra='forbid')

    name: str = Field(min_length=1)
    clip: str
    volume: float = Field(default=1.0, ge=0.0, le=1.0)
    pitch: float = Field(default=1.0, gt=0.0)
    loop: bool = False

    # Runtime handles (not serialized)
    _sound: Any = PrivateAttr(default=None)
    _channel: Any = PrivateAttr(default=None)

    @property
    def loops(self) -> int:
        """Loop count in pygame.mixer terms."""
        return -1 if self.loop else 0
