"""Audio module - named sound cues and theme switching."""

from engine.audio.cues import SoundCue
from engine.audio.manager import AudioManager, AudioSink

__all__ = [
    "SoundCue",
    "AudioManager",
    "AudioSink",
]
