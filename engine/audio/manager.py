"""
Core Audio Manager.

Named-cue audio sink. Every cue gets its own mixer channel so a cue can
be restarted, stopped and queried independently of the others, and one
looping cue is tracked as the current theme.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

import numpy as np
import pygame
from pydantic import ValidationError

from engine.audio.cues import SoundCue
from engine.core.events import EventBus, AudioEvent


class AudioSink(ABC):
    """Audio operations the dialogue layer relies on."""

    @abstractmethod
    def play(self, name: str) -> None:
        """Play a cue from the beginning, restarting it if already playing."""

    @abstractmethod
    def stop(self, name: str) -> None:
        """Stop a cue. Warns if it is not playing."""

    @abstractmethod
    def switch_theme(self, name: str) -> None:
        """Replace the current looping theme. A blank name turns it off."""


class AudioManager(AudioSink):
    """
    Central audio manager.

    Handles:
    - Cue registration (clip, volume, pitch, loop)
    - Restart-from-start playback on a per-cue channel
    - Theme tracking and switching
    - Master volume

    Usage:
        audio = AudioManager(event_bus)
        audio.init()
        audio.register(SoundCue(name="Frigid", clip="audio/frigid.ogg", loop=True))
        audio.switch_theme("Frigid")
    """

    def __init__(self, event_bus: EventBus | None = None):
        self.event_bus = event_bus

        self._cues: dict[str, SoundCue] = {}
        self._current_theme: str | None = None
        self._master_volume: float = 1.0
        self._initialized: bool = False

    def init(self, frequency: int = 44100, size: int = -16, channels: int = 2, buffer: int = 512) -> None:
        """Initialize the mixer. Failure leaves the manager silent but usable."""
        if pygame.mixer.get_init():
            self._initialized = True
            return

        try:
            pygame.mixer.init(frequency=frequency, size=size, channels=channels, buffer=buffer)
            self._initialized = True
            logging.info("Audio system initialized.")
        except pygame.error as e:
            logging.error(f"Failed to initialize audio system: {e}")

    def quit(self) -> None:
        """Shutdown audio system."""
        self.stop_all()
        pygame.mixer.quit()
        self._initialized = False

    @property
    def current_theme(self) -> str | None:
        return self._current_theme

    @property
    def cue_names(self) -> list[str]:
        return list(self._cues)

    def get_cue(self, name: str) -> SoundCue | None:
        return self._cues.get(name)

    # --- Registration ---

    def register(self, cue: SoundCue) -> SoundCue:
        """
        Register a cue and load its clip.

        The first cue registered under a name wins; later duplicates are
        ignored with a warning.
        """
        existing = self._cues.get(cue.name)
        if existing is not None:
            logging.warning(f"Duplicate sound name '{cue.name}', keeping the first registration")
            return existing

        self._cues[cue.name] = cue
        if self._initialized:
            self._load(cue, len(self._cues) - 1)
        return cue

    def load_cues(self, path: str | Path) -> int:
        """
        Register cues from a JSON list of cue objects.

        Returns:
            Number of cues registered
        """
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logging.error(f"Failed to load sound list {path}: {e}")
            return 0

        count = 0
        for entry in data:
            try:
                cue = SoundCue.model_validate(entry)
            except ValidationError as e:
                logging.error(f"Invalid sound entry in {path}: {e}")
                continue

            # Relative clips resolve against the list's folder
            clip = Path(cue.clip)
            if not clip.is_absolute():
                cue.clip = str(path.parent / clip)

            if self.register(cue) is cue:
                count += 1
        return count

    def _load(self, cue: SoundCue, channel_index: int) -> None:
        if not Path(cue.clip).exists():
            logging.warning(f"Audio file not found: {cue.clip}")
            return

        try:
            sound = pygame.mixer.Sound(cue.clip)
        except pygame.error as e:
            logging.error(f"Failed to load sound {cue.clip}: {e}")
            return

        if cue.pitch != 1.0:
            sound = self._apply_pitch(sound, cue.pitch)

        sound.set_volume(cue.volume * self._master_volume)

        if pygame.mixer.get_num_channels() <= channel_index:
            pygame.mixer.set_num_channels(channel_index + 1)

        cue._sound = sound
        cue._channel = pygame.mixer.Channel(channel_index)

    @staticmethod
    def _apply_pitch(sound: pygame.mixer.Sound, pitch: float) -> pygame.mixer.Sound:
        """Resample a sound so it plays ``pitch`` times faster."""
        samples = pygame.sndarray.array(sound)
        length = int(len(samples) / pitch)
        if length <= 1:
            return sound

        source = np.arange(len(samples))
        positions = np.linspace(0, len(samples) - 1, length)

        if samples.ndim == 1:
            resampled = np.interp(positions, source, samples)
        else:
            resampled = np.stack(
                [np.interp(positions, source, samples[:, c]) for c in range(samples.shape[1])],
                axis=1,
            )

        return pygame.sndarray.make_sound(np.ascontiguousarray(resampled.astype(samples.dtype)))

    # --- Playback ---

    def is_playing(self, name: str) -> bool:
        cue = self._cues.get(name)
        if cue is None or cue._channel is None:
            return False
        return bool(cue._channel.get_busy())

    def play(self, name: str) -> None:
        cue = self._cues.get(name)
        if cue is None:
            logging.warning(f"Sound not registered: {name}")
            return
        if cue._sound is None:
            logging.debug(f"Sound '{name}' has no loaded clip, skipping")
            return

        # Channel.play restarts the channel from the beginning
        cue._channel.play(cue._sound, loops=cue.loops)

        if self.event_bus:
            self.event_bus.publish(AudioEvent.SOUND_PLAYED, name=name)

    def stop(self, name: str) -> None:
        cue = self._cues.get(name)
        if cue is None:
            logging.warning(f"Sound not registered: {name}")
            return

        if not self.is_playing(name):
            logging.warning(f"Sound isn't playing: {name}")
            return

        cue._channel.stop()

        if self.event_bus:
            self.event_bus.publish(AudioEvent.SOUND_STOPPED, name=name)

    def switch_theme(self, name: str) -> None:
        name = name.strip()
        previous = self._current_theme

        # Re-selecting the current theme must not restart it
        if previous and previous != name and self.is_playing(previous):
            self.stop(previous)

        self._current_theme = name or None

        if name and not self.is_playing(name):
            self.play(name)

        if self.event_bus:
            self.event_bus.publish(AudioEvent.THEME_SWITCHED, name=self._current_theme, previous=previous)

    def stop_all(self) -> None:
        """Stop every cue that is currently playing."""
        for name in self._cues:
            if self.is_playing(name):
                self._cues[name]._channel.stop()

    # --- Volume ---

    @property
    def master_volume(self) -> float:
        return self._master_volume

    def set_master_volume(self, volume: float) -> None:
        """Set master volume (0.0 to 1.0) and rescale every loaded cue."""
        self._master_volume = max(0.0, min(1.0, volume))
        for cue in self._cues.values():
            if cue._sound is not None:
                cue._sound.set_volume(cue.volume * self._master_volume)
