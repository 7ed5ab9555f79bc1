# Audio feedback for eating and game over: muted no-op or synthesized tones.
from __future__ import annotations

import os
import sys
import time

import numpy as np

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
import pygame  # noqa: E402


SAMPLE_RATE = 22050


class MutedSound:
    """Silent mode: every signal is a no-op."""
    def on_eat(self) -> None:
        pass

    def on_game_over(self) -> None:
        pass

    def close(self) -> None:
        pass


def synth_tone(
    frequency_hz: float,
    duration_ms: int,
    volume: float,
    end_frequency_hz: float | None = None,
    attack_ms: int = 8,
    release_ms: int = 60,
    sample_rate: int = SAMPLE_RATE,
) -> np.ndarray:
    """Generate a mono int16 tone/chirp with a linear attack and release envelope."""
    sample_count = max(1, int(sample_rate * duration_ms / 1000.0))
    end_frequency_hz = frequency_hz if end_frequency_hz is None else end_frequency_hz

    progress = np.linspace(0.0, 1.0, sample_count, dtype=np.float64)
    freq = frequency_hz + (end_frequency_hz - frequency_hz) * progress
    phase = np.cumsum(2.0 * np.pi * freq / sample_rate)

    env = np.ones(sample_count, dtype=np.float64)
    attack = min(sample_count, int(sample_rate * attack_ms / 1000.0))
    release = min(sample_count, int(sample_rate * release_ms / 1000.0))
    if attack > 0:
        env[:attack] *= np.arange(attack) / attack
    if release > 0:
        env[-release:] *= np.arange(release, 0, -1) / release

    amplitude = 32767 * min(max(volume, 0.0), 1.0)
    return (amplitude * env * np.sin(phase)).astype(np.int16)


class ToneSound:
    """Plays a short chirp on eat and a longer falling sweep on game over."""
    def __init__(self) -> None:
        if pygame.mixer.get_init() is None:
            pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1, buffer=512)
        self.eat_sound = pygame.mixer.Sound(
            buffer=synth_tone(720, 95, 0.26, end_frequency_hz=520, attack_ms=6, release_ms=70).tobytes()
        )
        self.game_over_sound = pygame.mixer.Sound(
            buffer=synth_tone(420, 900, 0.2, end_frequency_hz=110, attack_ms=16, release_ms=300).tobytes()
        )
        self._game_over_channel: pygame.mixer.Channel | None = None

    def on_eat(self) -> None:
        # Sound.play returns immediately, so the ticker is never stalled.
        self.eat_sound.play()

    def on_game_over(self) -> None:
        self._game_over_channel = self.game_over_sound.play()

    def close(self) -> None:
        """Let a playing game-over tone finish, then release the audio device."""
        channel = self._game_over_channel
        deadline = time.monotonic() + self.game_over_sound.get_length()
        while channel is not None and channel.get_busy() and time.monotonic() < deadline:
            time.sleep(0.02)
        pygame.mixer.quit()


def make_sound(silent: bool) -> MutedSound | ToneSound:
    """Build the audio backend; falls back to silence when no device is usable."""
    if silent:
        return MutedSound()
    try:
        return ToneSound()
    except pygame.error as exc:
        print(f"Warning: audio unavailable ({exc}); continuing in silent mode.", file=sys.stderr)
        return MutedSound()
