"""Metronome click-track generation."""

from __future__ import annotations

import numpy as np

from cajoncoach.errors import InvalidParameterError

_CLICK_DURATION = 0.02  # 20ms click
_CLICK_FREQ = 1000.0
_CLICK_DECAY = 100.0


def click_times(bpm: float, steps: int = 8) -> list[float]:
    """Times of the audible clicks for *steps* eighth-note slots.

    Clicks fall on even slots only (quarter notes), matching the practice grid.
    """
    if bpm <= 0:
        raise InvalidParameterError(f"BPM must be positive, got {bpm}")
    step_duration = (60.0 / bpm) / 2
    return [i * step_duration for i in range(0, steps, 2)]


def render_click_track(
    bpm: float,
    steps: int = 8,
    sr: int = 44100,
    accent_first: bool = True,
) -> np.ndarray:
    """Render a click track covering *steps* eighth-note slots.

    Returns mono float32 audio. The first beat of every bar peaks near
    1.0 when *accent_first* is set, other beats at 0.6.
    """
    times = click_times(bpm, steps)
    duration = steps * (60.0 / bpm) / 2
    n_samples = int(round(duration * sr))
    audio = np.zeros(n_samples, dtype=np.float32)

    click_samples = int(_CLICK_DURATION * sr)
    t_click = np.arange(click_samples) / sr
    click = (np.sin(2 * np.pi * _CLICK_FREQ * t_click) * np.exp(-t_click * _CLICK_DECAY)).astype(np.float32)

    for i, t in enumerate(times):
        sample_pos = int(round(t * sr))
        end = min(sample_pos + click_samples, n_samples)
        length = end - sample_pos
        if length <= 0:
            continue
        amplitude = 1.0 if (accent_first and i % 4 == 0) else 0.6
        audio[sample_pos:end] += click[:length] * amplitude

    return audio
