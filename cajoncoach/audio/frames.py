"""Frame-by-frame feature extraction.

The detector consumes a pull-based stream of per-frame features instead of
being driven by an audio engine callback: each analysis frame is a block of
``frame_size`` consecutive samples (no overlap), yielded strictly in
temporal order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import librosa
import numpy as np

from cajoncoach.errors import InvalidParameterError

MIN_FRAME_SIZE = 64
MAX_FRAME_SIZE = 8192


@dataclass(frozen=True)
class FrameFeatures:
    """Features of one analysis frame."""
    time: float  # frame start, seconds
    rms: float
    spectral_centroid: float  # Hz


def validate_frame_size(frame_size: int) -> int:
    """Frame sizes must be powers of two in [64, 8192]."""
    if (
        not isinstance(frame_size, (int, np.integer))
        or frame_size < MIN_FRAME_SIZE
        or frame_size > MAX_FRAME_SIZE
        or frame_size & (frame_size - 1)
    ):
        raise InvalidParameterError(
            f"frame_size must be a power of two in [{MIN_FRAME_SIZE}, {MAX_FRAME_SIZE}], got {frame_size}"
        )
    return int(frame_size)


def frame_features(
    audio: np.ndarray,
    sr: int,
    frame_size: int = 1024,
) -> Iterator[FrameFeatures]:
    """Yield RMS energy and spectral centroid for each frame of *audio*.

    The trailing partial frame is zero-padded to ``frame_size``.
    """
    frame_size = validate_frame_size(frame_size)
    audio = np.asarray(audio, dtype=np.float32).ravel()
    if audio.size == 0:
        return

    remainder = audio.size % frame_size
    if remainder:
        audio = np.pad(audio, (0, frame_size - remainder))

    rms = librosa.feature.rms(
        y=audio, frame_length=frame_size, hop_length=frame_size, center=False
    )[0]
    centroid = librosa.feature.spectral_centroid(
        y=audio, sr=sr, n_fft=frame_size, hop_length=frame_size, center=False
    )[0]
    times = librosa.frames_to_time(np.arange(len(rms)), sr=sr, hop_length=frame_size)

    for t, r, c in zip(times, rms, centroid):
        yield FrameFeatures(time=float(t), rms=float(r), spectral_centroid=float(c))
