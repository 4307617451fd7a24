"""Energy-threshold onset detection with timbre classification."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from cajoncoach.analysis.models import HitType, Onset
from cajoncoach.audio.frames import FrameFeatures, frame_features, validate_frame_size

logger = logging.getLogger(__name__)

# Float slack for the inclusive debounce boundary (frame times are sample-clock derived)
_TIME_EPS = 1e-9


@dataclass(frozen=True)
class DetectorParams:
    """Tunables for the onset detector."""
    energy_threshold: float = 0.08  # RMS
    min_onset_gap: float = 0.07  # seconds
    centroid_cutoff_hz: float = 1600.0
    frame_size: int = 1024

    def __post_init__(self):
        validate_frame_size(self.frame_size)

    @classmethod
    def from_settings(cls, settings) -> "DetectorParams":
        return cls(
            energy_threshold=settings.onset_energy_threshold,
            min_onset_gap=settings.min_onset_gap,
            centroid_cutoff_hz=settings.centroid_cutoff_hz,
            frame_size=settings.frame_size,
        )


def classify_timbre(centroid: float, cutoff_hz: float) -> HitType:
    """Low spectral centroid = bass strike, high = tone/slap."""
    return HitType.BASS if centroid < cutoff_hz else HitType.TONE


def detect_onset(
    features: FrameFeatures | None,
    last_onset_time: float | None,
    params: DetectorParams,
) -> Onset | None:
    """Decide whether a single frame starts a new onset.

    Pure function of the frame features and the time of the previous onset.
    Frames without usable features are skipped (returns None).
    """
    if features is None:
        return None
    if not (math.isfinite(features.rms) and math.isfinite(features.spectral_centroid)):
        return None

    if features.rms <= params.energy_threshold:
        return None
    if last_onset_time is not None and features.time - last_onset_time < params.min_onset_gap - _TIME_EPS:
        return None

    return Onset(
        time=features.time,
        energy=features.rms,
        spectral_centroid=features.spectral_centroid,
        type=classify_timbre(features.spectral_centroid, params.centroid_cutoff_hz),
    )


class OnsetDetector:
    """One-shot onset detector: ``start()``, feed frames, ``stop()``.

    Frames must be fed in temporal order. Frames arriving before ``start()``
    or after ``stop()`` are ignored.
    """

    def __init__(self, params: DetectorParams | None = None):
        self.params = params or DetectorParams()
        self._onsets: list[Onset] = []
        self._running = False
        self._stopped = False

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._stopped:
            raise RuntimeError("OnsetDetector is one-shot and cannot be restarted")
        self._onsets = []
        self._running = True

    def process(self, features: FrameFeatures | None) -> Onset | None:
        """Feed one analysis frame; returns the onset it produced, if any."""
        if not self._running:
            return None
        last_time = self._onsets[-1].time if self._onsets else None
        onset = detect_onset(features, last_time, self.params)
        if onset is not None:
            self._onsets.append(onset)
            logger.debug(
                f"Onset at {onset.time:.3f}s rms={onset.energy:.3f} "
                f"centroid={onset.spectral_centroid:.0f}Hz type={onset.type.value}"
            )
        return onset

    def stop(self) -> list[Onset]:
        """Halt processing and return the ordered onset list."""
        self._running = False
        self._stopped = True
        return list(self._onsets)

    def detect(self, frames: Iterable[FrameFeatures | None]) -> list[Onset]:
        """Run a full start -> process all frames -> stop pass."""
        self.start()
        for features in frames:
            self.process(features)
        return self.stop()


def detect_onsets(
    audio: np.ndarray,
    sr: int,
    params: DetectorParams | None = None,
) -> list[Onset]:
    """Detect classified onsets over a whole audio buffer."""
    params = params or DetectorParams()
    detector = OnsetDetector(params)
    onsets = detector.detect(frame_features(audio, sr, params.frame_size))
    logger.info(
        f"Detected {len(onsets)} onsets "
        f"({sum(1 for o in onsets if o.type == HitType.BASS)} bass, "
        f"{sum(1 for o in onsets if o.type == HitType.TONE)} tone)"
    )
    return onsets
