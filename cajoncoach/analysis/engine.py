"""Analysis orchestrator - decode, detect onsets, compare with the pattern."""

import logging

import numpy as np

from cajoncoach.analysis.comparison import RhythmComparison
from cajoncoach.analysis.models import ComparisonResult
from cajoncoach.analysis.onset import DetectorParams, detect_onsets
from cajoncoach.audio.loader import AudioSource, load_audio
from cajoncoach.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class AnalysisEngine:
    """Runs the full one-shot analysis of a recorded practice take.

    Errors (decode failures, invalid BPM) propagate to the caller unchanged;
    nothing is retried and no partial result is produced.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or default_settings
        self.detector_params = DetectorParams.from_settings(self.settings)

    def comparison(self, pattern: list[str] | str, bpm: float) -> RhythmComparison:
        """Build a fresh comparator for one take."""
        return RhythmComparison(
            pattern,
            bpm,
            tolerance=self.settings.timing_tolerance,
            consistency_threshold=self.settings.tempo_consistency_bpm,
            trend_threshold=self.settings.tempo_trend_bpm,
            matching=self.settings.matching,
        )

    def analyze_recording(
        self,
        source: AudioSource,
        pattern: list[str] | str,
        bpm: float,
        suffix: str = "",
    ) -> ComparisonResult:
        """Analyze an encoded take (path, bytes or binary buffer)."""
        # Validate the pattern and tempo before paying for decoding
        comparison = self.comparison(pattern, bpm)

        logger.info("Step 1: Decoding audio")
        audio, sr = load_audio(source, sr=self.settings.sample_rate, suffix=suffix)
        return self._run(audio, sr, comparison)

    def analyze_audio(
        self,
        audio: np.ndarray,
        sr: int,
        pattern: list[str] | str,
        bpm: float,
    ) -> ComparisonResult:
        """Analyze pre-loaded mono audio."""
        comparison = self.comparison(pattern, bpm)
        return self._run(audio, sr, comparison)

    def _run(self, audio: np.ndarray, sr: int, comparison: RhythmComparison) -> ComparisonResult:
        duration = len(audio) / sr
        logger.info(f"Analyzing {duration:.1f}s of audio at {sr}Hz")

        logger.info("Step 2: Onset detection")
        onsets = detect_onsets(audio, sr, self.detector_params)

        logger.info("Step 3: Rhythm comparison")
        result = comparison.compare_with_recording(onsets)
        logger.info(
            f"  accuracy={result.accuracy}% type_accuracy={result.type_accuracy}% "
            f"avg_error={result.avg_timing_error}ms "
            f"tempo={result.tempo_analysis.actual_bpm} BPM ({result.tempo_analysis.trend})"
        )
        return result
