"""Tempo consistency and trend from detected onsets."""

import numpy as np

from cajoncoach.analysis.models import (
    TREND_ACCELERATING,
    TREND_CONSISTENT,
    TREND_SLOWING,
    Onset,
    TempoAnalysis,
)

# Inter-onset intervals are measured between eighth-note slots,
# so two intervals make one quarter-note beat.
SLOTS_PER_BEAT = 2


def interval_to_bpm(interval: float) -> float:
    if interval <= 0:
        return 0.0
    return 60.0 / (interval * SLOTS_PER_BEAT)


def tempo_trend(intervals: np.ndarray, threshold_bpm: float = 4.0) -> str:
    """Compare the tempo of the first half of the take with the second half.

    Needs at least 3 intervals; shorter takes are reported as consistent.
    """
    if len(intervals) < 3:
        return TREND_CONSISTENT

    half = len(intervals) // 2
    first_bpm = interval_to_bpm(float(np.mean(intervals[:half])))
    second_bpm = interval_to_bpm(float(np.mean(intervals[half:])))
    change = second_bpm - first_bpm

    if change >= threshold_bpm:
        return TREND_ACCELERATING
    if change <= -threshold_bpm:
        return TREND_SLOWING
    return TREND_CONSISTENT


def analyze_tempo_consistency(
    onsets: list[Onset],
    expected_bpm: float,
    consistency_threshold: float = 8.0,
    trend_threshold: float = 4.0,
) -> TempoAnalysis:
    """Estimate the played tempo from successive inter-onset intervals."""
    if len(onsets) < 2:
        return TempoAnalysis(
            actual_bpm=0.0,
            expected_bpm=expected_bpm,
            bpm_diff=0.0,
            trend=TREND_CONSISTENT,
            consistent=True,
        )

    times = np.array([o.time for o in onsets], dtype=np.float64)
    intervals = np.diff(times)
    actual_bpm = interval_to_bpm(float(np.mean(intervals)))
    bpm_diff = actual_bpm - expected_bpm

    return TempoAnalysis(
        actual_bpm=round(actual_bpm, 1),
        expected_bpm=expected_bpm,
        bpm_diff=round(bpm_diff, 1),
        trend=tempo_trend(intervals, trend_threshold),
        consistent=abs(bpm_diff) < consistency_threshold,
    )
