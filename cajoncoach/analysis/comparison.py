"""Scoring a detected onset sequence against an expected rhythm pattern."""

from __future__ import annotations

import logging
import math
import numbers

from cajoncoach.analysis.models import (
    STATUS_CORRECT,
    STATUS_EXTRA,
    STATUS_MISSED,
    STATUS_WRONG_TYPE,
    ComparisonResult,
    ExpectedHit,
    Onset,
    StepStatus,
    TimingError,
)
from cajoncoach.analysis.tempo import analyze_tempo_consistency
from cajoncoach.errors import InvalidParameterError
from cajoncoach.patterns import parse_pattern

logger = logging.getLogger(__name__)

MATCHING_NEAREST = "nearest"  # every expected hit takes its nearest onset, onsets may be reused
MATCHING_EXCLUSIVE = "exclusive"  # greedy one-to-one, an onset is claimed at most once

_TIME_EPS = 1e-9


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def find_closest_onset(
    target_time: float,
    onsets: list[Onset],
    exclude: set[int] | None = None,
) -> int | None:
    """Index of the onset nearest to *target_time* (first one wins ties)."""
    best = None
    min_diff = math.inf
    for i, onset in enumerate(onsets):
        if exclude and i in exclude:
            continue
        diff = abs(onset.time - target_time)
        if diff < min_diff:
            min_diff = diff
            best = i
    return best


class RhythmComparison:
    """Compare a recorded take with a pattern played at a given tempo.

    Each pattern step is one eighth-note slot, so a step lasts
    ``(60 / bpm) / 2`` seconds.
    """

    def __init__(
        self,
        pattern: list[str] | str,
        bpm: float,
        tolerance: float = 0.12,
        consistency_threshold: float = 8.0,
        trend_threshold: float = 4.0,
        matching: str = MATCHING_NEAREST,
    ):
        if isinstance(bpm, bool) or not isinstance(bpm, numbers.Real) or not math.isfinite(bpm) or bpm <= 0:
            raise InvalidParameterError(f"BPM must be a positive number, got {bpm!r}")
        if not math.isfinite(tolerance) or tolerance < 0:
            raise InvalidParameterError(f"tolerance must be a finite number >= 0, got {tolerance!r}")
        if matching not in (MATCHING_NEAREST, MATCHING_EXCLUSIVE):
            raise InvalidParameterError(f"Unknown matching strategy: {matching!r}")

        self.steps = parse_pattern(pattern)
        self.bpm = float(bpm)
        self.tolerance = tolerance
        self.consistency_threshold = consistency_threshold
        self.trend_threshold = trend_threshold
        self.matching = matching

    @property
    def beat_duration(self) -> float:
        return 60.0 / self.bpm

    @property
    def step_duration(self) -> float:
        return self.beat_duration / 2

    def step_time(self, index: int) -> float:
        return index * self.step_duration

    def get_expected_timestamps(self) -> list[ExpectedHit]:
        """Grid points for every non-rest step, in pattern order."""
        return [
            ExpectedHit(time=self.step_time(i), type=hit_type, index=i)
            for i, hit_type in enumerate(self.steps)
            if hit_type is not None
        ]

    def compare_with_recording(self, detected_onsets: list[Onset]) -> ComparisonResult:
        expected = self.get_expected_timestamps()
        onsets = list(detected_onsets)

        correct_hits = 0
        correct_types = 0
        timing_errors: list[TimingError] = []
        statuses = [STATUS_MISSED] * len(self.steps)
        claimed: set[int] = set()

        for hit in expected:
            exclude = claimed if self.matching == MATCHING_EXCLUSIVE else None
            idx = find_closest_onset(hit.time, onsets, exclude)
            if idx is None:
                continue

            closest = onsets[idx]
            diff = abs(closest.time - hit.time)
            type_match = closest.type == hit.type

            if diff <= self.tolerance + _TIME_EPS:
                correct_hits += 1
                claimed.add(idx)
                if type_match:
                    correct_types += 1
                    statuses[hit.index] = STATUS_CORRECT
                else:
                    statuses[hit.index] = STATUS_WRONG_TYPE

            # Recorded even when out of tolerance, for timeline display
            timing_errors.append(TimingError(
                expected=hit.time,
                actual=closest.time,
                diff=diff,
                beat=hit.index,
                expected_type=hit.type,
                actual_type=closest.type,
                type_match=type_match,
            ))

        self._mark_extra_hits(statuses, onsets, claimed)

        total = len(expected)
        accuracy = _round_half_up(correct_hits / total * 100) if total > 0 else 0
        type_accuracy = _round_half_up(correct_types / correct_hits * 100) if correct_hits > 0 else 0

        tempo = analyze_tempo_consistency(
            onsets,
            self.bpm,
            consistency_threshold=self.consistency_threshold,
            trend_threshold=self.trend_threshold,
        )

        logger.info(
            f"Compared {len(onsets)} onsets with {total} expected hits at {self.bpm:g} BPM: "
            f"{correct_hits} on time, {correct_types} right timbre"
        )

        return ComparisonResult(
            accuracy=accuracy,
            type_accuracy=type_accuracy,
            correct_hits=correct_hits,
            total_expected=total,
            timing_errors=tuple(timing_errors),
            tempo_analysis=tempo,
            avg_timing_error=self.calculate_avg_error(timing_errors),
            pattern_analysis=tuple(StepStatus(index=i, status=s) for i, s in enumerate(statuses)),
        )

    def _mark_extra_hits(self, statuses: list[str], onsets: list[Onset], claimed: set[int]) -> None:
        """Flag rest steps where an unclaimed strike landed on the slot."""
        for i, hit_type in enumerate(self.steps):
            if hit_type is not None:
                continue
            slot_time = self.step_time(i)
            for j, onset in enumerate(onsets):
                if j not in claimed and abs(onset.time - slot_time) <= self.tolerance + _TIME_EPS:
                    statuses[i] = STATUS_EXTRA
                    break

    @staticmethod
    def calculate_avg_error(errors: list[TimingError]) -> str:
        """Mean absolute timing error in whole milliseconds, as a string."""
        if not errors:
            return "0"
        mean_diff = sum(e.diff for e in errors) / len(errors)
        return str(_round_half_up(mean_diff * 1000))


def compare(
    pattern: list[str] | str,
    bpm: float,
    onsets: list[Onset],
    **kwargs,
) -> ComparisonResult:
    """Shortcut for ``RhythmComparison(pattern, bpm, **kwargs).compare_with_recording(onsets)``."""
    return RhythmComparison(pattern, bpm, **kwargs).compare_with_recording(onsets)
