"""Core data models for practice-take analysis."""

from dataclasses import asdict, dataclass
from enum import Enum


class HitType(str, Enum):
    """Timbre class of a strike."""
    BASS = "B"
    TONE = "S"  # tone / slap
    UNKNOWN = "?"


# Trend labels for TempoAnalysis.trend
TREND_CONSISTENT = "consistent"
TREND_ACCELERATING = "accelerating"
TREND_SLOWING = "slowing"

# Per-step status labels for ComparisonResult.pattern_analysis
STATUS_CORRECT = "correct"
STATUS_WRONG_TYPE = "wrong-type"
STATUS_MISSED = "missed"
STATUS_EXTRA = "extra"


@dataclass(frozen=True)
class Onset:
    """A detected percussive event."""
    time: float  # seconds from start of the take
    energy: float  # RMS at detection
    spectral_centroid: float  # Hz
    type: HitType = HitType.UNKNOWN


@dataclass(frozen=True)
class ExpectedHit:
    """A point on the expected rhythm grid."""
    time: float  # seconds
    type: HitType
    index: int  # position in the pattern sequence


@dataclass(frozen=True)
class TimingError:
    """An expected hit paired with its closest detected onset."""
    expected: float
    actual: float
    diff: float  # seconds, absolute
    beat: int  # ExpectedHit.index
    expected_type: HitType
    actual_type: HitType
    type_match: bool


@dataclass(frozen=True)
class TempoAnalysis:
    actual_bpm: float
    expected_bpm: float
    bpm_diff: float  # actual - expected
    trend: str = TREND_CONSISTENT
    consistent: bool = True


@dataclass(frozen=True)
class StepStatus:
    index: int
    status: str = STATUS_MISSED


@dataclass(frozen=True)
class ComparisonResult:
    """Scored comparison of a take against its expected pattern."""
    accuracy: int  # % of expected hits within tolerance
    type_accuracy: int  # % of timing matches with the right timbre
    correct_hits: int
    total_expected: int
    timing_errors: tuple[TimingError, ...]
    tempo_analysis: TempoAnalysis
    avg_timing_error: str  # integer milliseconds
    pattern_analysis: tuple[StepStatus, ...]

    def to_dict(self) -> dict:
        """JSON-ready representation (enums flattened to their codes)."""
        data = asdict(self)
        for err in data["timing_errors"]:
            err["expected_type"] = err["expected_type"].value
            err["actual_type"] = err["actual_type"].value
        return data
