"""Boundary types for the remote collaborators (session upload, coaching feedback).

Concrete backends are injected by the caller; only the DTOs and the
single-method interfaces live here.
"""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, Field

from cajoncoach.analysis.models import ComparisonResult


class PracticeSessionUpload(BaseModel):
    """Practice session summary as stored by a remote backend."""
    rhythm_name: str = Field(min_length=1)
    accuracy: int = Field(ge=0, le=100)
    type_accuracy: int = Field(ge=0, le=100)
    bpm: float = Field(gt=0)
    avg_offset_ms: int = Field(ge=0)

    @classmethod
    def from_result(cls, result: ComparisonResult, rhythm_name: str, bpm: float) -> "PracticeSessionUpload":
        return cls(
            rhythm_name=rhythm_name,
            accuracy=result.accuracy,
            type_accuracy=result.type_accuracy,
            bpm=bpm,
            avg_offset_ms=int(result.avg_timing_error),
        )


class UploadOutcome(BaseModel):
    success: bool
    url: str | None = None
    error: str | None = None


class FeedbackStats(BaseModel):
    """Summary scalars handed to a feedback generator."""
    pattern: str
    accuracy: int
    actual_bpm: float
    trend: str

    @classmethod
    def from_result(cls, result: ComparisonResult, pattern: str) -> "FeedbackStats":
        return cls(
            pattern=pattern,
            accuracy=result.accuracy,
            actual_bpm=result.tempo_analysis.actual_bpm,
            trend=result.tempo_analysis.trend,
        )


class SessionUploader(Protocol):
    def upload_session(self, audio: bytes, data: PracticeSessionUpload) -> UploadOutcome: ...


class FeedbackProvider(Protocol):
    def get_rhythm_feedback(self, stats: FeedbackStats) -> str: ...


FALLBACK_FEEDBACK = (
    "Great session! Your touch felt solid. "
    "Keep practicing to master the dynamics of this groove."
)


class StaticFeedbackProvider:
    """Feedback provider used when no coaching backend is configured."""

    def __init__(self, message: str = FALLBACK_FEEDBACK):
        self.message = message

    def get_rhythm_feedback(self, stats: FeedbackStats) -> str:
        return self.message
