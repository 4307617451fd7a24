"""Pydantic response models for API."""

from pydantic import BaseModel

from cajoncoach.analysis.models import ComparisonResult


class TimingErrorResponse(BaseModel):
    expected: float
    actual: float
    diff: float
    beat: int
    expected_type: str
    actual_type: str
    type_match: bool


class TempoAnalysisResponse(BaseModel):
    actual_bpm: float
    expected_bpm: float
    bpm_diff: float
    trend: str = "consistent"
    consistent: bool = True


class StepStatusResponse(BaseModel):
    index: int
    status: str


class ComparisonResponse(BaseModel):
    accuracy: int
    type_accuracy: int
    correct_hits: int
    total_expected: int
    timing_errors: list[TimingErrorResponse] = []
    tempo_analysis: TempoAnalysisResponse
    avg_timing_error: str = "0"
    pattern_analysis: list[StepStatusResponse] = []


class AnalyzeResponse(BaseModel):
    rhythm_name: str
    bpm: float
    pattern: list[str]
    result: ComparisonResponse
    feedback: str | None = None
    history_id: str | None = None


class HistoryItemResponse(BaseModel):
    id: str
    rhythm_name: str
    bpm: float
    timestamp: int
    result: ComparisonResponse


class PatternResponse(BaseModel):
    id: str
    name: str
    sequence: list[str]
    bpm: float
    category: str


def result_to_response(result: ComparisonResult) -> ComparisonResponse:
    """Convert ComparisonResult to its response model."""
    return ComparisonResponse.model_validate(result.to_dict())
