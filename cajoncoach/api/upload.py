"""Practice-take upload endpoint."""

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from cajoncoach.analysis.engine import AnalysisEngine
from cajoncoach.api.deps import get_feedback_provider, get_history_repository
from cajoncoach.api.schemas import AnalyzeResponse, result_to_response
from cajoncoach.config import settings
from cajoncoach.errors import DecodeError, HistoryError, InvalidParameterError
from cajoncoach.history import HistoryRepository, PracticeHistoryItem
from cajoncoach.patterns import PATTERNS
from cajoncoach.services import FeedbackProvider, FeedbackStats

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_EXTENSIONS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".aac", ".webm"}


def clamp_bpm(bpm: float) -> float:
    """Keep the tempo inside the practice range."""
    return max(settings.min_bpm, min(settings.max_bpm, bpm))


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_take(
    file: UploadFile = File(...),
    pattern: str | None = Form(None),
    pattern_id: str | None = Form(None),
    bpm: float | None = Form(None),
    rhythm_name: str | None = Form(None),
    save: bool = Form(False),
    feedback: bool = Form(False),
    history: HistoryRepository = Depends(get_history_repository),
    feedback_provider: FeedbackProvider = Depends(get_feedback_provider),
):
    """Score an uploaded practice take against a rhythm pattern."""
    # Resolve the pattern: explicit codes win over a library id
    if pattern:
        sequence = pattern.replace(",", " ").split()
        name = rhythm_name or "Custom"
        default_bpm = None
    elif pattern_id:
        if pattern_id not in PATTERNS:
            raise HTTPException(404, f"Unknown pattern: {pattern_id}")
        library_pattern = PATTERNS[pattern_id]
        sequence = list(library_pattern.sequence)
        name = rhythm_name or library_pattern.name
        default_bpm = library_pattern.tempo()
    else:
        raise HTTPException(400, "Provide either 'pattern' or 'pattern_id'")

    if bpm is None:
        if default_bpm is None:
            raise HTTPException(400, "Missing 'bpm'")
        bpm = default_bpm
    bpm = clamp_bpm(bpm)

    # Validate file
    suffix = ""
    if file.filename and "." in file.filename:
        suffix = "." + file.filename.rsplit(".", 1)[-1].lower()
        if suffix not in ALLOWED_EXTENSIONS:
            raise HTTPException(400, f"Unsupported format. Use: {', '.join(sorted(ALLOWED_EXTENSIONS))}")

    content = await file.read()
    if len(content) > settings.max_upload_mb * 1024 * 1024:
        raise HTTPException(400, f"File too large (max {settings.max_upload_mb} MB)")

    engine = AnalysisEngine()
    try:
        result = engine.analyze_recording(content, sequence, bpm, suffix=suffix)
    except InvalidParameterError as e:
        raise HTTPException(400, str(e))
    except DecodeError:
        logger.exception("Could not decode uploaded take")
        raise HTTPException(422, "Could not decode audio")
    except Exception:
        logger.exception("Analysis failed")
        raise HTTPException(500, "Analysis failed")

    history_id = None
    if save:
        item = PracticeHistoryItem.from_result(result, rhythm_name=name, bpm=bpm)
        try:
            history.append(item)
            history_id = item.id
        except HistoryError:
            logger.warning(f"Practice history is unreadable, returning result for '{name}' unsaved")

    feedback_text = None
    if feedback:
        feedback_text = feedback_provider.get_rhythm_feedback(FeedbackStats.from_result(result, name))

    return AnalyzeResponse(
        rhythm_name=name,
        bpm=bpm,
        pattern=sequence,
        result=result_to_response(result),
        feedback=feedback_text,
        history_id=history_id,
    )
