"""History, pattern library and metronome endpoints."""

import io

import soundfile as sf
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from cajoncoach.api.deps import get_history_repository
from cajoncoach.api.schemas import HistoryItemResponse, PatternResponse
from cajoncoach.audio.metronome import render_click_track
from cajoncoach.config import settings
from cajoncoach.errors import HistoryError
from cajoncoach.history import HistoryRepository
from cajoncoach.patterns import PATTERNS

router = APIRouter()


@router.get("/history", response_model=list[HistoryItemResponse])
async def list_history(history: HistoryRepository = Depends(get_history_repository)):
    """Stored practice results, newest first."""
    try:
        items = history.read_all()
    except HistoryError:
        raise HTTPException(500, "Practice history is unreadable")
    return [HistoryItemResponse(**item.to_dict()) for item in items]


@router.get("/patterns", response_model=list[PatternResponse])
async def list_patterns():
    return [
        PatternResponse(id=p.id, name=p.name, sequence=list(p.sequence), bpm=p.bpm, category=p.category)
        for p in PATTERNS.values()
    ]


@router.get("/metronome")
async def metronome(
    bpm: float = Query(80.0),
    steps: int = Query(8, ge=1, le=256),
):
    """WAV click track for the given tempo."""
    bpm = max(settings.min_bpm, min(settings.max_bpm, bpm))
    audio = render_click_track(bpm, steps=steps, sr=settings.sample_rate)

    buf = io.BytesIO()
    sf.write(buf, audio, settings.sample_rate, format="WAV", subtype="PCM_16")
    return Response(content=buf.getvalue(), media_type="audio/wav")
