"""Shared test fixtures for practice-take analysis tests."""

import io

import numpy as np
import pytest
import soundfile as sf
from fastapi.testclient import TestClient

from cajoncoach.analysis.models import HitType, Onset
from cajoncoach.api.deps import get_history_repository
from cajoncoach.history import InMemoryHistoryRepository
from cajoncoach.main import app

SR = 44100

BASIC_PATTERN = ["B", "·", "S", "·", "B", "·", "S", "·"]

# Strike timbres: low sine for bass, high sine for tone/slap
_BASS_FREQ = 150.0
_TONE_FREQ = 3500.0


@pytest.fixture
def history_repo():
    return InMemoryHistoryRepository()


@pytest.fixture
def client(history_repo):
    """FastAPI test client with an in-memory practice history."""
    app.dependency_overrides[get_history_repository] = lambda: history_repo
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_onsets(pairs: list[tuple[float, str]]) -> list[Onset]:
    """Build onsets from (time, code) pairs, code "B" or "S"."""
    return [
        Onset(time=t, energy=0.3, spectral_centroid=400.0 if code == "B" else 3000.0, type=HitType(code))
        for t, code in pairs
    ]


def synth_strike(kind: str, sr: int = SR, amplitude: float = 0.8, duration: float = 0.12) -> np.ndarray:
    """A single decaying strike with a short attack ramp.

    Energy falls well under the detection threshold before the debounce
    window ends, so one strike yields one onset.
    """
    n = int(duration * sr)
    t = np.arange(n) / sr
    freq = _BASS_FREQ if kind == "B" else _TONE_FREQ
    strike = amplitude * np.sin(2 * np.pi * freq * t) * np.exp(-t * 60.0)

    attack = int(0.004 * sr)
    strike[:attack] *= 0.5 - 0.5 * np.cos(np.linspace(0, np.pi, attack))
    return strike.astype(np.float32)


def synth_take(
    hits: list[tuple[float, str]],
    duration: float,
    sr: int = SR,
) -> np.ndarray:
    """Render a take with strikes at the given (time, code) positions."""
    audio = np.zeros(int(duration * sr), dtype=np.float32)
    for time, kind in hits:
        strike = synth_strike(kind, sr)
        start = int(round(time * sr))
        end = min(start + len(strike), len(audio))
        if end > start:
            audio[start:end] += strike[: end - start]
    return audio


def pattern_hits(pattern: list[str], bpm: float, offset: float = 0.0) -> list[tuple[float, str]]:
    """Grid-exact strike positions for a pattern (rests skipped)."""
    step = (60.0 / bpm) / 2
    return [(i * step + offset, code) for i, code in enumerate(pattern) if code in ("B", "S")]


def to_wav_bytes(audio: np.ndarray, sr: int = SR) -> bytes:
    buf = io.BytesIO()
    sf.write(buf, audio, sr, format="WAV", subtype="PCM_16")
    return buf.getvalue()


@pytest.fixture
def basic_take():
    """The basic cajón pattern at 80 BPM, played slightly late (10ms)."""
    return synth_take(pattern_hits(BASIC_PATTERN, 80, offset=0.01), duration=3.5)
