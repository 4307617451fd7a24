"""Application configuration."""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings with env var overrides."""

    # Audio
    sample_rate: int = 44100
    frame_size: int = 1024  # samples per analysis frame

    # Onset detection (tuned for cajón)
    onset_energy_threshold: float = 0.08  # RMS
    min_onset_gap: float = 0.07  # seconds, debounce window
    centroid_cutoff_hz: float = 1600.0  # below = bass, above = tone/slap

    # Rhythm comparison
    timing_tolerance: float = 0.12  # seconds
    tempo_consistency_bpm: float = 8.0
    tempo_trend_bpm: float = 4.0
    matching: Literal["nearest", "exclusive"] = "nearest"

    # Caller-side BPM clamp
    min_bpm: float = 50.0
    max_bpm: float = 180.0

    # Practice history
    history_path: str = "data/practice_history.json"
    history_limit: int = 50

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    max_upload_mb: int = 50

    model_config = {"env_prefix": "CAJONCOACH_"}


settings = Settings()
