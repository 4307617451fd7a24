"""Tests for frame features and onset detection."""

import math

import numpy as np
import pytest

from cajoncoach.analysis.models import HitType
from cajoncoach.analysis.onset import (
    DetectorParams,
    OnsetDetector,
    classify_timbre,
    detect_onset,
    detect_onsets,
)
from cajoncoach.audio.frames import FrameFeatures, frame_features
from cajoncoach.errors import InvalidParameterError
from tests.conftest import SR, synth_strike, synth_take

PARAMS = DetectorParams(energy_threshold=0.08, min_onset_gap=0.07, centroid_cutoff_hz=1600.0)


def _frame(time: float, rms: float = 0.3, centroid: float = 500.0) -> FrameFeatures:
    return FrameFeatures(time=time, rms=rms, spectral_centroid=centroid)


# ---------------------------------------------------------------------------
# Per-frame rule
# ---------------------------------------------------------------------------

def test_quiet_frame_produces_no_onset():
    assert detect_onset(_frame(0.0, rms=0.05), None, PARAMS) is None


def test_threshold_is_exclusive():
    assert detect_onset(_frame(0.0, rms=0.08), None, PARAMS) is None
    assert detect_onset(_frame(0.0, rms=0.0801), None, PARAMS) is not None


def test_first_loud_frame_is_an_onset():
    onset = detect_onset(_frame(0.5, rms=0.2, centroid=900.0), None, PARAMS)
    assert onset is not None
    assert onset.time == 0.5
    assert onset.energy == 0.2
    assert onset.spectral_centroid == 900.0
    assert onset.type == HitType.BASS


def test_missing_or_invalid_features_are_skipped():
    assert detect_onset(None, None, PARAMS) is None
    assert detect_onset(_frame(0.0, rms=math.nan), None, PARAMS) is None
    assert detect_onset(_frame(0.0, centroid=math.inf), None, PARAMS) is None


def test_timbre_classification():
    assert classify_timbre(1599.0, 1600.0) == HitType.BASS
    assert classify_timbre(1600.0, 1600.0) == HitType.TONE
    assert classify_timbre(4000.0, 1600.0) == HitType.TONE


# ---------------------------------------------------------------------------
# Detector state
# ---------------------------------------------------------------------------

def test_spikes_exactly_one_gap_apart_give_two_onsets():
    onsets = OnsetDetector(PARAMS).detect([_frame(0.0), _frame(0.07)])
    assert [o.time for o in onsets] == [0.0, 0.07]


def test_spikes_closer_than_gap_give_one_onset():
    onsets = OnsetDetector(PARAMS).detect([_frame(0.0), _frame(0.069)])
    assert [o.time for o in onsets] == [0.0]


def test_debounce_measures_from_last_recorded_onset():
    # 0.05 is suppressed, so 0.1 is measured against 0.0 and passes
    frames = [_frame(0.0), _frame(0.05), _frame(0.1)]
    onsets = OnsetDetector(PARAMS).detect(frames)
    assert [o.time for o in onsets] == [0.0, 0.1]


def test_detector_ignores_frames_outside_start_stop():
    detector = OnsetDetector(PARAMS)
    assert detector.process(_frame(0.0)) is None

    detector.start()
    assert detector.is_running
    detector.process(_frame(0.2, centroid=3000.0))
    onsets = detector.stop()
    assert not detector.is_running
    assert detector.process(_frame(0.5)) is None

    assert len(onsets) == 1
    assert onsets[0].type == HitType.TONE
    assert detector.stop() == onsets


def test_detector_is_one_shot():
    detector = OnsetDetector(PARAMS)
    detector.detect([_frame(0.0)])
    with pytest.raises(RuntimeError):
        detector.start()


def test_no_loud_frames_returns_empty_list():
    frames = [_frame(i * 0.02, rms=0.01) for i in range(50)]
    assert OnsetDetector(PARAMS).detect(frames) == []


def test_detector_params_reject_bad_frame_size():
    with pytest.raises(InvalidParameterError):
        DetectorParams(frame_size=1000)
    with pytest.raises(InvalidParameterError):
        DetectorParams(frame_size=16)


# ---------------------------------------------------------------------------
# Frame features
# ---------------------------------------------------------------------------

def test_frame_features_cover_whole_signal():
    audio = np.zeros(1024 * 4 + 100, dtype=np.float32)
    frames = list(frame_features(audio, SR, 1024))
    # Trailing partial frame is padded, not dropped
    assert len(frames) == 5
    assert [f.time for f in frames] == pytest.approx([i * 1024 / SR for i in range(5)])
    assert all(f.rms == 0.0 for f in frames)


def test_frame_features_empty_audio():
    assert list(frame_features(np.zeros(0, dtype=np.float32), SR)) == []


def test_frame_features_centroid_tracks_brightness():
    bass = np.concatenate([synth_strike("B"), np.zeros(2048, dtype=np.float32)])
    tone = np.concatenate([synth_strike("S"), np.zeros(2048, dtype=np.float32)])
    bass_first = next(frame_features(bass, SR, 1024))
    tone_first = next(frame_features(tone, SR, 1024))

    assert bass_first.rms > 0.08
    assert tone_first.rms > 0.08
    assert bass_first.spectral_centroid < 1600
    assert tone_first.spectral_centroid > 1600


# ---------------------------------------------------------------------------
# Full pass on synthetic audio
# ---------------------------------------------------------------------------

def test_detect_onsets_on_synthetic_take():
    hits = [(0.0, "B"), (0.5, "S"), (1.0, "B"), (1.5, "S")]
    audio = synth_take(hits, duration=2.2)
    onsets = detect_onsets(audio, SR, PARAMS)

    assert len(onsets) == 4
    for onset, (t, code) in zip(onsets, hits):
        assert abs(onset.time - t) < 1024 / SR + 1e-6
        assert onset.type == HitType(code)
    times = [o.time for o in onsets]
    assert times == sorted(times)


def test_detect_onsets_silence():
    assert detect_onsets(np.zeros(SR, dtype=np.float32), SR, PARAMS) == []


def test_quiet_strikes_below_threshold_are_ignored():
    audio = synth_take([(0.0, "B"), (0.5, "S")], duration=1.0) * 0.05
    assert detect_onsets(audio, SR, PARAMS) == []
