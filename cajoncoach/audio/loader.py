"""Audio decoding utilities."""

from __future__ import annotations

import logging
import os
import tempfile
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Union

import librosa
import numpy as np

from cajoncoach.errors import DecodeError

logger = logging.getLogger(__name__)

AudioSource = Union[str, Path, bytes, BytesIO, BinaryIO]


def load_audio(
    source: AudioSource,
    sr: int | None = 44100,
    suffix: str = "",
) -> tuple[np.ndarray, int]:
    """Decode an audio file, byte blob or binary buffer into mono float audio.

    Parameters
    ----------
    source:
        Path to an audio file, the raw encoded bytes of a take, or a
        binary file-like object holding them.
    sr:
        Target sample rate. ``None`` keeps the native rate.
    suffix:
        File extension hint (e.g. ``".webm"``) used when spooling bytes to
        disk, so the decoder can pick the right container.

    Returns
    -------
    tuple[np.ndarray, int]
        A tuple of (audio_array, sample_rate).

    Raises
    ------
    DecodeError
        If the input is empty or cannot be decoded.
    """
    if isinstance(source, (str, Path)):
        return _decode(str(source), sr)

    data = source if isinstance(source, bytes) else source.read()
    if not data:
        raise DecodeError("Audio buffer is empty")

    # Write to temp file (librosa needs a file path for compressed containers)
    with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
        tmp.write(data)
        tmp_path = tmp.name
    try:
        return _decode(tmp_path, sr)
    finally:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass


def _decode(path: str, sr: int | None) -> tuple[np.ndarray, int]:
    try:
        audio, sample_rate = librosa.load(path, sr=sr, mono=True)
    except Exception as e:
        raise DecodeError(f"Could not decode audio: {e}") from e

    if audio.size == 0:
        raise DecodeError("Decoded audio contains no samples")

    logger.debug(f"Decoded {len(audio) / sample_rate:.2f}s of audio at {sample_rate}Hz")
    return audio, int(sample_rate)
