from __future__ import annotations

import io
from pathlib import Path
from typing import Iterator

import numpy as np
import soundfile as sf

from freq_det.detector import FreqDetector
from freq_det.errors import SilentOrDegenerateSignal


def decode_audio(source: bytes | str | Path) -> tuple[np.ndarray, int]:
    """Decode a file (path or raw bytes) to mono float32 and its sample rate."""
    target = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else str(source)
    data, sample_rate = sf.read(target, dtype="float32", always_2d=False)
    audio = np.asarray(data, dtype=np.float32)
    if audio.ndim == 2:
        audio = np.mean(audio, axis=1, dtype=np.float32)
    if audio.size == 0:
        raise ValueError("decoded audio is empty")
    return audio, int(sample_rate)


def iter_blocks(audio: np.ndarray, size: int) -> Iterator[tuple[int, np.ndarray]]:
    # Consecutive, non-overlapping blocks; a short tail is dropped.
    for start in range(0, audio.size - size + 1, size):
        yield start, audio[start : start + size]


def detect_blocks(detector: FreqDetector, audio: np.ndarray) -> list[tuple[float, float | None]]:
    """(block start time in seconds, Hz or None when silent) per full block."""
    out: list[tuple[float, float | None]] = []
    for start, block in iter_blocks(audio, detector.window_size):
        t = start / float(detector.sample_rate)
        try:
            out.append((t, detector.detect(block)))
        except SilentOrDegenerateSignal:
            out.append((t, None))
    return out
