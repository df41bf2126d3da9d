from __future__ import annotations

from freq_det.detector import Detection, FreqDetector, FreqDetectorConfig
from freq_det.errors import (
    FreqDetError,
    InvalidConfiguration,
    InvalidInputLength,
    InvalidSampleData,
    SilentOrDegenerateSignal,
)
from freq_det.notes import NoteReading, nearest_note
from freq_det.spectrum import DftTransform, FftTransform, SpectrumTransform

__version__ = "0.2.0"

__all__ = [
    "Detection",
    "DftTransform",
    "FftTransform",
    "FreqDetError",
    "FreqDetector",
    "FreqDetectorConfig",
    "InvalidConfiguration",
    "InvalidInputLength",
    "InvalidSampleData",
    "NoteReading",
    "SilentOrDegenerateSignal",
    "SpectrumTransform",
    "__version__",
    "nearest_note",
]
