from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from freq_det.errors import InvalidConfiguration, InvalidInputLength, InvalidSampleData
from freq_det.peaks import band_bins, locate_peak
from freq_det.refine import check_method, refine, refined_hz
from freq_det.spectrum import SpectrumTransform, bin_frequencies, make_transform
from freq_det.window import apply_window, coherent_gain, window_coefficients


@dataclass(frozen=True)
class FreqDetectorConfig:
    sample_rate: int = 44100
    # 2048..8192 works well: more samples, finer bins, more latency.
    window_size: int = 4096
    min_hz: float = 20.0
    max_hz: float | None = None  # None = Nyquist
    noise_floor: float = 1e-4  # peak sine amplitude, ~-80 dBFS for [-1,1]
    window: str = "hann"
    refinement: str = "parabolic_log"
    transform: str = "fft"


@dataclass(frozen=True)
class Detection:
    hz: float
    bin_index: int
    bin_hz: float
    magnitude: float


class FreqDetector:
    """
    One-shot dominant frequency estimation for fixed-size sample blocks.

    Pipeline: window -> magnitude spectrum -> peak bin in the search band ->
    parabolic refinement between bins. Window coefficients and transform
    state are built once per detector and only read afterwards, so a single
    instance can be shared between threads. Calls carry no history; any
    smoothing across blocks belongs to the caller.
    """

    def __init__(self, config: FreqDetectorConfig) -> None:
        _validate(config)
        self._cfg = config
        self._refinement = check_method(config.refinement)
        self._window = window_coefficients(config.window, config.window_size)
        self._transform: SpectrumTransform = make_transform(config.transform, config.window_size)
        self._lo, self._hi = band_bins(config.sample_rate, config.window_size, config.min_hz, config.max_hz)
        gain = coherent_gain(self._window)
        # Scales a raw peak to the amplitude of the sine that produced it. A
        # 2-point Hann window is all zeros, so every block reads as silent.
        self._amplitude_scale = 2.0 / gain if gain > 0.0 else 0.0
        self._freqs = bin_frequencies(config.sample_rate, config.window_size)
        self._freqs.setflags(write=False)
        self._local = threading.local()

    @classmethod
    def create(cls, sample_rate: int, window_size: int, **options: object) -> FreqDetector:
        try:
            config = FreqDetectorConfig(sample_rate=sample_rate, window_size=window_size, **options)  # type: ignore[arg-type]
        except TypeError as exc:
            raise InvalidConfiguration(str(exc)) from exc
        return cls(config)

    @property
    def config(self) -> FreqDetectorConfig:
        return self._cfg

    @property
    def sample_rate(self) -> int:
        return self._cfg.sample_rate

    @property
    def window_size(self) -> int:
        return self._cfg.window_size

    @property
    def bin_width_hz(self) -> float:
        return float(self._cfg.sample_rate) / float(self._cfg.window_size)

    @property
    def min_bin(self) -> int:
        return self._lo

    @property
    def max_bin(self) -> int:
        return self._hi

    def detect(self, samples: Sequence[float] | np.ndarray) -> float:
        return self.detect_detailed(samples).hz

    def detect_detailed(self, samples: Sequence[float] | np.ndarray) -> Detection:
        x = self._as_block(samples)
        windowed = apply_window(x, self._window, out=self._scratch())
        spectrum = self._transform.magnitudes(windowed)

        peak = locate_peak(
            spectrum,
            self._lo,
            self._hi,
            noise_floor=self._cfg.noise_floor,
            scale=self._amplitude_scale,
        )
        position = refine(spectrum, peak.index, self._refinement)
        return Detection(
            hz=refined_hz(position, self._cfg.sample_rate, self._cfg.window_size),
            bin_index=peak.index,
            bin_hz=float(self._freqs[peak.index]),
            magnitude=peak.magnitude,
        )

    def _as_block(self, samples: Sequence[float] | np.ndarray) -> np.ndarray:
        try:
            x = np.asarray(samples, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise InvalidSampleData(f"Samples are not numeric: {exc}") from exc
        if x.ndim != 1:
            raise InvalidSampleData(f"Samples must be one-dimensional, got shape {x.shape}")
        if x.size != self._cfg.window_size:
            raise InvalidInputLength(expected=self._cfg.window_size, passed=int(x.size))
        if not np.all(np.isfinite(x)):
            raise InvalidSampleData("NaN or infinite values in the samples")
        return x

    def _scratch(self) -> np.ndarray:
        # One windowing buffer per thread.
        buf = getattr(self._local, "buf", None)
        if buf is None:
            buf = np.empty(self._cfg.window_size, dtype=np.float64)
            self._local.buf = buf
        return buf


def _validate(config: FreqDetectorConfig) -> None:
    if not _is_int(config.sample_rate) or config.sample_rate <= 0:
        raise InvalidConfiguration(f"sample_rate must be a positive integer, got {config.sample_rate!r}")
    if not _is_int(config.window_size) or config.window_size < 2:
        raise InvalidConfiguration(f"window_size must be an integer >= 2, got {config.window_size!r}")
    if not _is_finite(config.min_hz) or config.min_hz < 0:
        raise InvalidConfiguration(f"min_hz must be >= 0, got {config.min_hz!r}")
    if config.max_hz is not None and (not _is_finite(config.max_hz) or config.max_hz <= config.min_hz):
        raise InvalidConfiguration(f"max_hz must be greater than min_hz, got {config.max_hz!r}")
    if not _is_finite(config.noise_floor) or config.noise_floor < 0:
        raise InvalidConfiguration(f"noise_floor must be >= 0, got {config.noise_floor!r}")
    for field in ("window", "refinement", "transform"):
        if not isinstance(getattr(config, field), str):
            raise InvalidConfiguration(f"{field} must be a name, got {getattr(config, field)!r}")


def _is_int(value: object) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _is_finite(value: object) -> bool:
    return isinstance(value, (int, float, np.integer, np.floating)) and math.isfinite(float(value))  # type: ignore[arg-type]
