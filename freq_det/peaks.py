from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from freq_det.errors import InvalidConfiguration, SilentOrDegenerateSignal


@dataclass(frozen=True)
class PeakBin:
    index: int
    magnitude: float


def band_bins(sample_rate: int, window_size: int, min_hz: float, max_hz: float | None) -> tuple[int, int]:
    """Inclusive bin range [lo, hi] searched for the peak. DC is never part of it."""
    nyquist_bin = window_size // 2
    bin_hz = float(sample_rate) / float(window_size)
    lo = max(1, int(math.ceil(float(min_hz) / bin_hz)))
    hi = nyquist_bin if max_hz is None else min(nyquist_bin, int(math.floor(float(max_hz) / bin_hz)))
    if lo > hi:
        raise InvalidConfiguration(
            f"No spectrum bins between {min_hz} Hz and {max_hz if max_hz is not None else 'Nyquist'} "
            f"(bin width {bin_hz:.3f} Hz)"
        )
    return lo, hi


def locate_peak(
    spectrum: np.ndarray,
    lo: int,
    hi: int,
    *,
    noise_floor: float,
    scale: float = 1.0,
) -> PeakBin:
    if lo < 1 or hi >= spectrum.size or lo > hi:
        raise ValueError(f"bin range [{lo}, {hi}] outside spectrum of {spectrum.size} bins")

    # argmax keeps the first index on exact ties.
    band = spectrum[lo : hi + 1]
    k = int(np.argmax(band)) + lo
    magnitude = float(spectrum[k])
    if not math.isfinite(magnitude):
        raise SilentOrDegenerateSignal("Spectrum peak is not finite")
    if magnitude * scale <= noise_floor:
        raise SilentOrDegenerateSignal(
            f"Peak amplitude {magnitude * scale:.3g} is at or below the noise floor {noise_floor:.3g}"
        )
    return PeakBin(index=k, magnitude=magnitude)
