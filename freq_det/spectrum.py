from __future__ import annotations

from typing import Protocol

import numpy as np

from freq_det.errors import InvalidConfiguration

TRANSFORM_NAMES = ("fft", "dft")


class SpectrumTransform(Protocol):
    size: int

    def magnitudes(self, windowed: np.ndarray) -> np.ndarray: ...


def spectrum_length(size: int) -> int:
    return size // 2 + 1


def bin_frequencies(sample_rate: int, size: int) -> np.ndarray:
    # Bin k sits at k * sample_rate / size Hz.
    return np.fft.rfftfreq(size, d=1.0 / float(sample_rate))


class FftTransform:
    """One-sided magnitude spectrum via numpy's real FFT, O(N log N)."""

    def __init__(self, size: int) -> None:
        if size < 2:
            raise InvalidConfiguration("transform size must be >= 2")
        self.size = int(size)

    def magnitudes(self, windowed: np.ndarray) -> np.ndarray:
        _check_size(windowed, self.size)
        return np.abs(np.fft.rfft(windowed, n=self.size))


class DftTransform:
    """
    Reference discrete Fourier transform, O(N^2).

    Builds the full (N/2 + 1) x N twiddle matrix up front, so memory also
    grows as N^2. Meant for small block sizes and for cross-checking
    FftTransform; not a default.
    """

    def __init__(self, size: int) -> None:
        if size < 2:
            raise InvalidConfiguration("transform size must be >= 2")
        self.size = int(size)
        k = np.arange(spectrum_length(self.size), dtype=np.float64)[:, None]
        n = np.arange(self.size, dtype=np.float64)[None, :]
        twiddles = np.exp(-2j * np.pi * k * n / float(self.size))
        twiddles.setflags(write=False)
        self._twiddles = twiddles

    def magnitudes(self, windowed: np.ndarray) -> np.ndarray:
        _check_size(windowed, self.size)
        return np.abs(self._twiddles @ np.asarray(windowed, dtype=np.float64))


def make_transform(name: str, size: int) -> SpectrumTransform:
    key = name.strip().lower()
    if key == "fft":
        return FftTransform(size)
    if key == "dft":
        return DftTransform(size)
    raise InvalidConfiguration(f"Unknown transform: {name!r} (expected one of {', '.join(TRANSFORM_NAMES)})")


def _check_size(windowed: np.ndarray, size: int) -> None:
    if windowed.ndim != 1 or windowed.size != size:
        raise ValueError(f"expected a 1-D block of {size} samples, got shape {windowed.shape}")
