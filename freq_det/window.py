from __future__ import annotations

import numpy as np

from freq_det.errors import InvalidConfiguration

WINDOW_NAMES = ("hann", "hamming", "blackman", "rectangular")


def window_coefficients(name: str, size: int) -> np.ndarray:
    """
    Symmetric analysis window of `size` points.

    Hann follows w[n] = 0.5 * (1 - cos(2*pi*n/(N-1))), which is what
    np.hanning computes; the others use the numpy definitions as well.
    """
    if size < 2:
        raise InvalidConfiguration("window size must be >= 2")
    key = name.strip().lower()
    if key == "hann":
        w = np.hanning(size)
    elif key == "hamming":
        w = np.hamming(size)
    elif key == "blackman":
        w = np.blackman(size)
    elif key == "rectangular":
        w = np.ones(size)
    else:
        raise InvalidConfiguration(f"Unknown window: {name!r} (expected one of {', '.join(WINDOW_NAMES)})")
    # Cached per detector and shared between threads.
    w = np.asarray(w, dtype=np.float64)
    w.setflags(write=False)
    return w


def apply_window(samples: np.ndarray, coefficients: np.ndarray, out: np.ndarray | None = None) -> np.ndarray:
    if samples.shape != coefficients.shape:
        raise ValueError("samples and window must have the same shape")
    return np.multiply(samples, coefficients, out=out)


def coherent_gain(coefficients: np.ndarray) -> float:
    return float(np.sum(coefficients))
