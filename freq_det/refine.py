from __future__ import annotations

import numpy as np

from freq_det.errors import InvalidConfiguration

REFINEMENT_NAMES = ("parabolic_log", "parabolic", "weighted", "none")

_TINY = float(np.finfo(np.float64).tiny)


def check_method(name: str) -> str:
    key = name.strip().lower()
    if key not in REFINEMENT_NAMES:
        raise InvalidConfiguration(
            f"Unknown refinement: {name!r} (expected one of {', '.join(REFINEMENT_NAMES)})"
        )
    return key


def refine(spectrum: np.ndarray, k: int, method: str = "parabolic_log") -> float:
    """
    Fractional bin position of the peak at bin `k`.

    Bin 1 and the Nyquist bin are returned unrefined: DC is not a usable
    neighbour and nothing lies past Nyquist.
    """
    key = check_method(method)
    last = spectrum.size - 1
    if key == "none" or k <= 1 or k >= last:
        return float(k)

    a, b, c = (float(v) for v in spectrum[k - 1 : k + 2])
    if key == "weighted":
        return _weighted(k, a, b, c)
    if key == "parabolic_log":
        a, b, c = (float(np.log(max(v, _TINY))) for v in (a, b, c))
    return float(k) + _parabolic_delta(a, b, c)


def refined_hz(position: float, sample_rate: int, window_size: int) -> float:
    return float(position) * float(sample_rate) / float(window_size)


def _parabolic_delta(a: float, b: float, c: float) -> float:
    denom = a - 2.0 * b + c
    # Flat or non-concave neighbourhood: keep the bin centre.
    if not np.isfinite(denom) or denom >= -1e-12:
        return 0.0
    delta = 0.5 * (a - c) / denom
    return float(min(0.5, max(-0.5, delta)))


def _weighted(k: int, a: float, b: float, c: float) -> float:
    # Mean of the peak and its louder neighbour, weighted by magnitude.
    j, m = (k - 1, a) if a > c else (k + 1, c)
    total = b + m
    if total <= 0.0:
        return float(k)
    return (float(k) * b + float(j) * m) / total
