from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from freq_det import (
    FreqDetector,
    FreqDetectorConfig,
    InvalidConfiguration,
    InvalidInputLength,
    InvalidSampleData,
    SilentOrDegenerateSignal,
)


def _sine(freq: float, sample_rate: int, n: int, amp: float = 1.0) -> np.ndarray:
    t = np.arange(n, dtype=np.float64) / sample_rate
    return amp * np.sin(2 * np.pi * freq * t)


def test_detects_a440_within_half_hz() -> None:
    detector = FreqDetector.create(44100, 4096)
    hz = detector.detect(_sine(440.0, 44100, 4096))
    assert abs(hz - 440.0) < 0.5


def test_detects_a440_next_to_low_tones() -> None:
    wave = _sine(440.0, 44100, 4096) + _sine(100.0, 44100, 4096, 0.5) + _sine(120.0, 44100, 4096, 0.5)
    detector = FreqDetector.create(44100, 4096)
    assert round(detector.detect(wave)) == 440


@pytest.mark.parametrize("freq", [30.0, 100.0, 261.63, 1000.0, 2000.0, 7040.0])
def test_pure_sines_within_tolerance(freq: float) -> None:
    sample_rate, n = 44100, 8192
    detector = FreqDetector.create(sample_rate, n)
    hz = detector.detect(_sine(freq, sample_rate, n, amp=0.4))
    tol = max(0.01 * freq, 0.5 * sample_rate / n)
    assert abs(hz - freq) <= tol


def test_refinement_beats_bin_center() -> None:
    detector = FreqDetector.create(44100, 4096)
    result = detector.detect_detailed(_sine(443.0, 44100, 4096))
    assert abs(result.hz - 443.0) < abs(result.bin_hz - 443.0)
    assert result.bin_index == 41
    assert result.bin_hz == pytest.approx(41 * 44100 / 4096)
    assert result.magnitude > 0


def test_all_zero_block_is_silent() -> None:
    detector = FreqDetector.create(8000, 8)
    with pytest.raises(SilentOrDegenerateSignal):
        detector.detect([0.0] * 8)


def test_quiet_block_respects_noise_floor() -> None:
    quiet = _sine(440.0, 44100, 4096, amp=1e-6)
    with pytest.raises(SilentOrDegenerateSignal):
        FreqDetector.create(44100, 4096).detect(quiet)

    sensitive = FreqDetector.create(44100, 4096, noise_floor=0.0)
    assert abs(sensitive.detect(quiet) - 440.0) < 0.5


@pytest.mark.parametrize("length", [1000, 1023, 1025, 2048])
def test_length_mismatch(length: int) -> None:
    detector = FreqDetector.create(44100, 1024)
    with pytest.raises(InvalidInputLength) as info:
        detector.detect(np.zeros(length))
    assert info.value.expected == 1024
    assert info.value.passed == length


@pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
def test_non_finite_samples(bad: float) -> None:
    block = _sine(440.0, 44100, 1024)
    block[10] = bad
    with pytest.raises(InvalidSampleData):
        FreqDetector.create(44100, 1024).detect(block)


def test_two_dimensional_input_rejected() -> None:
    with pytest.raises(InvalidSampleData):
        FreqDetector.create(8000, 8).detect(np.ones((2, 4)))


@pytest.mark.parametrize(
    ("sample_rate", "window_size"),
    [(0, 1024), (-44100, 1024), (44100, 0), (44100, 1), (44100, -4), (44100, 1024.0), (44100.5, 1024)],
)
def test_invalid_configuration(sample_rate, window_size) -> None:
    with pytest.raises(InvalidConfiguration):
        FreqDetector.create(sample_rate, window_size)


@pytest.mark.parametrize(
    "options",
    [
        {"window": "kaiser"},
        {"refinement": "cubic"},
        {"transform": "wavelet"},
        {"min_hz": -1.0},
        {"min_hz": 500.0, "max_hz": 400.0},
        {"noise_floor": -0.1},
        {"noise_floor": float("nan")},
        {"hop_size": 512},
    ],
)
def test_invalid_options(options: dict) -> None:
    with pytest.raises(InvalidConfiguration):
        FreqDetector.create(44100, 4096, **options)


def test_band_without_bins_rejected() -> None:
    # 1000 Hz bins: nothing between 3500 and 3900 Hz.
    with pytest.raises(InvalidConfiguration):
        FreqDetector.create(8000, 8, min_hz=3500.0, max_hz=3900.0)


def test_max_hz_limits_search() -> None:
    wave = _sine(440.0, 44100, 4096) + _sine(3000.0, 44100, 4096, amp=2.0)
    assert abs(FreqDetector.create(44100, 4096).detect(wave) - 3000.0) < 1.0
    limited = FreqDetector.create(44100, 4096, max_hz=1000.0)
    assert abs(limited.detect(wave) - 440.0) < 0.5


def test_min_hz_ignores_rumble() -> None:
    wave = _sine(440.0, 44100, 8192) + _sine(12.0, 44100, 8192, amp=3.0)
    detector = FreqDetector(FreqDetectorConfig(sample_rate=44100, window_size=8192, min_hz=50.0))
    assert detector.min_bin == 10
    assert abs(detector.detect(wave) - 440.0) < 0.5


def test_smallest_window() -> None:
    assert FreqDetector.create(8000, 2).max_bin == 1
    # A 2-point Hann window zeroes everything.
    with pytest.raises(SilentOrDegenerateSignal):
        FreqDetector.create(8000, 2).detect([1.0, -1.0])
    rect = FreqDetector.create(8000, 2, window="rectangular")
    assert rect.detect([1.0, -1.0]) == 4000.0


def test_repeated_calls_are_identical() -> None:
    detector = FreqDetector.create(44100, 2048)
    block = _sine(523.25, 44100, 2048, amp=0.7)
    first = detector.detect(block)
    assert detector.detect(block) == first
    assert detector.detect(block.tolist()) == first


def test_input_block_is_not_modified() -> None:
    block = _sine(440.0, 44100, 1024)
    before = block.copy()
    FreqDetector.create(44100, 1024).detect(block)
    assert np.array_equal(block, before)


def test_shared_detector_across_threads() -> None:
    detector = FreqDetector.create(44100, 4096)
    blocks = [_sine(f, 44100, 4096, amp=0.5) for f in (220.0, 330.0, 440.0, 880.0)] * 8
    expected = [detector.detect(b) for b in blocks]
    with ThreadPoolExecutor(max_workers=4) as pool:
        got = list(pool.map(detector.detect, blocks))
    assert got == expected


def test_reference_transform_matches_fast_path() -> None:
    block = _sine(1234.0, 16000, 256, amp=0.8)
    fast = FreqDetector.create(16000, 256)
    slow = FreqDetector.create(16000, 256, transform="dft")
    assert slow.detect(block) == pytest.approx(fast.detect(block), abs=1e-6)


@pytest.mark.parametrize("window", ["hann", "hamming", "blackman", "rectangular"])
def test_other_windows(window: str) -> None:
    detector = FreqDetector.create(44100, 4096, window=window)
    assert abs(detector.detect(_sine(440.0, 44100, 4096)) - 440.0) <= 0.5 * 44100 / 4096


@pytest.mark.parametrize("method", ["parabolic_log", "parabolic", "weighted", "none"])
def test_refinement_methods(method: str) -> None:
    detector = FreqDetector.create(44100, 4096, refinement=method)
    assert abs(detector.detect(_sine(440.0, 44100, 4096)) - 440.0) <= 0.5 * 44100 / 4096


def test_config_is_exposed() -> None:
    detector = FreqDetector.create(48000, 4800, min_hz=40.0)
    assert detector.config.min_hz == 40.0
    assert detector.sample_rate == 48000
    assert detector.window_size == 4800
    assert detector.bin_width_hz == 10.0
    assert (detector.min_bin, detector.max_bin) == (4, 2400)


def test_band_edge_peak_refines_with_out_of_band_neighbour() -> None:
    # 490 Hz sits below the band; the in-band maximum is the first bin and its
    # louder out-of-band neighbour pulls the estimate down by the full half bin.
    detector = FreqDetector.create(44100, 4096, min_hz=500.0)
    result = detector.detect_detailed(_sine(490.0, 44100, 4096))
    assert result.bin_index == detector.min_bin == 47
    assert result.hz == pytest.approx((detector.min_bin - 0.5) * detector.bin_width_hz)
    assert result.hz >= 500.0 - 0.5 * detector.bin_width_hz
