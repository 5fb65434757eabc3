from __future__ import annotations

import numpy as np
import pytest

from tonegen.normalize import find_peak, normalization_gain, peak_normalize


def test_peak_normalize_reaches_unity() -> None:
    buffer = np.array([[0.1, -0.25, 0.2], [0.05, 0.1, -0.125]])
    normalized = peak_normalize(buffer)
    assert float(np.max(np.abs(normalized))) == pytest.approx(1.0, abs=1e-6)


def test_peak_normalize_preserves_channel_balance() -> None:
    buffer = np.array([[0.2, -0.4], [0.1, 0.05]])
    normalized = peak_normalize(buffer)
    assert np.allclose(normalized, buffer * 2.5)


def test_silence_is_left_unchanged() -> None:
    buffer = np.zeros((2, 16))
    normalized = peak_normalize(buffer)
    assert np.array_equal(normalized, buffer)
    assert normalized is not buffer


def test_find_peak_over_chunks() -> None:
    chunks = [np.array([0.1, -0.3]), np.array([]), np.array([0.2, -0.7, 0.5])]
    assert find_peak(chunks) == pytest.approx(0.7)
    assert find_peak(np.array([])) == 0.0


def test_normalization_gain() -> None:
    assert normalization_gain(0.5) == pytest.approx(2.0)
    assert normalization_gain(0.0) == 1.0
