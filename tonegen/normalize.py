from __future__ import annotations

import logging
from collections.abc import Iterable

import numpy as np
from numpy.typing import ArrayLike

from .waveforms import FloatArray

_LOGGER = logging.getLogger("tonegen.normalize")


def find_peak(buffers: ArrayLike | Iterable[ArrayLike]) -> float:
    """Largest absolute sample across every channel (or chunk) given."""

    if isinstance(buffers, np.ndarray):
        return float(np.max(np.abs(buffers))) if buffers.size else 0.0
    peak = 0.0
    for buffer in buffers:
        array = np.asarray(buffer, dtype=np.float64)
        if array.size:
            peak = max(peak, float(np.max(np.abs(array))))
    return peak


def normalization_gain(peak: float) -> float:
    """Scale factor that brings ``peak`` to 1.0; silence keeps unit gain."""
    if peak > 0.0:
        return 1.0 / peak
    return 1.0


def peak_normalize(buffer: ArrayLike) -> FloatArray:
    """Rescale all channels by one global factor so the peak reaches 1.0."""

    array = np.asarray(buffer, dtype=np.float64)
    peak = find_peak(array)
    if peak == 0.0:
        _LOGGER.debug("Skipping normalization of silent buffer")
        return array.copy()
    gain = normalization_gain(peak)
    _LOGGER.debug("Normalizing peak %.6f with gain %.6f", peak, gain)
    return array * gain
