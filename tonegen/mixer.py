from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np
from numpy.typing import ArrayLike

from .config import Waveform
from .errors import InvalidParameterError
from .waveforms import FloatArray, render_waveform


def tone_amplitude(amplitude: float, tone_count: int) -> float:
    """Per-tone amplitude that keeps the mixture's power independent of N."""
    if tone_count < 1:
        raise InvalidParameterError("A tone mixture needs at least one frequency")
    return amplitude / math.sqrt(tone_count)


def mixture_waveform(waveform: Waveform) -> Waveform:
    # Noise does not combine as discrete tones; mixtures fall back to sine.
    return "sine" if waveform == "noise" else waveform


def mix_tones(
    waveform: Waveform,
    times: ArrayLike,
    frequencies: Sequence[float],
    amplitude: float,
) -> FloatArray:
    """Sum one tone per frequency at ``amplitude / sqrt(len(frequencies))`` each."""

    t = np.asarray(times, dtype=np.float64)
    individual = tone_amplitude(amplitude, len(frequencies))
    effective = mixture_waveform(waveform)
    mixed = np.zeros_like(t)
    for frequency in frequencies:
        mixed += render_waveform(effective, t, frequency, individual)
    return mixed
