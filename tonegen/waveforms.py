"""Per-sample waveform values for single tones and tone mixtures.

All functions take elapsed time in seconds (scalar or array) and return the
waveform value scaled by ``amplitude``. Phase is ``2 * pi * frequency * t``.
The sawtooth here is the time-domain form; sweeps use the phase-domain form
in :mod:`tonegen.sweep`.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Callable, TypeAlias

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import Waveform
from .errors import UnsupportedWaveformError

FloatArray: TypeAlias = NDArray[np.float64]
ToneFn: TypeAlias = Callable[[FloatArray, float, float], FloatArray]

TWO_OVER_PI = 2.0 / np.pi


def _phase(times: FloatArray, frequency: float) -> FloatArray:
    return 2.0 * np.pi * frequency * times


def sine_wave(times: FloatArray, frequency: float, amplitude: float) -> FloatArray:
    return np.sin(_phase(times, frequency)) * amplitude


def square_wave(times: FloatArray, frequency: float, amplitude: float) -> FloatArray:
    # sign(0) counts as +1
    return np.where(np.sin(_phase(times, frequency)) >= 0.0, 1.0, -1.0) * amplitude


def triangle_wave(times: FloatArray, frequency: float, amplitude: float) -> FloatArray:
    return TWO_OVER_PI * np.arcsin(np.sin(_phase(times, frequency))) * amplitude


def sawtooth_wave(times: FloatArray, frequency: float, amplitude: float) -> FloatArray:
    """Time-domain sawtooth; ``frequency`` must already be validated > 0."""
    offset = np.mod(times, 1.0 / frequency)
    return TWO_OVER_PI * (frequency * np.pi * offset - np.pi / 2.0) * amplitude


def noise(
    count: int,
    amplitude: float,
    rng: np.random.Generator | None = None,
) -> FloatArray:
    """Independent uniform draws on [-1, 1] scaled by ``amplitude``."""
    generator = rng if rng is not None else np.random.default_rng()
    return generator.uniform(-1.0, 1.0, count) * amplitude


TONE_FUNCTIONS: Mapping[Waveform, ToneFn] = MappingProxyType(
    {
        "sine": sine_wave,
        "square": square_wave,
        "triangle": triangle_wave,
        "sawtooth": sawtooth_wave,
    }
)


def render_waveform(
    waveform: Waveform,
    times: ArrayLike,
    frequency: float,
    amplitude: float,
    *,
    rng: np.random.Generator | None = None,
) -> FloatArray:
    """Evaluate ``waveform`` at every time in ``times``."""

    t = np.asarray(times, dtype=np.float64)
    match waveform:
        case "sine" | "square" | "triangle" | "sawtooth":
            return TONE_FUNCTIONS[waveform](t, frequency, amplitude)
        case "noise":
            return noise(t.size, amplitude, rng).reshape(t.shape)
        case _:
            raise UnsupportedWaveformError(f"Unknown waveform: {waveform!r}")


def sample(
    waveform: Waveform,
    time: float,
    frequency: float,
    amplitude: float,
    *,
    rng: np.random.Generator | None = None,
) -> float:
    """Single-sample form of :func:`render_waveform`."""

    values = render_waveform(waveform, np.array([time]), frequency, amplitude, rng=rng)
    return float(values[0])
