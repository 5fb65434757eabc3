"""Phase-accumulating frequency sweeps.

The running phase is advanced by ``2 * pi * f / sample_rate`` and wrapped to
``[0, 2 * pi)`` on every sample, so the waveform stays continuous while the
instantaneous frequency moves from ``start_hz`` to ``end_hz``. The recurrence
is evaluated sample by sample, which makes the output independent of how the
sweep is split into chunks.
"""

from __future__ import annotations

import math
from itertools import accumulate

import numpy as np
from numpy.typing import ArrayLike

from .config import SweepCurve, Waveform
from .errors import InvalidParameterError, UnsupportedWaveformError
from .waveforms import TWO_OVER_PI, FloatArray

TWO_PI = 2.0 * math.pi


def instantaneous_frequency(
    progress: ArrayLike,
    start_hz: float,
    end_hz: float,
    curve: SweepCurve,
) -> FloatArray:
    """Map progress in [0, 1] (clamped) to the sweep frequency."""

    p = np.clip(np.asarray(progress, dtype=np.float64), 0.0, 1.0)
    match curve:
        case "linear":
            return start_hz + (end_hz - start_hz) * p
        case "log":
            if start_hz <= 0 or end_hz <= 0:
                raise InvalidParameterError("Logarithmic sweeps need start and end > 0")
            return start_hz * np.power(end_hz / start_hz, p)
        case _:
            raise InvalidParameterError(f"Unknown sweep curve: {curve!r}")


def sweep_waveform(waveform: Waveform) -> Waveform:
    return "sine" if waveform == "noise" else waveform


def phase_waveform(waveform: Waveform, phase: FloatArray, amplitude: float) -> FloatArray:
    """Waveform value from an accumulated phase in radians."""

    match waveform:
        case "sine" | "noise":
            return np.sin(phase) * amplitude
        case "square":
            return np.where(np.sin(phase) >= 0.0, 1.0, -1.0) * amplitude
        case "triangle":
            return TWO_OVER_PI * np.arcsin(np.sin(phase)) * amplitude
        case "sawtooth":
            # Phase-domain form; differs from the time-domain sawtooth
            # used by single tones and mixtures.
            return TWO_OVER_PI * (phase - np.pi) * amplitude
        case _:
            raise UnsupportedWaveformError(f"Unknown waveform: {waveform!r}")


class SweepGenerator:
    """Stateful sweep renderer; successive chunks continue the same phase."""

    def __init__(
        self,
        start_hz: float,
        end_hz: float,
        duration_seconds: float,
        sample_rate: int,
        *,
        curve: SweepCurve = "linear",
        waveform: Waveform = "sine",
        amplitude: float = 1.0,
    ) -> None:
        if duration_seconds <= 0:
            raise InvalidParameterError("duration_seconds must be > 0")
        if sample_rate <= 0:
            raise InvalidParameterError("sample_rate must be > 0")
        self.start_hz = start_hz
        self.end_hz = end_hz
        self.duration_seconds = duration_seconds
        self.sample_rate = sample_rate
        self.curve: SweepCurve = curve
        self.waveform: Waveform = sweep_waveform(waveform)
        self.amplitude = amplitude
        self.phase = 0.0
        self.position = 0

    def frequency_at(self, time: float) -> float:
        progress = time / self.duration_seconds
        return float(instantaneous_frequency(progress, self.start_hz, self.end_hz, self.curve))

    def frequencies(self, start: int, count: int) -> FloatArray:
        times = (start + np.arange(count, dtype=np.float64)) / self.sample_rate
        return instantaneous_frequency(
            times / self.duration_seconds, self.start_hz, self.end_hz, self.curve
        )

    def next_chunk(self, count: int) -> FloatArray:
        """Render the next ``count`` samples and advance the phase."""

        if count <= 0:
            return np.zeros(0, dtype=np.float64)
        increments = TWO_PI * self.frequencies(self.position, count) / self.sample_rate
        running = accumulate(
            increments.tolist(),
            lambda phase, step: (phase + step) % TWO_PI,
            initial=self.phase,
        )
        phases = np.fromiter(running, dtype=np.float64, count=count + 1)[1:]
        self.phase = float(phases[-1])
        self.position += count
        return phase_waveform(self.waveform, phases, self.amplitude)

    def reset(self) -> None:
        self.phase = 0.0
        self.position = 0
