from __future__ import annotations

import io
from pathlib import Path

import numpy as np
import soundfile as sf  # type: ignore[import]
from pydantic import BaseModel, ConfigDict

from .errors import InvalidParameterError
from .waveforms import FloatArray


class LevelReport(BaseModel):
    peak: float
    rms: float

    model_config = ConfigDict(frozen=True, extra="forbid")


def read_wav(source: str | Path | bytes) -> tuple[FloatArray, int]:
    """Decode a WAV file (path or bytes) into ``(channels, frames)`` floats."""

    handle: str | Path | io.BytesIO = io.BytesIO(source) if isinstance(source, bytes) else source
    try:
        data, sample_rate = sf.read(handle, dtype="float64", always_2d=True)
    except RuntimeError as exc:
        raise InvalidParameterError(f"Could not decode WAV data: {exc}") from exc
    return np.ascontiguousarray(np.asarray(data, dtype=np.float64).T), int(sample_rate)


def measure_levels(buffer: FloatArray) -> LevelReport:
    """Peak and RMS across every channel of a float buffer."""

    array = np.asarray(buffer, dtype=np.float64)
    if array.size == 0:
        return LevelReport(peak=0.0, rms=0.0)
    return LevelReport(
        peak=float(np.max(np.abs(array))),
        rms=float(np.sqrt(np.mean(np.square(array)))),
    )
