from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import InvalidParameterError, UnsupportedModeError, UnsupportedWaveformError

_LOGGER = logging.getLogger("tonegen.config")

Mode = Literal["single", "multi", "sweep"]
Waveform = Literal["sine", "square", "triangle", "sawtooth", "noise"]
SweepCurve = Literal["linear", "log"]
BitDepth = Literal[16, 24, 32]

MODES: tuple[Mode, ...] = get_args(Mode)
WAVEFORMS: tuple[Waveform, ...] = get_args(Waveform)
SWEEP_CURVES: tuple[SweepCurve, ...] = get_args(SweepCurve)
BIT_DEPTHS: tuple[BitDepth, ...] = get_args(BitDepth)

DEFAULT_SAMPLE_RATE = 48_000
DEFAULT_AMPLITUDE = 0.7
DEFAULT_DURATION_SECONDS = 10.0
DEFAULT_FREQUENCY_HZ = 1000.0
DEFAULT_BIT_DEPTH: BitDepth = 16
DEFAULT_CHUNK_FRAMES = 65_536

# RIFF size fields are unsigned 32-bit; ChunkSize = 36 + dataSize.
MAX_DATA_SIZE = 0xFFFFFFFF - 36
MAX_BLOCK_ALIGN = 0xFFFF
MAX_SAMPLE_RATE = 0xFFFFFFFF


class SynthesisRequest(BaseModel):
    """Parametric description of one tone, tone mixture or sweep to render.

    Only the fields of the selected ``mode`` are consulted: ``frequency_hz``
    for single tones, ``frequencies_hz`` for mixtures, and ``start_hz``,
    ``end_hz`` and ``curve`` for sweeps.

    Constructing the model directly raises ``pydantic.ValidationError`` on bad
    input; use :func:`parse_request` to get the typed ``tonegen`` errors.
    """

    mode: Mode = "single"
    waveform: Waveform = "sine"
    amplitude: float = Field(default=DEFAULT_AMPLITUDE, gt=0.0, le=1.0)
    duration_seconds: float = Field(default=DEFAULT_DURATION_SECONDS, gt=0.0)
    sample_rate: int = Field(default=DEFAULT_SAMPLE_RATE, gt=0, le=MAX_SAMPLE_RATE)
    channel_count: int = Field(default=1, ge=1)
    bit_depth: BitDepth = DEFAULT_BIT_DEPTH
    normalize: bool = False
    frequency_hz: float | None = None
    frequencies_hz: tuple[float, ...] | None = None
    start_hz: float | None = None
    end_hz: float | None = None
    curve: SweepCurve = "linear"
    seed: int | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("amplitude", "duration_seconds")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("must be finite")
        return value

    @model_validator(mode="after")
    def _check_mode_fields(self) -> "SynthesisRequest":
        match self.mode:
            case "single":
                _require_positive("frequency_hz", self.frequency_hz)
            case "multi":
                if not self.frequencies_hz:
                    raise ValueError("frequencies_hz must contain at least one frequency")
                for index, frequency in enumerate(self.frequencies_hz):
                    _require_positive(f"frequencies_hz[{index}]", frequency)
            case "sweep":
                _require_positive("start_hz", self.start_hz)
                _require_positive("end_hz", self.end_hz)
        block_align = self.block_align
        if block_align > MAX_BLOCK_ALIGN:
            raise ValueError(
                f"channel_count {self.channel_count} at {self.bit_depth}-bit "
                f"exceeds the maximum block align of {MAX_BLOCK_ALIGN} bytes"
            )
        if self.total_frames * block_align > MAX_DATA_SIZE:
            raise ValueError("encoded data would exceed the 4 GiB WAV size limit")
        return self

    @property
    def total_frames(self) -> int:
        return math.floor(self.sample_rate * self.duration_seconds)

    @property
    def bytes_per_sample(self) -> int:
        return self.bit_depth // 8

    @property
    def block_align(self) -> int:
        return self.channel_count * self.bytes_per_sample

    @property
    def data_size(self) -> int:
        return self.total_frames * self.block_align


def _require_positive(name: str, value: float | None) -> None:
    if value is None:
        raise ValueError(f"{name} is required")
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"{name} must be a finite frequency > 0, got {value!r}")


def parse_request(payload: Mapping[str, Any]) -> SynthesisRequest:
    """Parse a request payload, raising typed errors on failure."""

    mode = payload.get("mode", "single")
    if mode not in MODES:
        raise UnsupportedModeError(f"Unknown mode: {mode!r}. Valid: {list(MODES)}")
    waveform = payload.get("waveform", "sine")
    if waveform not in WAVEFORMS:
        raise UnsupportedWaveformError(f"Unknown waveform: {waveform!r}. Valid: {list(WAVEFORMS)}")
    try:
        return SynthesisRequest.model_validate(payload)
    except ValidationError as exc:
        _LOGGER.warning("Failed to parse synthesis request: %s", exc)
        raise InvalidParameterError(str(exc)) from exc


def parse_frequency_list(text: str) -> tuple[float, ...]:
    """Parse ``"100, 250, 500"`` into frequencies, dropping non-positive entries."""

    frequencies: list[float] = []
    for part in text.split(","):
        token = part.strip()
        if not token:
            continue
        try:
            value = float(token)
        except ValueError:
            _LOGGER.debug("Skipping unparseable frequency %r", token)
            continue
        if math.isfinite(value) and value > 0:
            frequencies.append(value)
    if not frequencies:
        raise InvalidParameterError(f"No valid frequencies in {text!r}")
    return tuple(frequencies)
