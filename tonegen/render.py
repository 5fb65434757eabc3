from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from pydantic import BaseModel, ConfigDict

from .audio import read_wav
from .config import DEFAULT_CHUNK_FRAMES, SynthesisRequest
from .errors import UnsupportedModeError
from .normalize import find_peak, normalization_gain, peak_normalize
from .synth import SampleBuffer, duplicate_channels, iter_mono_chunks, resolve_seed, synthesize
from .wav import WavHeader, parse_header, wav_bytes, write_wav
from .waveforms import FloatArray

_LOGGER = logging.getLogger("tonegen.render")


class WavFile(BaseModel):
    """An encoded WAV artifact produced from one synthesis request."""

    data: bytes
    filename: str = "tone.wav"

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def header(self) -> WavHeader:
        return parse_header(self.data)

    @property
    def sample_rate(self) -> int:
        return self.header.sample_rate

    @property
    def channel_count(self) -> int:
        return self.header.channel_count

    @property
    def bit_depth(self) -> int:
        return self.header.bit_depth

    @property
    def frames(self) -> int:
        return self.header.frames

    @property
    def duration_seconds(self) -> float:
        return self.header.duration_seconds

    def samples(self) -> FloatArray:
        """Decode the PCM payload back to ``(channels, frames)`` floats."""
        samples, _ = read_wav(self.data)
        return samples

    def save(self, path: str | Path | None = None) -> Path:
        target = Path(path) if path is not None else Path(self.filename)
        target.write_bytes(self.data)
        return target


def _format_hz(value: float | None) -> str:
    return f"{value:g}" if value is not None else "0"


def suggested_filename(request: SynthesisRequest) -> str:
    bits = f"{request.bit_depth}bit"
    match request.mode:
        case "single":
            stem = f"tone-{request.waveform}-{_format_hz(request.frequency_hz)}Hz"
        case "multi":
            stem = f"multi-tone-{request.waveform}"
        case "sweep":
            stem = (
                f"sweep-{_format_hz(request.start_hz)}-{_format_hz(request.end_hz)}Hz"
                f"-{request.curve}"
            )
        case _:
            raise UnsupportedModeError(f"Unknown mode: {request.mode!r}")
    return f"{stem}-{bits}.wav"


def render_buffer(request: SynthesisRequest) -> SampleBuffer:
    """Synthesize and, when requested, peak-normalize the float buffer."""

    buffer = synthesize(request, seed=resolve_seed(request))
    if request.normalize:
        buffer = peak_normalize(buffer)
    return buffer


def render(request: SynthesisRequest) -> WavFile:
    """Render a request fully in memory."""

    buffer = render_buffer(request)
    data = wav_bytes(buffer, sample_rate=request.sample_rate, bit_depth=request.bit_depth)
    _LOGGER.info("Rendered %s (%d bytes)", suggested_filename(request), len(data))
    return WavFile(data=data, filename=suggested_filename(request))


def _scaled_chunks(
    request: SynthesisRequest,
    *,
    chunk_frames: int,
    seed: int | None,
    gain: float,
) -> Iterator[SampleBuffer]:
    for mono in iter_mono_chunks(request, chunk_frames=chunk_frames, seed=seed):
        buffer = duplicate_channels(mono, request.channel_count)
        yield buffer * gain if gain != 1.0 else buffer


def render_to(
    request: SynthesisRequest,
    target: str | Path | BinaryIO,
    *,
    chunk_frames: int = DEFAULT_CHUNK_FRAMES,
) -> int:
    """Stream a request to a path or binary sink without holding the whole buffer.

    Normalized requests take two generation passes: one to find the peak and
    one to write. Noise is drawn from the same seed in both passes. Returns the
    number of bytes written.
    """

    seed = resolve_seed(request)
    gain = 1.0
    if request.normalize:
        peak = find_peak(iter_mono_chunks(request, chunk_frames=chunk_frames, seed=seed))
        gain = normalization_gain(peak)
        _LOGGER.debug("Streaming normalization peak %.6f gain %.6f", peak, gain)

    chunks = _scaled_chunks(request, chunk_frames=chunk_frames, seed=seed, gain=gain)
    layout = {
        "frames": request.total_frames,
        "channel_count": request.channel_count,
        "sample_rate": request.sample_rate,
        "bit_depth": request.bit_depth,
    }
    if isinstance(target, (str, Path)):
        path = Path(target)
        with path.open("wb") as handle:
            written = write_wav(handle, chunks, **layout)
        _LOGGER.info("Streamed %d bytes to %s", written, path)
        return written
    return write_wav(target, chunks, **layout)
