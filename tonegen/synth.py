from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TypeAlias

import numpy as np
from numpy.typing import NDArray

from .config import DEFAULT_CHUNK_FRAMES, SynthesisRequest
from .errors import InvalidParameterError, UnsupportedModeError
from .mixer import mix_tones
from .sweep import SweepGenerator
from .waveforms import FloatArray, render_waveform

_LOGGER = logging.getLogger("tonegen.synth")

# (channel_count, frames); every channel carries the same mono signal.
SampleBuffer: TypeAlias = NDArray[np.float64]


def frame_times(start: int, count: int, sample_rate: int) -> FloatArray:
    return (start + np.arange(count, dtype=np.float64)) / sample_rate


def resolve_seed(request: SynthesisRequest) -> int | None:
    """Seed to use for noise; a fresh one is drawn when the request has none."""
    if request.waveform != "noise" or request.mode != "single":
        return None
    if request.seed is not None:
        return request.seed
    return int(np.random.SeedSequence().entropy)


def make_rng(seed: int | None) -> np.random.Generator:
    return np.random.default_rng(seed)


def tone_chunk(
    request: SynthesisRequest,
    start: int,
    count: int,
    *,
    rng: np.random.Generator | None = None,
) -> FloatArray:
    """Samples ``start .. start + count`` of a single tone or tone mixture."""

    times = frame_times(start, count, request.sample_rate)
    match request.mode:
        case "single":
            assert request.frequency_hz is not None
            return render_waveform(
                request.waveform,
                times,
                request.frequency_hz,
                request.amplitude,
                rng=rng,
            )
        case "multi":
            assert request.frequencies_hz is not None
            return mix_tones(request.waveform, times, request.frequencies_hz, request.amplitude)
        case "sweep":
            raise InvalidParameterError("Sweeps are stateful; render them with SweepGenerator")
        case _:
            raise UnsupportedModeError(f"Unknown mode: {request.mode!r}")


def sweep_generator(request: SynthesisRequest) -> SweepGenerator:
    assert request.start_hz is not None and request.end_hz is not None
    return SweepGenerator(
        request.start_hz,
        request.end_hz,
        request.duration_seconds,
        request.sample_rate,
        curve=request.curve,
        waveform=request.waveform,
        amplitude=request.amplitude,
    )


def iter_mono_chunks(
    request: SynthesisRequest,
    *,
    chunk_frames: int = DEFAULT_CHUNK_FRAMES,
    seed: int | None = None,
) -> Iterator[FloatArray]:
    """Yield the request's mono signal in chunks of at most ``chunk_frames``."""

    if chunk_frames <= 0:
        raise InvalidParameterError("chunk_frames must be > 0")
    total = request.total_frames
    match request.mode:
        case "single" | "multi":
            rng = make_rng(seed if seed is not None else request.seed)
            for start in range(0, total, chunk_frames):
                count = min(chunk_frames, total - start)
                yield tone_chunk(request, start, count, rng=rng)
        case "sweep":
            generator = sweep_generator(request)
            for start in range(0, total, chunk_frames):
                yield generator.next_chunk(min(chunk_frames, total - start))
        case _:
            raise UnsupportedModeError(f"Unknown mode: {request.mode!r}")


def duplicate_channels(mono: FloatArray, channel_count: int) -> SampleBuffer:
    return np.tile(np.asarray(mono, dtype=np.float64), (channel_count, 1))


def iter_chunks(
    request: SynthesisRequest,
    *,
    chunk_frames: int = DEFAULT_CHUNK_FRAMES,
    seed: int | None = None,
) -> Iterator[SampleBuffer]:
    for mono in iter_mono_chunks(request, chunk_frames=chunk_frames, seed=seed):
        yield duplicate_channels(mono, request.channel_count)


def synthesize(
    request: SynthesisRequest,
    *,
    chunk_frames: int = DEFAULT_CHUNK_FRAMES,
    seed: int | None = None,
) -> SampleBuffer:
    """Render the whole request into a ``(channel_count, frames)`` float buffer."""

    _LOGGER.info(
        "Synthesizing %s/%s: %d frames x %d channels at %d Hz",
        request.mode,
        request.waveform,
        request.total_frames,
        request.channel_count,
        request.sample_rate,
    )
    chunks = list(iter_mono_chunks(request, chunk_frames=chunk_frames, seed=seed))
    mono = np.concatenate(chunks) if chunks else np.zeros(0, dtype=np.float64)
    return duplicate_channels(mono, request.channel_count)
