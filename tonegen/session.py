"""Caller-owned live playback state and declarative oscillator plans.

A :class:`SynthesisSession` replaces process-wide "current oscillator" state:
each caller holds its own session, starts it with a request and stops it when
done. Stopping is always safe, including before the first ``play`` or after
playback has already finished.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field

from .config import SweepCurve, SynthesisRequest, Waveform
from .errors import PlaybackError, UnsupportedModeError
from .mixer import mixture_waveform, tone_amplitude
from .playback import PlaybackBackend, resolve_backend
from .sweep import sweep_waveform
from .synth import SampleBuffer, duplicate_channels, iter_mono_chunks, make_rng, tone_chunk

_LOGGER = logging.getLogger("tonegen.session")

LIVE_CHUNK_FRAMES = 4_096


class OscillatorSpec(BaseModel):
    waveform: Waveform
    frequency_hz: float = Field(gt=0.0)
    gain: float = Field(ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=True, extra="forbid")


class FrequencyRamp(BaseModel):
    start_hz: float = Field(gt=0.0)
    end_hz: float = Field(gt=0.0)
    curve: SweepCurve
    duration_seconds: float = Field(gt=0.0)

    model_config = ConfigDict(frozen=True, extra="forbid")


class LivePlan(BaseModel):
    """What an external oscillator device should run for a request."""

    oscillators: tuple[OscillatorSpec, ...]
    ramp: FrequencyRamp | None = None
    loop_noise: bool = False
    stop_after_seconds: float | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")


def plan_live(request: SynthesisRequest) -> LivePlan:
    match request.mode:
        case "single":
            assert request.frequency_hz is not None
            spec = OscillatorSpec(
                waveform=request.waveform,
                frequency_hz=request.frequency_hz,
                gain=request.amplitude,
            )
            return LivePlan(oscillators=(spec,), loop_noise=request.waveform == "noise")
        case "multi":
            assert request.frequencies_hz is not None
            gain = tone_amplitude(request.amplitude, len(request.frequencies_hz))
            waveform = mixture_waveform(request.waveform)
            return LivePlan(
                oscillators=tuple(
                    OscillatorSpec(waveform=waveform, frequency_hz=frequency, gain=gain)
                    for frequency in request.frequencies_hz
                )
            )
        case "sweep":
            assert request.start_hz is not None and request.end_hz is not None
            spec = OscillatorSpec(
                waveform=sweep_waveform(request.waveform),
                frequency_hz=request.start_hz,
                gain=request.amplitude,
            )
            ramp = FrequencyRamp(
                start_hz=request.start_hz,
                end_hz=request.end_hz,
                curve=request.curve,
                duration_seconds=request.duration_seconds,
            )
            return LivePlan(
                oscillators=(spec,),
                ramp=ramp,
                stop_after_seconds=request.duration_seconds,
            )
        case _:
            raise UnsupportedModeError(f"Unknown mode: {request.mode!r}")


class SynthesisSession:
    """Plays one request at a time through a live output backend."""

    def __init__(
        self,
        backend: PlaybackBackend | None = None,
        *,
        chunk_frames: int = LIVE_CHUNK_FRAMES,
        join_timeout: float = 2.0,
    ) -> None:
        self._backend = backend
        self._chunk_frames = chunk_frames
        self._join_timeout = join_timeout
        # Replaced on every play(); a worker only ever sees its own event.
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._error: BaseException | None = None
        self.request: SynthesisRequest | None = None

    @property
    def is_playing(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and not self._stop.is_set()

    def play(self, request: SynthesisRequest) -> bool:
        """Start playback; returns False when something is already playing."""

        with self._lock:
            if self.is_playing:
                _LOGGER.debug("Session already playing; ignoring play request")
                return False
            self._join()
            backend = self._backend or resolve_backend()
            self._stop = threading.Event()
            self._error = None
            self.request = request
            chunks = self._live_chunks(request, self._stop)
            self._thread = threading.Thread(
                target=self._run,
                args=(backend, chunks, request),
                name="tonegen-playback",
                daemon=True,
            )
            self._thread.start()
        _LOGGER.info("Playing %s/%s via %s", request.mode, request.waveform, backend.name)
        return True

    def stop(self) -> None:
        with self._lock:
            self._stop.set()
            self._join()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until playback ends; returns False if still running after ``timeout``."""

        thread = self._thread
        if thread is not None:
            thread.join(timeout)
            if thread.is_alive():
                return False
        if self._error is not None:
            error, self._error = self._error, None
            raise PlaybackError(f"Playback failed: {error}") from error
        return True

    def __enter__(self) -> "SynthesisSession":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.stop()

    def _join(self) -> None:
        thread = self._thread
        if thread is None:
            return
        if thread is not threading.current_thread():
            thread.join(timeout=self._join_timeout)
        if not thread.is_alive():
            self._thread = None

    def _run(
        self,
        backend: PlaybackBackend,
        chunks: Iterator[SampleBuffer],
        request: SynthesisRequest,
    ) -> None:
        try:
            backend.play_stream(chunks, request.sample_rate, request.channel_count)
        except Exception as exc:
            _LOGGER.warning("Playback via %s failed: %s", backend.name, exc, exc_info=True)
            self._error = exc

    def _live_chunks(
        self,
        request: SynthesisRequest,
        stop: threading.Event,
    ) -> Iterator[SampleBuffer]:
        count = self._chunk_frames
        if request.mode == "sweep":
            for mono in iter_mono_chunks(request, chunk_frames=count):
                if stop.is_set():
                    return
                yield duplicate_channels(mono, request.channel_count)
            return
        # Tones and mixtures run until stopped.
        rng = make_rng(request.seed)
        start = 0
        while not stop.is_set():
            mono = tone_chunk(request, start, count, rng=rng)
            yield duplicate_channels(mono, request.channel_count)
            start += count
