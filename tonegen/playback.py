from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict

from .errors import PlaybackError
from .waveforms import FloatArray

_LOGGER = logging.getLogger("tonegen.playback")


class PlaybackBackend(BaseModel):
    """Live output device that consumes ``(channels, n)`` float chunks."""

    name: str
    play_stream: Callable[[Iterable[FloatArray], int, int], None]

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )


def _frames_first(chunk: FloatArray) -> NDArray[np.float32]:
    array = np.asarray(chunk, dtype=np.float32)
    if array.ndim == 1:
        array = array.reshape(1, -1)
    return np.ascontiguousarray(np.clip(array, -1.0, 1.0).T)


def load_backend() -> PlaybackBackend | None:
    return _load_sounddevice() or _load_simpleaudio()


def resolve_backend() -> PlaybackBackend:
    backend = load_backend()
    if backend is None:
        raise PlaybackError(
            "Live playback requires sounddevice or simpleaudio. "
            "Install one of them, or render to a file instead."
        )
    _LOGGER.debug("Using %s playback backend", backend.name)
    return backend


def _load_sounddevice() -> PlaybackBackend | None:
    try:
        import sounddevice as sd_module  # type: ignore[import]
    except (ImportError, OSError) as exc:
        _LOGGER.info("sounddevice not available: %s", exc, exc_info=True)
        return None
    sd: Any = sd_module

    def _play_stream(chunks: Iterable[FloatArray], sample_rate: int, channels: int) -> None:
        with sd.OutputStream(
            samplerate=sample_rate,
            channels=channels,
            dtype="float32",
        ) as stream:
            for chunk in chunks:
                stream.write(_frames_first(chunk))

    return PlaybackBackend(name="sounddevice", play_stream=_play_stream)


def _load_simpleaudio() -> PlaybackBackend | None:
    try:
        import simpleaudio as sa_module  # type: ignore[import]
    except ImportError as exc:
        _LOGGER.info("simpleaudio not available: %s", exc, exc_info=True)
        return None
    sa: Any = sa_module

    def _play_stream(chunks: Iterable[FloatArray], sample_rate: int, channels: int) -> None:
        # simpleaudio plays whole buffers, so each chunk is played to completion.
        for chunk in chunks:
            frames = _frames_first(chunk)
            audio = (frames * 32_767).astype(np.int16)
            play = sa.play_buffer(audio, channels, 2, sample_rate)
            play.wait_done()

    return PlaybackBackend(name="simpleaudio", play_stream=_play_stream)
