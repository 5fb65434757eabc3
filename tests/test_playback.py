from __future__ import annotations

import numpy as np
import pytest

from tonegen import playback
from tonegen.errors import PlaybackError
from tonegen.playback import PlaybackBackend, resolve_backend


def test_resolve_backend_without_devices(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(playback, "_load_sounddevice", lambda: None)
    monkeypatch.setattr(playback, "_load_simpleaudio", lambda: None)
    with pytest.raises(PlaybackError):
        resolve_backend()


def test_resolve_backend_prefers_sounddevice(monkeypatch: pytest.MonkeyPatch) -> None:
    first = PlaybackBackend(name="first", play_stream=lambda chunks, rate, channels: None)
    second = PlaybackBackend(name="second", play_stream=lambda chunks, rate, channels: None)
    monkeypatch.setattr(playback, "_load_sounddevice", lambda: first)
    monkeypatch.setattr(playback, "_load_simpleaudio", lambda: second)
    assert resolve_backend().name == "first"

    monkeypatch.setattr(playback, "_load_sounddevice", lambda: None)
    assert resolve_backend().name == "second"


def test_frames_first_layout_and_clipping() -> None:
    chunk = np.array([[0.5, 2.0, -3.0], [0.0, 0.25, -0.25]])
    frames = playback._frames_first(chunk)
    assert frames.dtype == np.float32
    assert frames.shape == (3, 2)
    assert frames[1, 0] == 1.0
    assert frames[2, 0] == -1.0

    mono = playback._frames_first(np.array([0.1, 0.2]))
    assert mono.shape == (2, 1)
