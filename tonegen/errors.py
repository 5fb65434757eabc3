from __future__ import annotations


class ToneGenError(Exception):
    """Base error for the tonegen library."""


class InvalidParameterError(ToneGenError):
    """Raised when a synthesis request or encoder argument is out of range."""


class UnsupportedModeError(ToneGenError):
    """Raised when a request names a synthesis mode that does not exist."""


class UnsupportedWaveformError(ToneGenError):
    """Raised when a request names a waveform that does not exist."""


class PlaybackError(ToneGenError):
    """Raised when no live-output backend is available or playback fails."""
