from __future__ import annotations

from .config import (
    BIT_DEPTHS,
    MODES,
    SWEEP_CURVES,
    WAVEFORMS,
    BitDepth,
    Mode,
    SweepCurve,
    SynthesisRequest,
    Waveform,
    parse_frequency_list,
    parse_request,
)
from .errors import (
    InvalidParameterError,
    PlaybackError,
    ToneGenError,
    UnsupportedModeError,
    UnsupportedWaveformError,
)
from .logging_utils import configure_logging as _configure_logging
from .presets import PRESET_NAMES, preset_request
from .render import WavFile, render, render_buffer, render_to, suggested_filename
from .session import LivePlan, SynthesisSession, plan_live
from .synth import synthesize
from .wav import WavHeader, parse_header

__all__ = [
    "BIT_DEPTHS",
    "MODES",
    "PRESET_NAMES",
    "SWEEP_CURVES",
    "WAVEFORMS",
    "BitDepth",
    "InvalidParameterError",
    "LivePlan",
    "Mode",
    "PlaybackError",
    "SweepCurve",
    "SynthesisRequest",
    "SynthesisSession",
    "ToneGenError",
    "UnsupportedModeError",
    "UnsupportedWaveformError",
    "WavFile",
    "WavHeader",
    "Waveform",
    "parse_frequency_list",
    "parse_header",
    "parse_request",
    "plan_live",
    "preset_request",
    "render",
    "render_buffer",
    "render_to",
    "suggested_filename",
    "synthesize",
]

__version__ = "0.1.0"

_configure_logging()
del _configure_logging
