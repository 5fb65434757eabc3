"""Named calibration presets: octave-band test tones, noise, sweep and mixture."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from .config import DEFAULT_SAMPLE_RATE, SynthesisRequest, parse_request
from .errors import InvalidParameterError

# Hz -> amplitude; bass tones run hotter than treble ones.
FREQUENCY_PRESETS: Mapping[int, float] = MappingProxyType(
    {
        20: 0.9,
        35: 0.9,
        40: 0.9,
        60: 0.8,
        80: 0.8,
        100: 0.8,
        125: 0.8,
        250: 0.7,
        315: 0.7,
        500: 0.7,
        630: 0.7,
        1000: 0.7,
        1250: 0.7,
        2000: 0.6,
        2500: 0.6,
        4000: 0.6,
        5000: 0.6,
        8000: 0.5,
        10000: 0.5,
        12500: 0.5,
        16000: 0.5,
    }
)

# Both noise presets use the same uniform white-noise generator.
_NOISE = {
    "mode": "single",
    "waveform": "noise",
    "frequency_hz": 1000.0,
    "amplitude": 0.7,
    "duration_seconds": 30.0,
    "sample_rate": DEFAULT_SAMPLE_RATE,
    "channel_count": 2,
}

NAMED_PRESETS: Mapping[str, Mapping[str, Any]] = MappingProxyType(
    {
        "whitenoise": MappingProxyType(_NOISE),
        "pinknoise": MappingProxyType(_NOISE),
        "sweep": MappingProxyType(
            {
                "mode": "sweep",
                "waveform": "sine",
                "start_hz": 20.0,
                "end_hz": 20000.0,
                "curve": "log",
                "amplitude": 0.7,
                "duration_seconds": 30.0,
                "sample_rate": DEFAULT_SAMPLE_RATE,
            }
        ),
        "multi": MappingProxyType(
            {
                "mode": "multi",
                "waveform": "sine",
                "frequencies_hz": (100.0, 250.0, 500.0, 1000.0),
                "amplitude": 0.7,
                "duration_seconds": 10.0,
                "sample_rate": DEFAULT_SAMPLE_RATE,
            }
        ),
    }
)


def _frequency_preset_name(frequency: int) -> str:
    return f"{frequency}hz"


PRESET_NAMES: tuple[str, ...] = tuple(
    [_frequency_preset_name(frequency) for frequency in FREQUENCY_PRESETS] + list(NAMED_PRESETS)
)


def frequency_preset(frequency: int) -> dict[str, Any]:
    try:
        amplitude = FREQUENCY_PRESETS[frequency]
    except KeyError as exc:
        raise InvalidParameterError(f"No preset for {frequency} Hz") from exc
    return {
        "mode": "single",
        "waveform": "sine",
        "frequency_hz": float(frequency),
        "amplitude": amplitude,
        "duration_seconds": 10.0,
        "sample_rate": DEFAULT_SAMPLE_RATE,
        "channel_count": 1,
    }


def preset_payload(name: str) -> dict[str, Any]:
    key = name.strip().lower()
    if key in NAMED_PRESETS:
        return dict(NAMED_PRESETS[key])
    digits = key.removesuffix("hz")
    if digits.isdigit():
        return frequency_preset(int(digits))
    raise InvalidParameterError(f"Unknown preset: {name!r}. Valid: {list(PRESET_NAMES)}")


def preset_request(name: str, **overrides: Any) -> SynthesisRequest:
    """Build the request for preset ``name``; keyword overrides win."""

    payload = preset_payload(name)
    payload.update(overrides)
    return parse_request(payload)
