from __future__ import annotations

import math

import numpy as np
import pytest

from tonegen.config import SynthesisRequest
from tonegen.errors import InvalidParameterError
from tonegen.sweep import SweepGenerator
from tonegen.synth import iter_chunks, resolve_seed, synthesize, tone_chunk


def test_buffer_shape_and_identical_channels() -> None:
    request = SynthesisRequest(
        frequency_hz=440.0, duration_seconds=0.1, sample_rate=8_000, channel_count=3
    )
    buffer = synthesize(request)
    assert buffer.shape == (3, 800)
    assert np.array_equal(buffer[0], buffer[1])
    assert np.array_equal(buffer[0], buffer[2])


def test_sine_rms_matches_theory() -> None:
    # 1 s at 440 Hz holds a whole number of periods.
    request = SynthesisRequest(
        frequency_hz=440.0, amplitude=0.6, duration_seconds=1.0, sample_rate=44_100
    )
    buffer = synthesize(request)
    rms = float(np.sqrt(np.mean(buffer[0] ** 2)))
    assert rms == pytest.approx(0.6 / math.sqrt(2), rel=1e-4)


@pytest.mark.parametrize("waveform", ["sine", "square", "triangle", "sawtooth"])
@pytest.mark.parametrize(
    "mode_fields",
    [
        {"mode": "single", "frequency_hz": 330.0},
        {"mode": "multi", "frequencies_hz": (220.0, 330.0, 440.0)},
        {"mode": "sweep", "start_hz": 50.0, "end_hz": 5000.0, "curve": "log"},
    ],
)
def test_tonal_output_is_deterministic(waveform: str, mode_fields: dict[str, object]) -> None:
    request = SynthesisRequest.model_validate(
        {"waveform": waveform, "duration_seconds": 0.2, "sample_rate": 8_000, **mode_fields}
    )
    assert np.array_equal(synthesize(request), synthesize(request))


def test_unseeded_noise_differs_between_runs() -> None:
    request = SynthesisRequest(waveform="noise", frequency_hz=1.0, duration_seconds=0.1)
    assert not np.array_equal(synthesize(request), synthesize(request))


def test_seeded_noise_repeats() -> None:
    request = SynthesisRequest(waveform="noise", frequency_hz=1.0, duration_seconds=0.1, seed=42)
    first = synthesize(request)
    assert np.array_equal(first, synthesize(request))
    assert float(np.max(np.abs(first))) <= request.amplitude


def test_chunking_does_not_change_tones() -> None:
    request = SynthesisRequest(
        mode="multi",
        waveform="triangle",
        frequencies_hz=(100.0, 440.0),
        duration_seconds=0.5,
        sample_rate=8_000,
    )
    whole = synthesize(request)
    pieces = np.concatenate(list(iter_chunks(request, chunk_frames=333)), axis=1)
    assert np.allclose(whole, pieces, atol=1e-12)


def test_sweep_mode_uses_phase_accumulation() -> None:
    request = SynthesisRequest(
        mode="sweep",
        waveform="sawtooth",
        start_hz=100.0,
        end_hz=1000.0,
        amplitude=0.5,
        duration_seconds=0.25,
        sample_rate=8_000,
        channel_count=2,
    )
    generator = SweepGenerator(100.0, 1000.0, 0.25, 8_000, waveform="sawtooth", amplitude=0.5)
    expected = generator.next_chunk(2_000)
    buffer = synthesize(request, chunk_frames=2_000)
    assert np.array_equal(buffer[0], expected)
    assert np.array_equal(buffer[1], expected)


def test_multi_mode_substitutes_sine_for_noise() -> None:
    fields = {"mode": "multi", "frequencies_hz": (300.0, 500.0), "duration_seconds": 0.05}
    noisy = SynthesisRequest.model_validate({"waveform": "noise", **fields})
    sine = SynthesisRequest.model_validate({"waveform": "sine", **fields})
    assert np.array_equal(synthesize(noisy), synthesize(sine))


def test_resolve_seed_only_for_single_noise() -> None:
    assert resolve_seed(SynthesisRequest(frequency_hz=440.0)) is None
    assert resolve_seed(SynthesisRequest(waveform="noise", frequency_hz=1.0, seed=7)) == 7
    assert isinstance(resolve_seed(SynthesisRequest(waveform="noise", frequency_hz=1.0)), int)


def test_tone_chunk_refuses_sweeps() -> None:
    request = SynthesisRequest(mode="sweep", start_hz=20.0, end_hz=200.0)
    with pytest.raises(InvalidParameterError):
        tone_chunk(request, 0, 10)


def test_short_duration_can_yield_no_frames() -> None:
    request = SynthesisRequest(frequency_hz=440.0, duration_seconds=1e-5, sample_rate=8_000)
    assert synthesize(request).shape == (1, 0)
