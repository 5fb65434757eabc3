from __future__ import annotations

import io
import struct
from pathlib import Path

import numpy as np
import pytest

from tonegen.config import SynthesisRequest
from tonegen.render import WavFile, render, render_buffer, render_to, suggested_filename
from tonegen.wav import HEADER_SIZE


def test_reference_single_tone_file() -> None:
    request = SynthesisRequest(
        mode="single",
        waveform="sine",
        frequency_hz=440.0,
        amplitude=0.5,
        duration_seconds=1.0,
        sample_rate=8_000,
        channel_count=1,
        bit_depth=16,
        normalize=False,
    )
    wav = render(request)
    assert len(wav.data) == 44 + 8_000 * 2
    assert struct.unpack_from("<I", wav.data, 24)[0] == 8_000
    assert struct.unpack_from("<I", wav.data, 40)[0] == 16_000
    assert wav.filename == "tone-sine-440Hz-16bit.wav"


@pytest.mark.parametrize("bit_depth", [16, 24, 32])
@pytest.mark.parametrize("channel_count", [1, 2, 5])
def test_header_round_trip(bit_depth: int, channel_count: int) -> None:
    request = SynthesisRequest(
        frequency_hz=1000.0,
        duration_seconds=0.05,
        sample_rate=22_050,
        channel_count=channel_count,
        bit_depth=bit_depth,  # type: ignore[arg-type]
    )
    wav = render(request)
    header = wav.header
    assert header.sample_rate == 22_050
    assert header.channel_count == channel_count
    assert header.bit_depth == bit_depth
    assert header.data_size == request.total_frames * channel_count * (bit_depth // 8)
    assert len(wav.data) == HEADER_SIZE + header.data_size
    assert wav.frames == request.total_frames


def test_decoded_samples_match_the_signal() -> None:
    request = SynthesisRequest(
        mode="multi",
        frequencies_hz=(200.0, 300.0),
        amplitude=0.6,
        duration_seconds=0.1,
        sample_rate=16_000,
        channel_count=2,
        bit_depth=24,
    )
    decoded = render(request).samples()
    expected = render_buffer(request)
    assert decoded.shape == expected.shape
    assert np.allclose(decoded, expected, atol=1e-6)


def test_over_range_mixture_decodes_clamped() -> None:
    # Two coherent tones at amp/sqrt(2) each can peak above full scale.
    request = SynthesisRequest(
        mode="multi",
        frequencies_hz=(200.0, 300.0),
        amplitude=0.8,
        duration_seconds=0.1,
        sample_rate=16_000,
        bit_depth=24,
    )
    expected = render_buffer(request)
    assert float(np.max(np.abs(expected))) > 1.0
    decoded = render(request).samples()
    assert float(np.max(np.abs(decoded))) <= 1.0
    assert np.allclose(decoded, np.clip(expected, -1.0, 1.0), atol=1e-6)


def test_normalized_render_peaks_at_full_scale() -> None:
    request = SynthesisRequest(
        frequency_hz=440.0, amplitude=0.2, duration_seconds=0.1, normalize=True
    )
    buffer = render_buffer(request)
    assert float(np.max(np.abs(buffer))) == pytest.approx(1.0, abs=1e-6)
    decoded = render(request).samples()
    assert float(np.max(np.abs(decoded))) == pytest.approx(1.0, abs=1e-4)


@pytest.mark.parametrize(
    "fields",
    [
        {"mode": "single", "waveform": "square", "frequency_hz": 97.0},
        {"mode": "multi", "waveform": "sawtooth", "frequencies_hz": (60.0, 125.0)},
        {"mode": "sweep", "waveform": "triangle", "start_hz": 20.0, "end_hz": 4000.0, "curve": "log"},
        {"mode": "single", "waveform": "noise", "frequency_hz": 1.0, "seed": 11},
    ],
)
def test_streaming_matches_in_memory(fields: dict[str, object], tmp_path: Path) -> None:
    request = SynthesisRequest.model_validate(
        {
            "duration_seconds": 0.3,
            "sample_rate": 8_000,
            "channel_count": 2,
            "bit_depth": 32,
            "normalize": True,
            **fields,
        }
    )
    expected = render(request).data

    sink = io.BytesIO()
    written = render_to(request, sink)
    assert written == len(expected)
    assert sink.getvalue() == expected

    target = tmp_path / "streamed.wav"
    render_to(request, target)
    assert target.read_bytes() == expected


def test_streaming_normalizes_unseeded_noise_consistently() -> None:
    request = SynthesisRequest(
        waveform="noise",
        frequency_hz=1.0,
        amplitude=0.3,
        duration_seconds=0.2,
        sample_rate=8_000,
        normalize=True,
    )
    sink = io.BytesIO()
    render_to(request, sink, chunk_frames=100)
    decoded = WavFile(data=sink.getvalue()).samples()
    assert float(np.max(np.abs(decoded))) == pytest.approx(1.0, abs=1e-4)


def test_suggested_filenames() -> None:
    single = SynthesisRequest(waveform="square", frequency_hz=1000.0, bit_depth=24)
    multi = SynthesisRequest(mode="multi", frequencies_hz=(1.0, 2.0))
    sweep = SynthesisRequest(mode="sweep", start_hz=20.0, end_hz=20000.0, curve="log", bit_depth=32)
    assert suggested_filename(single) == "tone-square-1000Hz-24bit.wav"
    assert suggested_filename(multi) == "multi-tone-sine-16bit.wav"
    assert suggested_filename(sweep) == "sweep-20-20000Hz-log-32bit.wav"


def test_wav_file_save(tmp_path: Path) -> None:
    request = SynthesisRequest(frequency_hz=250.0, duration_seconds=0.25, sample_rate=8_000)
    wav = render(request)
    path = wav.save(tmp_path / "out.wav")
    assert path.read_bytes() == wav.data
    assert wav.duration_seconds == pytest.approx(0.25)
    assert wav.sample_rate == 8_000
    assert wav.channel_count == 1
    assert wav.bit_depth == 16
