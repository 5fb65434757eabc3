"""Canonical 44-byte RIFF/WAVE framing for interleaved PCM data."""

from __future__ import annotations

import struct
from collections.abc import Iterable
from typing import BinaryIO

import numpy as np
from numpy.typing import ArrayLike
from pydantic import BaseModel, ConfigDict

from .config import BIT_DEPTHS, MAX_BLOCK_ALIGN, MAX_DATA_SIZE
from .errors import InvalidParameterError
from .pcm import encode_samples
from .waveforms import FloatArray

HEADER_SIZE = 44
PCM_FORMAT = 1
FMT_CHUNK_SIZE = 16


class WavHeader(BaseModel):
    channel_count: int
    sample_rate: int
    bit_depth: int
    data_size: int
    audio_format: int = PCM_FORMAT

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def block_align(self) -> int:
        return self.channel_count * (self.bit_depth // 8)

    @property
    def byte_rate(self) -> int:
        return self.sample_rate * self.block_align

    @property
    def frames(self) -> int:
        return self.data_size // self.block_align if self.block_align else 0

    @property
    def duration_seconds(self) -> float:
        return self.frames / self.sample_rate if self.sample_rate else 0.0


def build_header(
    *,
    frames: int,
    channel_count: int,
    sample_rate: int,
    bit_depth: int,
) -> bytes:
    """Generate the 44-byte header for ``frames`` frames of PCM audio."""

    if bit_depth not in BIT_DEPTHS:
        raise InvalidParameterError(f"Unsupported bit depth: {bit_depth!r}")
    if channel_count < 1 or sample_rate < 1 or frames < 0:
        raise InvalidParameterError(
            f"Invalid WAV layout: frames={frames}, channels={channel_count}, rate={sample_rate}"
        )
    block_align = channel_count * (bit_depth // 8)
    data_size = frames * block_align
    if block_align > MAX_BLOCK_ALIGN or data_size > MAX_DATA_SIZE:
        raise InvalidParameterError("WAV layout exceeds RIFF size limits")

    header = bytearray(HEADER_SIZE)

    # RIFF chunk descriptor
    header[0:4] = b"RIFF"
    struct.pack_into("<I", header, 4, 36 + data_size)
    header[8:12] = b"WAVE"

    # fmt sub-chunk
    header[12:16] = b"fmt "
    struct.pack_into("<I", header, 16, FMT_CHUNK_SIZE)
    struct.pack_into("<H", header, 20, PCM_FORMAT)
    struct.pack_into("<H", header, 22, channel_count)
    struct.pack_into("<I", header, 24, sample_rate)
    struct.pack_into("<I", header, 28, sample_rate * block_align)
    struct.pack_into("<H", header, 32, block_align)
    struct.pack_into("<H", header, 34, bit_depth)

    # data sub-chunk
    header[36:40] = b"data"
    struct.pack_into("<I", header, 40, data_size)

    return bytes(header)


def parse_header(data: bytes) -> WavHeader:
    """Read back a canonical header written by :func:`build_header`."""

    if len(data) < HEADER_SIZE:
        raise InvalidParameterError(f"WAV data too short: {len(data)} bytes")
    if data[0:4] != b"RIFF" or data[8:12] != b"WAVE":
        raise InvalidParameterError("Not a RIFF/WAVE file")
    if data[12:16] != b"fmt " or data[36:40] != b"data":
        raise InvalidParameterError(
            "Unexpected chunk layout; only canonical 44-byte headers are supported"
        )
    audio_format, channel_count, sample_rate = struct.unpack_from("<HHI", data, 20)
    bit_depth = struct.unpack_from("<H", data, 34)[0]
    data_size = struct.unpack_from("<I", data, 40)[0]
    return WavHeader(
        channel_count=channel_count,
        sample_rate=sample_rate,
        bit_depth=bit_depth,
        data_size=data_size,
        audio_format=audio_format,
    )


def interleave(buffer: ArrayLike) -> FloatArray:
    """Flatten ``(channels, frames)`` into frame-major order (c0, c1, ..., c0, ...)."""

    array = np.asarray(buffer, dtype=np.float64)
    if array.ndim == 1:
        return array
    return np.ascontiguousarray(array.T).reshape(-1)


def encode_frames(buffer: ArrayLike, bit_depth: int) -> bytes:
    return encode_samples(interleave(buffer), bit_depth)


def wav_bytes(buffer: ArrayLike, *, sample_rate: int, bit_depth: int) -> bytes:
    """Header plus interleaved data for a whole ``(channels, frames)`` buffer."""

    array = np.asarray(buffer, dtype=np.float64)
    if array.ndim == 1:
        array = array.reshape(1, -1)
    channel_count, frames = array.shape
    header = build_header(
        frames=frames,
        channel_count=channel_count,
        sample_rate=sample_rate,
        bit_depth=bit_depth,
    )
    return header + encode_frames(array, bit_depth)


def write_wav(
    sink: BinaryIO,
    chunks: Iterable[ArrayLike],
    *,
    frames: int,
    channel_count: int,
    sample_rate: int,
    bit_depth: int,
) -> int:
    """Stream ``(channels, n)`` chunks to ``sink`` after a pre-computed header.

    Returns the number of bytes written. Raises if the chunks do not add up to
    exactly ``frames`` frames, since the header has already been committed.
    """

    header = build_header(
        frames=frames,
        channel_count=channel_count,
        sample_rate=sample_rate,
        bit_depth=bit_depth,
    )
    sink.write(header)
    written = len(header)
    frames_written = 0
    for chunk in chunks:
        array = np.asarray(chunk, dtype=np.float64)
        if array.ndim == 1:
            array = array.reshape(1, -1)
        if array.shape[0] != channel_count:
            raise InvalidParameterError(
                f"Chunk has {array.shape[0]} channels, expected {channel_count}"
            )
        payload = encode_frames(array, bit_depth)
        sink.write(payload)
        written += len(payload)
        frames_written += array.shape[1]
    if frames_written != frames:
        raise InvalidParameterError(
            f"Streamed {frames_written} frames but the header declares {frames}"
        )
    return written
