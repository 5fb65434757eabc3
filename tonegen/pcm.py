"""Quantization of float samples into little-endian signed PCM words."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import BIT_DEPTHS
from .errors import InvalidParameterError

IntArray = NDArray[np.int64]

# bit depth -> (negative scale, positive scale)
_SCALES: Mapping[int, tuple[int, int]] = MappingProxyType(
    {
        16: (32_768, 32_767),
        24: (8_388_608, 8_388_607),
        32: (2_147_483_648, 2_147_483_647),
    }
)


def _check_depth(bit_depth: int) -> tuple[int, int]:
    scales = _SCALES.get(bit_depth)
    if scales is None:
        raise InvalidParameterError(
            f"Unsupported bit depth: {bit_depth!r}. Valid: {list(BIT_DEPTHS)}"
        )
    return scales


def sample_bounds(bit_depth: int) -> tuple[int, int]:
    """Inclusive (min, max) integer range of one sample word."""
    negative, positive = _check_depth(bit_depth)
    return -negative, positive


def quantize(samples: ArrayLike, bit_depth: int) -> IntArray:
    """Clamp to [-1, 1] and scale asymmetrically to signed integers.

    16- and 24-bit words are rounded half up (``floor(x + 0.5)``); 32-bit
    words are truncated toward zero.
    """

    negative, positive = _check_depth(bit_depth)
    clamped = np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)
    scaled = np.where(clamped < 0.0, clamped * negative, clamped * positive)
    if bit_depth == 32:
        words = np.trunc(scaled)
    else:
        words = np.floor(scaled + 0.5)
    return words.astype(np.int64)


def encode_samples(samples: ArrayLike, bit_depth: int) -> bytes:
    """Quantize and pack samples as little-endian words of ``bit_depth`` bits."""

    words = quantize(samples, bit_depth)
    match bit_depth:
        case 16:
            return words.astype("<i2").tobytes()
        case 24:
            # Keep the low three bytes of each little-endian 32-bit word.
            packed = words.astype("<i4").view(np.uint8).reshape(-1, 4)[:, :3]
            return packed.tobytes()
        case 32:
            return words.astype("<i4").tobytes()
        case _:
            raise InvalidParameterError(f"Unsupported bit depth: {bit_depth!r}")
