"""G.711 mu-law codec for mulawkit.

Pure-Python sample-level encode/decode plus table-driven bulk helpers for
PCM16 little-endian buffers. Encoding uses the continuous mu-law curve
(mu=255, bias=132); decoding uses the ITU-T piecewise segment expansion.
"""

from __future__ import annotations

import math
import struct

# ---------------------------------------------------------------------------
# G.711 mu-law parameters
# ---------------------------------------------------------------------------

MULAW_MU = 255
MULAW_BIAS = 132
_MULAW_MAX = 32767
_LOG_1_PLUS_MU = math.log(1 + MULAW_MU)


def _mulaw_encode_sample(sample: int) -> int:
    """Encode a single 16-bit PCM sample to a mu-law byte."""
    # Determine sign
    if sample < 0:
        sign = 0x80
        sample = -sample
    else:
        sign = 0

    # Add bias and clip
    biased = min(sample + MULAW_BIAS, _MULAW_MAX)

    value = math.floor(
        math.log(1 + (MULAW_MU * biased) / _MULAW_MAX) / _LOG_1_PLUS_MU * 128
    )
    # A fully saturated input lands exactly on 128, which would clobber the sign bit
    value = min(value, 0x7F)

    return value ^ sign ^ 0x7F


def _mulaw_decode_sample(byte: int) -> int:
    """Expand a mu-law byte back to a 16-bit PCM sample."""
    inverted = ~byte & 0xFF
    exponent = (inverted >> 4) & 0x07
    mantissa = inverted & 0x0F
    magnitude = (((mantissa << 3) + MULAW_BIAS) << exponent) - MULAW_BIAS
    # The encoder stores the sign bit uncomplemented
    if byte & 0x80:
        return -magnitude
    return magnitude


# Pre-compute full decode table: mu-law byte -> PCM16 sample
_MULAW_DECODE_TABLE: list[int] = [_mulaw_decode_sample(_i) for _i in range(256)]

# Pre-compute full encode table: 16-bit unsigned index -> mu-law byte
_MULAW_ENCODE_TABLE: list[int] = []
for _i in range(65536):
    _s = _i if _i < 32768 else _i - 65536  # convert to signed
    _MULAW_ENCODE_TABLE.append(_mulaw_encode_sample(_s))


def mulaw_encode_sample(sample: int) -> int:
    """Encode one signed 16-bit sample (values outside int16 are clamped)."""
    if sample > 32767:
        sample = 32767
    elif sample < -32768:
        sample = -32768
    return _MULAW_ENCODE_TABLE[sample & 0xFFFF]


def mulaw_decode_sample(byte: int) -> int:
    """Decode one mu-law byte to a signed 16-bit sample."""
    return _MULAW_DECODE_TABLE[byte & 0xFF]


def mulaw_segment(byte: int) -> tuple[int, int]:
    """Return the (exponent, mantissa) pair stored in a mu-law byte."""
    inverted = ~byte & 0xFF
    return (inverted >> 4) & 0x07, inverted & 0x0F


def mulaw_decode(data: bytes) -> bytes:
    """Decode mu-law bytes to PCM16 little-endian bytes."""
    out = bytearray(len(data) * 2)
    for i, b in enumerate(data):
        sample = _MULAW_DECODE_TABLE[b]
        struct.pack_into("<h", out, i * 2, sample)
    return bytes(out)


def mulaw_encode(data: bytes) -> bytes:
    """Encode PCM16 little-endian bytes to mu-law bytes."""
    n_samples = len(data) // 2
    out = bytearray(n_samples)
    for i in range(n_samples):
        sample = struct.unpack_from("<h", data, i * 2)[0]
        # Convert signed to unsigned index
        idx = sample & 0xFFFF
        out[i] = _MULAW_ENCODE_TABLE[idx]
    return bytes(out)
