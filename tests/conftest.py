"""Shared fixtures for the mulawkit test suite."""

import struct

import pytest


def build_wav(
    samples=(),
    channels=1,
    sample_rate=8000,
    bits_per_sample=16,
    audio_format=1,
    fmt_extra=b"",
    extra_chunks=(),
    data_size=None,
    byte_rate=None,
):
    """Assemble a RIFF/WAVE file in memory.

    ``samples`` are interleaved int16 values. ``extra_chunks`` is a list of
    (tag, payload) pairs placed between the fmt and data chunks.
    """
    pcm = struct.pack(f"<{len(samples)}h", *samples)
    block_align = channels * bits_per_sample // 8
    if byte_rate is None:
        byte_rate = sample_rate * block_align
    fmt_body = struct.pack(
        "<HHIIHH", audio_format, channels, sample_rate, byte_rate, block_align, bits_per_sample
    ) + fmt_extra
    body = b"fmt " + struct.pack("<I", len(fmt_body)) + fmt_body
    for tag, payload in extra_chunks:
        body += tag + struct.pack("<I", len(payload)) + payload
    size = len(pcm) if data_size is None else data_size
    body += b"data" + struct.pack("<I", size) + pcm
    return b"RIFF" + struct.pack("<I", 4 + len(body)) + b"WAVE" + body


@pytest.fixture
def make_wav():
    return build_wav
